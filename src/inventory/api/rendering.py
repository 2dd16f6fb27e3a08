"""
Turns workflow outcomes into HTTP responses.

`Renderer` is created once by the app factory (templates + navigation + the
production flag) and handed to routes and exception handlers through
`app.state`; every template render goes through it so the navigation and
error verbosity are never looked up from globals.
"""

import traceback
from dataclasses import dataclass
from typing import Any, Mapping

from fastapi import Request
from fastapi.responses import RedirectResponse, Response
from fastapi.templating import Jinja2Templates

from inventory.exceptions.base import InventoryError
from inventory.workflows.outcomes import Failure, Outcome, Redirect, RenderForm, RenderPage
from .navigation import Navigation


@dataclass(frozen=True)
class Renderer:
    templates: Jinja2Templates
    navigation: Navigation
    production: bool = False

    def page(
        self,
        request: Request,
        template: str,
        context: Mapping[str, Any] | None = None,
        *,
        status_code: int = 200,
    ) -> Response:
        ctx = {"nav": self.navigation, "error": None}
        ctx.update(context or {})
        return self.templates.TemplateResponse(request, template, ctx, status_code=status_code)

    def error_page(
        self,
        request: Request,
        *,
        status_code: int,
        message: str,
        exc: BaseException | None = None,
    ) -> Response:
        # Stack traces only leave the process outside production
        stack = None
        if exc is not None and not self.production:
            stack = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
        return self.page(
            request,
            "error.html",
            {"status_code": status_code, "message": message, "stack": stack},
            status_code=status_code,
        )

    def respond(self, request: Request, outcome: Outcome) -> Response:
        """
        Redirect -> 303, RenderForm/RenderPage -> template, Failure -> raises
        InventoryError for the exception handlers.
        """
        if isinstance(outcome, Redirect):
            return RedirectResponse(outcome.location, status_code=outcome.status_code)

        if isinstance(outcome, RenderForm):
            context = dict(outcome.context)
            context.update(
                values=outcome.values,
                errors=[e.to_dict() for e in outcome.errors],
                error=outcome.error,
            )
            return self.page(request, outcome.template, context, status_code=outcome.status_code)

        if isinstance(outcome, RenderPage):
            context = dict(outcome.context)
            context["error"] = outcome.error
            return self.page(request, outcome.template, context, status_code=outcome.status_code)

        if isinstance(outcome, Failure):
            raise InventoryError(outcome.error)

        raise TypeError(f"Unknown workflow outcome: {outcome!r}")
