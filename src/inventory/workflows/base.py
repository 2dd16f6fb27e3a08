"""
Shared workflow plumbing.

Write requests follow one path:

    Validating -> Invalid  -> RenderForm(submitted values, field errors)       [400]
               -> Valid    -> Persisting -> Success -> commit, Redirect
                                         -> Failed  -> rollback, classify,
                                                       RenderForm(submitted values, top-level message)

Reads are Fetching -> Found (RenderPage) | NotFound (Failure).
"""

import logging
from typing import Any, Awaitable, Callable, Mapping

from sqlalchemy.ext.asyncio import AsyncSession

from inventory.exceptions.base import ClassifiedError
from inventory.exceptions.mapper import Attempt, db_error_handler
from inventory.validators.form_validators import ValidationResult
from .outcomes import RenderForm

logger = logging.getLogger(__name__)


def echo_values(raw: Mapping[str, Any]) -> dict[str, str]:
    """Submitted form values as plain strings, exactly as typed."""
    return {key: "" if value is None else str(value) for key, value in raw.items()}


class BaseWorkflow:
    """
    Args:
        db: the request's AsyncSession
        production: hide details of internal errors from users
    """

    model: type | None = None

    def __init__(self, db: AsyncSession, *, production: bool = False):
        self.db = db
        self.production = production

    async def persist(
        self,
        operation: str,
        action: Callable[[], Awaitable[Any]],
        values: Mapping[str, Any] | None = None,
    ) -> Attempt:
        """
        Run one repository write and commit it. Failures are rolled back and
        classified into `attempt.error`; nothing is raised.
        """
        async with db_error_handler(self.db, self.model, operation, values) as attempt:
            attempt.result = await action()
            await self.db.commit()

        if attempt.ok:
            logger.debug("workflow.persist.success", extra={"model": self._model_name, "operation": operation})
        else:
            logger.info(
                "workflow.persist.failed",
                extra={"model": self._model_name, "operation": operation, "kind": attempt.error.kind.value},
            )
        return attempt

    def message_for(self, error: ClassifiedError) -> str:
        return error.user_message(production=self.production)

    def invalid_form(
        self,
        template: str,
        raw: Mapping[str, Any],
        validation: ValidationResult,
        context: Mapping[str, Any],
    ) -> RenderForm:
        logger.info(
            "workflow.validation_failed",
            extra={"model": self._model_name, "fields": [e.field for e in validation.errors]},
        )
        return RenderForm(
            template=template,
            values=echo_values(raw),
            context=context,
            errors=tuple(validation.errors),
            status_code=400,
        )

    def failed_form(
        self,
        template: str,
        raw: Mapping[str, Any],
        error: ClassifiedError,
        context: Mapping[str, Any],
    ) -> RenderForm:
        return RenderForm(
            template=template,
            values=echo_values(raw),
            context=context,
            error=self.message_for(error),
            status_code=error.http_status,
        )

    @property
    def _model_name(self) -> str | None:
        return getattr(self.model, "__name__", None)
