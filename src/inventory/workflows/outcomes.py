"""
Values a workflow hands back to the HTTP layer.

Workflows decide *what* happens (redirect, re-render with errors, 404); the
routers only translate these values into responses.
"""

from dataclasses import dataclass, field
from typing import Any, Mapping, Union

from inventory.exceptions.base import ClassifiedError
from inventory.validators.form_validators import FieldError


@dataclass(frozen=True)
class Redirect:
    location: str
    status_code: int = 303


@dataclass(frozen=True)
class RenderForm:
    """
    A form page. `values` always echoes what the user submitted (or the stored
    entity for edit forms); `errors` are field-scoped, `error` is a single
    top-level message (store failures).
    """

    template: str
    values: Mapping[str, Any]
    context: Mapping[str, Any] = field(default_factory=dict)
    errors: tuple[FieldError, ...] = ()
    error: str | None = None
    status_code: int = 200


@dataclass(frozen=True)
class RenderPage:
    template: str
    context: Mapping[str, Any] = field(default_factory=dict)
    error: str | None = None
    status_code: int = 200


@dataclass(frozen=True)
class Failure:
    """Terminal for the request: rendered by the error page handler."""

    error: ClassifiedError


Outcome = Union[Redirect, RenderForm, RenderPage, Failure]
