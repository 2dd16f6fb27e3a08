import logging
import secrets

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.exceptions import HTTPException as StarletteHTTPException

from inventory.config.settings import Settings
from inventory.database.session import get_async_session
from inventory.workflows import BookWorkflow, CategoryWorkflow
from .rendering import Renderer

logger = logging.getLogger(__name__)

ADMIN_PASSWORD_FIELD = "adminPassword"
ADMIN_DENIED_MESSAGE = "Invalid admin password. Access denied."


def get_app_settings(request: Request) -> Settings:
    # The factory may receive explicit settings (tests); never re-read the environment here
    return request.app.state.settings


def get_renderer(request: Request) -> Renderer:
    return request.app.state.renderer


async def get_book_workflow(
    db: AsyncSession = Depends(get_async_session),
    settings: Settings = Depends(get_app_settings),
) -> BookWorkflow:
    return BookWorkflow(db, production=settings.is_production)


async def get_category_workflow(
    db: AsyncSession = Depends(get_async_session),
    settings: Settings = Depends(get_app_settings),
) -> CategoryWorkflow:
    return CategoryWorkflow(db, production=settings.is_production)


async def require_admin(request: Request, settings: Settings = Depends(get_app_settings)) -> None:
    """
    Gate for destructive routes. Inactive when ADMIN_PASSWORD is not configured;
    otherwise the submitted `adminPassword` form field must match it.
    """
    expected = settings.ADMIN_PASSWORD
    if not expected:
        return

    form = await request.form()
    supplied = form.get(ADMIN_PASSWORD_FIELD)
    if isinstance(supplied, str) and secrets.compare_digest(supplied.encode(), expected.encode()):
        return

    logger.warning("admin.denied", extra={"path": request.url.path, "method": request.method})
    raise StarletteHTTPException(status_code=403, detail=ADMIN_DENIED_MESSAGE)
