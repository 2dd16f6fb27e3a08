"""
Application factory.

    uvicorn inventory.main:create_app --factory --port 3000
    python -m inventory.main            # same, port from settings.PORT
"""

import logging
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.templating import Jinja2Templates

from inventory.api.error_handlers import register_exception_handlers
from inventory.api.navigation import Navigation
from inventory.api.rendering import Renderer
from inventory.api.routers import book_router, category_router
from inventory.config.settings import Settings, get_settings
from inventory.core.logging import RequestIDMiddleware, setup_logging
from inventory.database.session import create_engine_from_settings, create_session_maker

logger = logging.getLogger(__name__)

TEMPLATES_DIR = Path(__file__).resolve().parent / "templates"


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or get_settings()
    setup_logging(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        engine = create_engine_from_settings(settings)
        app.state.engine = engine
        app.state.session_maker = create_session_maker(engine)
        logger.info("app.startup", extra={"env": settings.ENV})
        try:
            yield
        finally:
            await engine.dispose()
            logger.info("app.shutdown")

    app = FastAPI(title="Book Inventory", lifespan=lifespan)
    app.state.settings = settings
    app.state.renderer = Renderer(
        templates=Jinja2Templates(directory=str(TEMPLATES_DIR)),
        navigation=Navigation.default(),
        production=settings.is_production,
    )

    app.add_middleware(RequestIDMiddleware)
    register_exception_handlers(app)

    @app.get("/", include_in_schema=False)
    async def index(request: Request):
        return request.app.state.renderer.page(request, "index.html", {"title": "Book Inventory"})

    @app.get("/health")
    async def health():
        return {"status": "OK"}

    app.include_router(category_router)
    app.include_router(book_router)

    return app


def run() -> None:
    import uvicorn

    settings = get_settings()
    uvicorn.run(create_app(settings), host="0.0.0.0", port=settings.PORT, log_config=None)


if __name__ == "__main__":
    run()
