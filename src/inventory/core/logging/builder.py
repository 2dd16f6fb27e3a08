# src/inventory/core/logging/builder.py
"""
Logging builder: assemble a dictConfig mapping from Settings and apply it.

    setup_logging(settings)   # once, from the app factory or a CLI entrypoint

Handlers wired by settings:

| LOG_TO_STDOUT | LOG_DIR | Handlers                          |
| ------------- | ------- | --------------------------------- |
| true          | any     | console + error_console           |
| false         | set     | console + file (app.log) + error_file (errors.log) |

`sqlalchemy.engine` stays at WARNING unless ENABLE_SQL_LOGGING is on; SQL
statements can carry user data.
"""

from __future__ import annotations

import logging
import logging.config
from pathlib import Path

from inventory.config.settings import Settings
from inventory.utils.logging import get_project_name

from . import handlers as handler_factories
from .filters import RedactFilter, RequestIdFilter
from .formatters import ColorFormatter, JsonFormatter

TEXT_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(request_id)s | %(message)s"


def _writes_files(settings: Settings) -> bool:
    return (not settings.LOG_TO_STDOUT) and bool(settings.LOG_DIR)


def _formatters(settings: Settings) -> dict:
    text_class = ColorFormatter if settings.LOG_FORMAT == "text" else logging.Formatter
    return {
        "standard": {"()": text_class, "format": TEXT_FORMAT},
        "json": {"()": JsonFormatter, "env": settings.ENV, "service": get_project_name()},
    }


def _handlers(settings: Settings) -> dict[str, dict]:
    wired = {"console": handler_factories.get_console_handler(settings)}
    if _writes_files(settings):
        wired["file"] = handler_factories.get_file_handler(settings)
        wired["error_file"] = handler_factories.get_error_file_handler(settings)
    else:
        wired["error_console"] = handler_factories.get_error_console_handler(settings)
    return wired


def _logger(level: str, handler_names: list[str], propagate: bool = False) -> dict:
    return {"level": level, "handlers": handler_names, "propagate": propagate}


def make_dict_config(settings: Settings) -> dict:
    """
    Build the dictConfig mapping.

    Formatters "standard" (ColorFormatter for LOG_FORMAT=text) and "json";
    filters "request_id" and "redact"; loggers root, uvicorn.error,
    uvicorn.access and sqlalchemy.engine.
    """
    handlers = _handlers(settings)
    every_handler = list(handlers)
    sql_level = "DEBUG" if settings.ENABLE_SQL_LOGGING else "WARNING"

    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": _formatters(settings),
        "filters": {
            "request_id": {"()": RequestIdFilter},
            "redact": {"()": RedactFilter},
        },
        "handlers": handlers,
        "loggers": {
            "": _logger(settings.LOG_LEVEL, every_handler, propagate=True),
            "uvicorn.error": _logger(settings.LOG_LEVEL, every_handler),
            # access lines go to the console only; they would flood app.log
            "uvicorn.access": _logger("INFO", ["console"]),
            "sqlalchemy.engine": _logger(sql_level, ["console"]),
        },
    }


def setup_logging(settings: Settings) -> None:
    """
    Create LOG_DIR when file logging is on, apply the dictConfig, and put a
    RequestIdFilter on the root logger so records logged straight to it are
    formattable too.
    """
    if _writes_files(settings):
        Path(settings.LOG_DIR).mkdir(parents=True, exist_ok=True)

    logging.config.dictConfig(make_dict_config(settings))

    root_logger = logging.getLogger()
    if not any(isinstance(f, RequestIdFilter) for f in root_logger.filters):
        root_logger.addFilter(RequestIdFilter())
