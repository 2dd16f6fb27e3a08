from .base import Base
from .session import create_engine_from_settings, create_session_maker, get_async_session

__all__ = ["Base", "create_engine_from_settings", "create_session_maker", "get_async_session"]
