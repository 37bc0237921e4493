"""Core infrastructure: config, database, logging, middleware, exceptions."""

from factory_seeder.core.config import Settings, get_settings
from factory_seeder.core.database import get_db
from factory_seeder.core.logging import get_logger, request_id_ctx

__all__ = [
    "Settings",
    "get_db",
    "get_logger",
    "get_settings",
    "request_id_ctx",
]
