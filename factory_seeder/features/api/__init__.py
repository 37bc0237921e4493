"""JSON API feature."""

from factory_seeder.features.api.routes import router

__all__ = ["router"]
