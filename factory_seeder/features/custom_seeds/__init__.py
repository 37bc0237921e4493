"""Custom seeds feature: browse and run registered seed procedures."""

from factory_seeder.features.custom_seeds.routes import router

__all__ = ["router"]
