"""Dashboard feature: HTML pages for browsing factories and generating records."""

from factory_seeder.features.dashboard.routes import router

__all__ = ["router"]
