"""FactorySeeder: generate, preview and validate seed data from factory_boy factories."""

__version__ = "0.1.0"
