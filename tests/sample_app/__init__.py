"""A small host application: SQLAlchemy models, factory_boy factories and custom seeds."""
