"""Persistence layer: SQLAlchemy models, repositories and transactions."""
