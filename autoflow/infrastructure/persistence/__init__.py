"""Persistence: SQLAlchemy async engine, ORM models, repositories, Execution Store."""
