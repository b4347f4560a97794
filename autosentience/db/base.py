"""Declarative base for the ORM models."""

from typing import Any

from sqlalchemy.orm import as_declarative, declared_attr


@as_declarative()
class Base:
    """Base class for all database models."""

    id: Any
    __name__: str

    # Models normally set __tablename__ explicitly; this is the fallback.
    @declared_attr
    def __tablename__(cls) -> str:
        return cls.__name__.lower()
