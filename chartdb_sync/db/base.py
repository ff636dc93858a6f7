"""Declarative base for the catalog tables (models/ registers against it)."""

from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    pass
