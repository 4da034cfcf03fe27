"""Declarative base for upld models."""

from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    pass
