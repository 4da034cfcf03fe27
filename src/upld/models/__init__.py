"""Database models for upld."""

from upld.models.base import Base
from upld.models.entry import StoreEntry

__all__ = [
    "Base",
    "StoreEntry",
]
