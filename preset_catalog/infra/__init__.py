"""Infra layer utilities (storage, selections)."""

from .selection_store import SelectionStore
from .storage import SQLiteManager

__all__ = ["SQLiteManager", "SelectionStore"]
