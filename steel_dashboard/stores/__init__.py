"""Persistence collaborators: card store, local storage and analytics."""

from .analytics import AnalyticsLogger
from .cards import CardStore, InMemoryCardStore
from .local import LocalStorage

__all__ = [
    "AnalyticsLogger",
    "CardStore",
    "InMemoryCardStore",
    "LocalStorage",
]
