"""Adapters - I/O implementations of ports."""

from .json_provider import JsonDataProvider
from .sqlite_provider import SqliteDataProvider

__all__ = [
    "JsonDataProvider",
    "SqliteDataProvider",
]
