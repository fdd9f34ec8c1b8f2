"""
Protocol definitions for dependency injection and testing.

These protocols define the interfaces that external services must implement,
enabling in-memory mock implementations for unit testing.
"""

from .database import IDatabase, ICollection, IAsyncCursor

__all__ = [
    "IDatabase",
    "ICollection",
    "IAsyncCursor",
]
