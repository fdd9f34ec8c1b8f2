"""
Mock implementations for testing.

In-memory stand-ins for MongoDB plus record builders, so unit tests
run without network calls or a database server.
"""

from .mock_database import MockDatabase, MockCollection, MockCursor
from .builders import make_compound, make_interaction, make_samples, make_doses

__all__ = [
    "MockDatabase",
    "MockCollection",
    "MockCursor",
    "make_compound",
    "make_interaction",
    "make_samples",
    "make_doses",
]
