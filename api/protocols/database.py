"""
Database protocol for MongoDB operations.

The subset of the Motor interface the protocol engine services rely on,
so an in-memory mock can stand in for MongoDB in tests.
"""

from typing import Protocol, Any, Optional, runtime_checkable, Dict, List


@runtime_checkable
class IAsyncCursor(Protocol):
    """Protocol for async database cursor."""

    def sort(self, key_or_list: Any, direction: Optional[int] = None) -> "IAsyncCursor":
        """Sort the cursor results."""
        ...

    def limit(self, limit: int) -> "IAsyncCursor":
        """Limit the number of documents."""
        ...

    async def to_list(self, length: Optional[int] = None) -> List[Dict[str, Any]]:
        """Convert cursor to list."""
        ...

    def __aiter__(self) -> "IAsyncCursor":
        """Async iteration support."""
        ...

    async def __anext__(self) -> Dict[str, Any]:
        """Get next document."""
        ...


@runtime_checkable
class ICollection(Protocol):
    """Protocol for a catalog or log collection."""

    async def find_one(
        self, filter: Dict[str, Any], *args: Any, **kwargs: Any
    ) -> Optional[Dict[str, Any]]:
        """Find a single document matching the filter."""
        ...

    def find(
        self, filter: Dict[str, Any], *args: Any, **kwargs: Any
    ) -> IAsyncCursor:
        """Find documents matching the filter. Returns a cursor."""
        ...

    async def insert_many(
        self, documents: List[Dict[str, Any]], *args: Any, **kwargs: Any
    ) -> Any:
        """Insert multiple documents (seeding)."""
        ...

    async def delete_many(
        self, filter: Dict[str, Any], *args: Any, **kwargs: Any
    ) -> Any:
        """Delete matching documents (re-seeding)."""
        ...

    async def count_documents(
        self, filter: Dict[str, Any], *args: Any, **kwargs: Any
    ) -> int:
        """Count documents matching the filter."""
        ...

    async def create_index(
        self, keys: Any, *args: Any, **kwargs: Any
    ) -> str:
        """Create an index on the collection."""
        ...


@runtime_checkable
class IDatabase(Protocol):
    """
    Protocol for database access.

    Matches the Motor AsyncIOMotorDatabase interface for the collections
    used here: compounds, protocol_templates, users, user_protocols,
    dose_logs, outcome_logs, protocol_events.
    """

    def __getattr__(self, name: str) -> ICollection:
        """Get a collection by attribute access (e.g., db.compounds)."""
        ...

    def __getitem__(self, name: str) -> ICollection:
        """Get a collection by item access (e.g., db['compounds'])."""
        ...

    def get_collection(self, name: str) -> ICollection:
        """Get a collection by name."""
        ...
