"""
Base Repository Interface.
Defines the standard contract for row access against the table store.
"""

from typing import Any, Dict, List, Optional, Protocol, TypeVar

T = TypeVar("T")


class BaseRepository(Protocol[T]):
    """Interface for generic CRUD operations."""

    async def get_by_id(self, id: Any) -> Optional[T]:
        """Get a single row by primary key."""
        ...

    async def list(self) -> List[T]:
        """List every row visible to the caller."""
        ...

    async def create(self, values: Dict[str, Any]) -> T:
        """Insert a row and return it as confirmed by the backend."""
        ...

    async def update(self, id: Any, values: Dict[str, Any]) -> T:
        """Update a row and return it as confirmed by the backend."""
        ...

    async def delete(self, id: Any) -> None:
        """Delete a row by primary key."""
        ...
