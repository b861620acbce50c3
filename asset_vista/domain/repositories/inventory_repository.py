"""
Inventory Repository Interface.
"""

from typing import List

from asset_vista.domain.models.inventory_item import InventoryItem
from asset_vista.domain.repositories.base import BaseRepository


class InventoryRepository(BaseRepository[InventoryItem]):
    """Interface for inventory_items operations."""

    async def list_recent(self) -> List[InventoryItem]:
        """All items, newest created_at first."""
        ...
