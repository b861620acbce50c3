"""
Supabase implementation of the Inventory Repository.
"""

from typing import List

from supabase import AsyncClient

from asset_vista.domain.models.inventory_item import InventoryItem
from asset_vista.infrastructure.repositories.base_repository import SupabaseRepository
from asset_vista.infrastructure.supabase.errors import backend_call

TABLE = "inventory_items"


class SupabaseInventoryRepository(SupabaseRepository[InventoryItem]):
    table_name = TABLE

    def __init__(self, client: AsyncClient):
        super().__init__(client, InventoryItem)

    async def list_recent(self) -> List[InventoryItem]:
        with backend_call("select", table=self.table_name):
            response = await self.query().select("*").order("created_at", desc=True).execute()
        return [InventoryItem.model_validate(row) for row in response.data]
