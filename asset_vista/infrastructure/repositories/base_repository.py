"""
Supabase table implementation of the Base Repository.
"""

from typing import Any, Dict, Generic, List, Optional, Type, TypeVar

from pydantic import BaseModel
from supabase import AsyncClient

from asset_vista.core.exceptions import EntityNotFoundException
from asset_vista.infrastructure.supabase.errors import backend_call

ModelType = TypeVar("ModelType", bound=BaseModel)


class SupabaseRepository(Generic[ModelType]):
    """Generic repository over one table.

    The query builder is taken from the client on every call, so the
    client's current access token is the one sent.
    """

    table_name: str
    primary_key = "id"

    def __init__(self, client: AsyncClient, model: Type[ModelType]):
        self.client = client
        self.model = model

    def query(self):
        return self.client.table(self.table_name)

    def _one(self, rows: List[Dict[str, Any]], id: Any) -> ModelType:
        # RLS hides rows instead of failing, so an empty answer means "not yours or gone"
        if not rows:
            raise EntityNotFoundException(f"{self.table_name} {id} not found")
        return self.model.model_validate(rows[0])

    async def get_by_id(self, id: Any) -> Optional[ModelType]:
        with backend_call("select", table=self.table_name, id=id):
            response = await self.query().select("*").eq(self.primary_key, id).limit(1).execute()
        return self.model.model_validate(response.data[0]) if response.data else None

    async def list(self) -> List[ModelType]:
        with backend_call("select", table=self.table_name):
            response = await self.query().select("*").execute()
        return [self.model.model_validate(row) for row in response.data]

    async def create(self, values: Dict[str, Any]) -> ModelType:
        with backend_call("insert", table=self.table_name):
            response = await self.query().insert(values).execute()
        return self._one(response.data, values.get(self.primary_key))

    async def update(self, id: Any, values: Dict[str, Any]) -> ModelType:
        with backend_call("update", table=self.table_name, id=id):
            response = await self.query().update(values).eq(self.primary_key, id).execute()
        return self._one(response.data, id)

    async def delete(self, id: Any) -> None:
        with backend_call("delete", table=self.table_name, id=id):
            await self.query().delete().eq(self.primary_key, id).execute()
