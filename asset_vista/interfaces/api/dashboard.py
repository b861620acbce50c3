"""Dashboard API routes — condition counts for admins."""

from fastapi import APIRouter, Depends

from asset_vista.application.services.inventory_service import InventoryRecordService
from asset_vista.domain.schemas.inventory import InventoryStats
from asset_vista.interfaces.api.deps import get_inventory_service, require_admin

router = APIRouter(prefix="/api/dashboard", tags=["Dashboard"], dependencies=[Depends(require_admin)])


@router.get("/stats", response_model=InventoryStats)
async def stats(service: InventoryRecordService = Depends(get_inventory_service)):
    await service.load()
    return service.stats()
