"""Inventory API routes — list/search, detail, create, edit, delete."""

from typing import Dict, Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile

from asset_vista.application.services.inventory_service import ALL_CONDITIONS, InventoryRecordService
from asset_vista.core.exceptions import ValidationFailedException
from asset_vista.domain.models.inventory_item import Condition, InventoryItem, Viewpoint
from asset_vista.domain.schemas.inventory import InventoryItemForm, InventoryItemInlineUpdate, PhotoFile
from asset_vista.interfaces.api.deps import get_inventory_service

router = APIRouter(prefix="/api/inventory", tags=["Inventory"])


async def _read_photos(**uploads: Optional[UploadFile]) -> Dict[Viewpoint, PhotoFile]:
    photos = {}
    for viewpoint in Viewpoint:
        upload = uploads.get(viewpoint.value)
        if upload is not None and upload.filename:
            photos[viewpoint] = PhotoFile(
                filename=upload.filename,
                content=await upload.read(),
                content_type=upload.content_type,
            )
    return photos


@router.get("")
async def list_items(
    q: str = "",
    kondisi: str = ALL_CONDITIONS,
    service: InventoryRecordService = Depends(get_inventory_service),
):
    if kondisi != ALL_CONDITIONS and kondisi not in {c.value for c in Condition}:
        raise ValidationFailedException(f"Unknown condition: {kondisi}")

    await service.fetch_all()
    condition = kondisi if kondisi == ALL_CONDITIONS else Condition(kondisi)
    items = list(service.search(q, condition))
    return {"items": items, "total": len(items), "error": service.last_error}


@router.get("/{item_id}", response_model=InventoryItem)
async def get_item(item_id: int, service: InventoryRecordService = Depends(get_inventory_service)):
    await service.load()
    return service.get(item_id)


@router.post("", response_model=InventoryItem, status_code=201)
async def create_item(
    asset_number: str = Form(""),
    nama_asset_1: str = Form(""),
    nama_asset_2: Optional[str] = Form(None),
    alamat: str = Form(""),
    kota: str = Form(""),
    keterangan_lokasi: Optional[str] = Form(None),
    kondisi: Condition = Form(Condition.TERPASANG),
    foto_depan: Optional[UploadFile] = File(None),
    foto_kiri: Optional[UploadFile] = File(None),
    foto_kanan: Optional[UploadFile] = File(None),
    service: InventoryRecordService = Depends(get_inventory_service),
):
    form = InventoryItemForm(
        asset_number=asset_number,
        nama_asset_1=nama_asset_1,
        nama_asset_2=nama_asset_2,
        alamat=alamat,
        kota=kota,
        keterangan_lokasi=keterangan_lokasi,
        kondisi=kondisi,
    )
    photos = await _read_photos(front=foto_depan, left=foto_kiri, right=foto_kanan)
    return await service.create(form, photos)


@router.put("/{item_id}", response_model=InventoryItem)
async def update_item(
    item_id: int,
    asset_number: str = Form(""),
    nama_asset_1: str = Form(""),
    nama_asset_2: Optional[str] = Form(None),
    alamat: str = Form(""),
    kota: str = Form(""),
    keterangan_lokasi: Optional[str] = Form(None),
    kondisi: Condition = Form(Condition.TERPASANG),
    remove_foto_depan: bool = Form(False),
    remove_foto_kiri: bool = Form(False),
    remove_foto_kanan: bool = Form(False),
    foto_depan: Optional[UploadFile] = File(None),
    foto_kiri: Optional[UploadFile] = File(None),
    foto_kanan: Optional[UploadFile] = File(None),
    service: InventoryRecordService = Depends(get_inventory_service),
):
    await service.load()
    current = service.get(item_id)

    form = InventoryItemForm(
        asset_number=asset_number,
        nama_asset_1=nama_asset_1,
        nama_asset_2=nama_asset_2,
        alamat=alamat,
        kota=kota,
        keterangan_lokasi=keterangan_lokasi,
        kondisi=kondisi,
        foto_depan=None if remove_foto_depan else current.foto_depan,
        foto_kiri=None if remove_foto_kiri else current.foto_kiri,
        foto_kanan=None if remove_foto_kanan else current.foto_kanan,
    )
    photos = await _read_photos(front=foto_depan, left=foto_kiri, right=foto_kanan)
    return await service.update(item_id, form, photos)


@router.patch("/{item_id}", response_model=InventoryItem)
async def inline_update_item(
    item_id: int,
    body: InventoryItemInlineUpdate,
    service: InventoryRecordService = Depends(get_inventory_service),
):
    await service.load()
    return await service.inline_update(item_id, body)


@router.post("/{item_id}/delete-request")
def request_delete(item_id: int, service: InventoryRecordService = Depends(get_inventory_service)):
    service.stage_delete(item_id)
    return {"staged": item_id}


@router.delete("/delete-request")
def cancel_delete(service: InventoryRecordService = Depends(get_inventory_service)):
    service.cancel_delete()
    return {"staged": None}


@router.post("/delete-confirm")
async def confirm_delete(service: InventoryRecordService = Depends(get_inventory_service)):
    deleted = await service.confirm_delete()
    return {"message": "Item deleted successfully", "deleted": deleted}
