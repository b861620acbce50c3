"""Pydantic schemas for the inventory domain."""

from dataclasses import dataclass
from typing import Optional

from pydantic import BaseModel

from asset_vista.domain.models.inventory_item import Condition


class InventoryItemForm(BaseModel):
    """Full manage form. Photo fields hold the current URL, or None when cleared."""
    asset_number: str = ""
    nama_asset_1: str = ""
    nama_asset_2: Optional[str] = None
    alamat: str = ""
    kota: str = ""
    keterangan_lokasi: Optional[str] = None
    kondisi: Condition = Condition.TERPASANG
    foto_depan: Optional[str] = None
    foto_kiri: Optional[str] = None
    foto_kanan: Optional[str] = None


class InventoryItemInlineUpdate(BaseModel):
    """Row-level quick edit. Unset fields keep their current value."""
    asset_number: Optional[str] = None
    nama_asset_1: Optional[str] = None
    nama_asset_2: Optional[str] = None
    alamat: Optional[str] = None
    kota: Optional[str] = None
    keterangan_lokasi: Optional[str] = None
    kondisi: Optional[Condition] = None


class InventoryStats(BaseModel):
    total: int
    installed: int
    unused: int
    damaged: int


@dataclass(frozen=True)
class PhotoFile:
    """A photo attached to the manage form, not yet uploaded."""
    filename: str
    content: bytes
    content_type: Optional[str] = None

    @property
    def size(self) -> int:
        return len(self.content)

    @property
    def extension(self) -> str:
        return self.filename.rsplit(".", 1)[-1].lower() if "." in self.filename else ""
