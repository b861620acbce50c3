"""Inventory item domain model — rows of the 'inventory_items' table."""

import enum
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, field_validator


class Condition(str, enum.Enum):
    TERPASANG = "Terpasang"
    TIDAK_DIGUNAKAN = "Tidak digunakan"
    RUSAK = "Rusak"


class Viewpoint(str, enum.Enum):
    """Storage folder of a photo."""
    FRONT = "front"
    LEFT = "left"
    RIGHT = "right"


PHOTO_FIELDS = {
    Viewpoint.FRONT: "foto_depan",
    Viewpoint.LEFT: "foto_kiri",
    Viewpoint.RIGHT: "foto_kanan",
}

REQUIRED_FIELDS = ("asset_number", "nama_asset_1", "alamat", "kota")

# Columns written by a row-level quick edit
INLINE_FIELDS = (
    "asset_number",
    "nama_asset_1",
    "nama_asset_2",
    "alamat",
    "kota",
    "keterangan_lokasi",
    "kondisi",
)

# Columns written by the manage form
MANAGE_FIELDS = INLINE_FIELDS + tuple(PHOTO_FIELDS.values())

SEARCH_FIELDS = ("nama_asset_1", "nama_asset_2", "alamat", "kota", "keterangan_lokasi")


class InventoryItem(BaseModel):
    id: int
    asset_number: str
    nama_asset_1: str
    nama_asset_2: Optional[str] = None
    alamat: str
    kota: str
    keterangan_lokasi: Optional[str] = None
    foto_depan: Optional[str] = None
    foto_kiri: Optional[str] = None
    foto_kanan: Optional[str] = None
    kondisi: Condition = Condition.TERPASANG
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    created_by: Optional[str] = None

    model_config = {"from_attributes": True, "extra": "ignore"}

    @field_validator("foto_depan", "foto_kiri", "foto_kanan", mode="before")
    @classmethod
    def _blank_photo_is_missing(cls, value):
        # a missing photo is null, never ""
        if isinstance(value, str) and not value.strip():
            return None
        return value

    def __repr__(self):
        return f"<InventoryItem {self.asset_number} - {self.nama_asset_1}>"
