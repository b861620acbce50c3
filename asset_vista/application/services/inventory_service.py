"""Inventory record service — list, search, create, update and delete items.

A service instance belongs to one view. It keeps the fetched list in memory
and reconciles it with what the backend confirmed:

- create refetches the whole list, so server ids and timestamps are exact;
- update and inline update replace the local entry optimistically, restore
  the previous list if the backend refuses, and finally store the row the
  backend returned;
- delete drops the local entry only after the backend deleted the row.
"""

from contextlib import asynccontextmanager
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, Iterator, List, Mapping, Optional, Union

import structlog

from asset_vista.config import Settings, get_settings
from asset_vista.core.exceptions import (
    AppError,
    BackendException,
    DeletionNotStagedException,
    EntityNotFoundException,
    PhotoTooLargeException,
    UnauthorizedException,
    ValidationFailedException,
)
from asset_vista.domain.models.inventory_item import (
    INLINE_FIELDS,
    MANAGE_FIELDS,
    PHOTO_FIELDS,
    REQUIRED_FIELDS,
    SEARCH_FIELDS,
    Condition,
    InventoryItem,
    Viewpoint,
)
from asset_vista.domain.models.user import Identity
from asset_vista.domain.repositories.auth_gateway import PhotoStorage
from asset_vista.domain.repositories.inventory_repository import InventoryRepository
from asset_vista.domain.schemas.inventory import (
    InventoryItemForm,
    InventoryItemInlineUpdate,
    InventoryStats,
    PhotoFile,
)

logger = structlog.get_logger(__name__)

ALL_CONDITIONS = "all"


def matches_term(item: InventoryItem, term: str) -> bool:
    needle = term.lower()
    if not needle:
        return True
    return any(needle in (getattr(item, name) or "").lower() for name in SEARCH_FIELDS)


def matches_condition(item: InventoryItem, condition: Union[str, Condition]) -> bool:
    if condition == ALL_CONDITIONS:
        return True
    return item.kondisi == Condition(condition)


def search_items(
    items: Iterable[InventoryItem],
    term: str = "",
    condition: Union[str, Condition] = ALL_CONDITIONS,
) -> Iterator[InventoryItem]:
    """Case-insensitive substring search intersected with an exact condition filter."""
    return (item for item in items if matches_condition(item, condition) and matches_term(item, term))


def condition_stats(items: Iterable[InventoryItem]) -> InventoryStats:
    items = list(items)
    return InventoryStats(
        total=len(items),
        installed=sum(1 for item in items if item.kondisi == Condition.TERPASANG),
        unused=sum(1 for item in items if item.kondisi == Condition.TIDAK_DIGUNAKAN),
        damaged=sum(1 for item in items if item.kondisi == Condition.RUSAK),
    )


def validate_required(values: Mapping[str, Any]) -> None:
    missing = [name for name in REQUIRED_FIELDS if not (values.get(name) or "").strip()]
    if missing:
        raise ValidationFailedException("Please fill in all required fields", details={"missing": missing})


def validate_photos(photos: Mapping[Viewpoint, PhotoFile], max_size: int) -> None:
    """Reject every oversized photo before any of them is uploaded."""
    for viewpoint, photo in photos.items():
        if photo.size > max_size:
            raise PhotoTooLargeException(
                f"File size must be less than {max_size // (1024 * 1024)}MB",
                details={"viewpoint": viewpoint.value, "filename": photo.filename, "size": photo.size},
            )


@dataclass
class DeletionStage:
    """The item the user asked to delete and has not confirmed yet."""
    item_id: Optional[int] = None


@dataclass
class SaveGuard:
    """Whether a save is in flight. Shared by every service of one browser session."""
    in_flight: bool = False


class InventoryRecordService:
    def __init__(
        self,
        repo: InventoryRepository,
        storage: PhotoStorage,
        identity: Optional[Identity],
        settings: Optional[Settings] = None,
        deletion: Optional[DeletionStage] = None,
        save_guard: Optional[SaveGuard] = None,
    ):
        self.repo = repo
        self.storage = storage
        self.identity = identity
        self.settings = settings or get_settings()
        self.deletion = deletion if deletion is not None else DeletionStage()
        self.save_guard = save_guard if save_guard is not None else SaveGuard()
        self.items: List[InventoryItem] = []
        self.is_loading = False
        self.last_error: Optional[str] = None
        self._failure: Optional[BackendException] = None

    @property
    def is_saving(self) -> bool:
        return self.save_guard.in_flight

    @is_saving.setter
    def is_saving(self, value: bool) -> None:
        self.save_guard.in_flight = value

    # -- reads ---------------------------------------------------------------

    async def fetch_all(self) -> List[InventoryItem]:
        """Replace the local list with the backend's, newest first.

        On failure the previous list stays and last_error says why.
        """
        self.is_loading = True
        try:
            items = await self.repo.list_recent()
        except BackendException as e:
            logger.error("Error fetching inventory items", error=e.message)
            self.last_error = f"Failed to load inventory: {e.message}"
            self._failure = e
            return self.items
        finally:
            self.is_loading = False

        self.items = items
        self.last_error = None
        self._failure = None
        return self.items

    async def load(self) -> List[InventoryItem]:
        """fetch_all for callers that must not show a stale list: a failure is raised."""
        items = await self.fetch_all()
        if self._failure is not None:
            raise self._failure
        return items

    def search(self, term: str = "", condition: Union[str, Condition] = ALL_CONDITIONS) -> Iterator[InventoryItem]:
        return search_items(self.items, term, condition)

    def get(self, item_id: int) -> InventoryItem:
        for item in self.items:
            if item.id == item_id:
                return item
        raise EntityNotFoundException(f"Inventory item {item_id} not found")

    def stats(self) -> InventoryStats:
        return condition_stats(self.items)

    # -- writes --------------------------------------------------------------

    @asynccontextmanager
    async def _saving(self):
        if self.is_saving:
            raise ValidationFailedException("Another save is already in progress")
        self.is_saving = True
        try:
            yield
        finally:
            self.is_saving = False

    def _index_of(self, item_id: int) -> Optional[int]:
        for index, item in enumerate(self.items):
            if item.id == item_id:
                return index
        return None

    async def _upload_photos(self, values: Dict[str, Any], photos: Mapping[Viewpoint, PhotoFile]) -> Dict[str, Any]:
        # any upload error propagates from here, before the row is written
        for viewpoint, photo in photos.items():
            values[PHOTO_FIELDS[viewpoint]] = await self.storage.upload(
                viewpoint, photo.extension, photo.content, photo.content_type
            )
        return values

    async def create(
        self,
        form: InventoryItemForm,
        photos: Optional[Mapping[Viewpoint, PhotoFile]] = None,
    ) -> InventoryItem:
        photos = photos or {}
        values = form.model_dump(mode="json", include=set(MANAGE_FIELDS))
        validate_required(values)
        if self.identity is None:
            raise UnauthorizedException("You must be logged in to save assets")
        validate_photos(photos, self.settings.MAX_PHOTO_SIZE_BYTES)

        async with self._saving():
            values = await self._upload_photos(values, photos)
            values["created_by"] = self.identity.id
            created = await self.repo.create(values)
            logger.info("Inventory item created", item_id=created.id)
            await self.fetch_all()

        index = self._index_of(created.id)
        return self.items[index] if index is not None else created

    async def update(
        self,
        item_id: int,
        form: InventoryItemForm,
        photos: Optional[Mapping[Viewpoint, PhotoFile]] = None,
    ) -> InventoryItem:
        photos = photos or {}
        values = form.model_dump(mode="json", include=set(MANAGE_FIELDS))
        validate_required(values)
        validate_photos(photos, self.settings.MAX_PHOTO_SIZE_BYTES)

        async with self._saving():
            values = await self._upload_photos(values, photos)
            values["updated_at"] = datetime.now(timezone.utc).isoformat()
            return await self._replace(item_id, values)

    async def inline_update(self, item_id: int, changes: InventoryItemInlineUpdate) -> InventoryItem:
        """Quick edit of the text columns and condition. Photos are left alone."""
        current = self.get(item_id)
        values = {name: getattr(current, name) for name in INLINE_FIELDS}
        values.update(changes.model_dump(exclude_unset=True))
        values["kondisi"] = Condition(values["kondisi"] or current.kondisi).value
        validate_required(values)

        async with self._saving():
            return await self._replace(item_id, values)

    async def _replace(self, item_id: int, values: Dict[str, Any]) -> InventoryItem:
        snapshot = list(self.items)
        index = self._index_of(item_id)
        if index is not None:
            current = self.items[index]
            self.items[index] = InventoryItem.model_validate({**current.model_dump(), **values})

        try:
            confirmed = await self.repo.update(item_id, values)
        except AppError as e:
            self.items[:] = snapshot
            logger.warning("Inventory update rejected, local list restored", item_id=item_id, error=e.message)
            raise

        index = self._index_of(item_id)
        if index is not None:
            self.items[index] = confirmed
        logger.info("Inventory item updated", item_id=item_id)
        return confirmed

    def stage_delete(self, item_id: int) -> None:
        """First step of a deletion. Touches neither the backend nor the list."""
        self.deletion.item_id = item_id

    def cancel_delete(self) -> None:
        self.deletion.item_id = None

    async def confirm_delete(self) -> int:
        item_id = self.deletion.item_id
        if item_id is None:
            raise DeletionNotStagedException()

        async with self._saving():
            await self.repo.delete(item_id)

        # cleared only once the row is gone, so a failed delete can be retried
        self.deletion.item_id = None
        self.items = [item for item in self.items if item.id != item_id]
        logger.info("Inventory item deleted", item_id=item_id)
        return item_id
