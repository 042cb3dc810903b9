"""JSON File Repository Implementations"""
import asyncio
import logging
from pathlib import Path
from typing import Any, Dict, Generic, List, Optional, TypeVar

from pydantic import TypeAdapter

from domain.repositories import SnapshotRepository, GuestDirectory
from domain.value_objects import Guest

logger = logging.getLogger(__name__)

T = TypeVar("T")


class JsonFileSnapshotRepository(SnapshotRepository[T], Generic[T]):
    """Stores a whole collection as one JSON document, rewritten on every replace"""

    def __init__(self, path: Path, item_type: Any):
        self.path = Path(path)
        self._adapter = TypeAdapter(List[item_type])

    async def load_all(self) -> List[T]:
        """Load the collection, creating an empty file on first use"""
        if not self.path.exists():
            await self.replace_all([])
            return []
        raw = await asyncio.to_thread(self.path.read_bytes)
        return self._adapter.validate_json(raw)

    async def replace_all(self, items: List[T]) -> None:
        """Overwrite the file with the given collection"""
        payload = self._adapter.dump_json(list(items), indent=2)
        await asyncio.to_thread(self._write, payload)
        logger.debug("Wrote %d records to %s", len(items), self.path)

    def _write(self, payload: bytes) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_bytes(payload)


class JsonFileGuestDirectory(GuestDirectory):
    """Guest directory read from a JSON list of guests; a missing file means no guests"""

    def __init__(self, path: Path):
        self.path = Path(path)
        self._adapter = TypeAdapter(List[Guest])
        self._storage: Dict[str, Guest] = {}

    @classmethod
    async def load(cls, path: Path) -> "JsonFileGuestDirectory":
        directory = cls(path)
        await directory.reload()
        return directory

    async def reload(self) -> None:
        if not self.path.exists():
            logger.warning("Guest file %s not found, guest directory is empty", self.path)
            self._storage = {}
            return
        raw = await asyncio.to_thread(self.path.read_bytes)
        self._storage = {guest.contact: guest for guest in self._adapter.validate_json(raw)}
        logger.info("Loaded %d guests from %s", len(self._storage), self.path)

    async def find_guest_by_contact(self, contact: str) -> Optional[Guest]:
        """Find guest by contact"""
        return self._storage.get(contact)
