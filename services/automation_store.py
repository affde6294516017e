"""
Automation store for saving and loading automation documents.

Each automation is one JSON record in the workspace:

    automations/
    └── <automation id>.json
        {
          "id": "...",
          "name": "...",
          "created_at": "2026-01-01T12:00:00",
          "updated_at": "2026-01-01T12:30:00",
          "metadata": "{\"nodes\": [...], \"edges\": [...]}"
        }

The document is kept as a JSON string in "metadata" so a record that
holds garbage there still loads, as an empty document.
"""

import json
import logging
import uuid
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Optional

from models import CanvasDocument

logger = logging.getLogger(__name__)

# Schema version for future compatibility
SCHEMA_VERSION = "1.0"


class AutomationStoreError(Exception):
    """Reading or writing the store failed."""


class AutomationNotFoundError(AutomationStoreError):
    """No automation with the requested id exists."""

    def __init__(self, automation_id: str):
        super().__init__(f"Automation not found: {automation_id}")
        self.automation_id = automation_id


@dataclass
class AutomationRecord:
    """A stored automation as kept on disk."""
    id: str
    name: str
    created_at: str = ""
    updated_at: Optional[str] = None
    metadata: Optional[str] = None

    @property
    def document(self) -> CanvasDocument:
        """Decode the stored document; unreadable metadata gives an empty one."""
        return decode_metadata(self.metadata)

    def to_dict(self) -> dict:
        return {
            "schema": SCHEMA_VERSION,
            "id": self.id,
            "name": self.name,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
            "metadata": self.metadata,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "AutomationRecord":
        metadata = data.get("metadata")
        return cls(
            id=str(data.get("id", "")),
            name=str(data.get("name", "")),
            created_at=data.get("created_at", ""),
            updated_at=data.get("updated_at"),
            metadata=metadata if isinstance(metadata, str) else None,
        )


def decode_metadata(metadata: Optional[str]) -> CanvasDocument:
    """Turn a stored metadata string into a document, never raising."""
    if not metadata:
        return CanvasDocument()
    try:
        data = json.loads(metadata)
    except (TypeError, ValueError) as e:
        logger.warning(f"Stored automation document is not valid JSON: {e}")
        return CanvasDocument()
    return CanvasDocument.from_dict(data)


class AutomationStore:
    """
    File-backed persistence gateway for automations.

    Args:
        root: Directory holding one <id>.json file per automation.
    """

    def __init__(self, root: Path):
        self._root = Path(root)

    @property
    def root(self) -> Path:
        return self._root

    def ensure_root(self):
        """Create the store directory if it doesn't exist."""
        self._root.mkdir(parents=True, exist_ok=True)

    @staticmethod
    def new_id() -> str:
        """Id for an automation that has not been saved yet."""
        return str(uuid.uuid4())

    def _record_path(self, automation_id: str) -> Path:
        # Ids become file names; refuse anything that could escape the root
        if not automation_id or "/" in automation_id or "\\" in automation_id or automation_id.startswith("."):
            raise AutomationStoreError(f"Invalid automation id: {automation_id!r}")
        return self._root / f"{automation_id}.json"

    def exists(self, automation_id: str) -> bool:
        return self._record_path(automation_id).exists()

    def get(self, automation_id: str) -> AutomationRecord:
        """
        Read a stored record.

        Raises:
            AutomationNotFoundError: if there is no such automation
            AutomationStoreError: if the record cannot be read
        """
        path = self._record_path(automation_id)
        if not path.exists():
            raise AutomationNotFoundError(automation_id)

        try:
            with open(path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            raise AutomationStoreError(f"Error reading {path.name}: {e}") from e

        if not isinstance(data, dict):
            raise AutomationStoreError(f"Error reading {path.name}: not a record")

        record = AutomationRecord.from_dict(data)
        record.id = automation_id
        return record

    def load(self, automation_id: str) -> CanvasDocument:
        """Load the document of an automation (empty if its data is unreadable)."""
        document = self.get(automation_id).document
        logger.info(
            f"Loaded automation {automation_id} ({len(document.nodes)} nodes, {len(document.edges)} edges)"
        )
        return document

    def save(self, automation_id: str, name: str, document: Optional[CanvasDocument]) -> AutomationRecord:
        """
        Create or update an automation.

        Raises:
            ValueError: if name is empty
            AutomationStoreError: if the document or record cannot be written
        """
        if not isinstance(name, str) or not name.strip():
            raise ValueError("Automation name must not be empty")

        path = self._record_path(automation_id)
        now = datetime.now().isoformat()
        try:
            record = self.get(automation_id)
        except AutomationNotFoundError:
            record = AutomationRecord(id=automation_id, name=name, created_at=now)
        except AutomationStoreError as e:
            logger.warning(f"Overwriting unreadable automation: {e}")
            record = AutomationRecord(id=automation_id, name=name, created_at=now)

        record.name = name
        record.updated_at = now
        try:
            record.metadata = json.dumps(document.to_dict(), allow_nan=False) if document is not None else None
        except ValueError as e:
            raise AutomationStoreError(f"Document of {automation_id} cannot be stored: {e}") from e

        try:
            self.ensure_root()
            tmp_path = path.with_suffix(".json.tmp")
            with open(tmp_path, 'w', encoding='utf-8') as f:
                json.dump(record.to_dict(), f, indent=2, ensure_ascii=False)
            tmp_path.replace(path)
        except OSError as e:
            raise AutomationStoreError(f"Error saving {path.name}: {e}") from e

        logger.info(f"Saved automation {automation_id} as '{name}'")
        return record

    def list_automations(self) -> list[AutomationRecord]:
        """All readable records, most recently updated first."""
        if not self._root.exists():
            return []

        records = []
        for path in self._root.glob("*.json"):
            try:
                records.append(self.get(path.stem))
            except AutomationStoreError as e:
                logger.warning(f"Skipping unreadable automation: {e}")

        records.sort(key=lambda r: r.updated_at or r.created_at or "", reverse=True)
        return records

    def delete(self, automation_id: str) -> bool:
        """Delete an automation. Returns False if it did not exist."""
        path = self._record_path(automation_id)
        if not path.exists():
            return False
        try:
            path.unlink()
        except OSError as e:
            raise AutomationStoreError(f"Error deleting {path.name}: {e}") from e
        return True
