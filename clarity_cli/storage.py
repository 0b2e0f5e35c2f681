"""Reading and writing the session data directory.

The directory holds up to four JSON documents (structure, calls, arch and
classifications). Each is read independently so a missing or broken file
leaves the others usable.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, List, Optional

from pydantic import BaseModel

from . import config
from .errors import IngestionError
from .ingestion import parse_dataset
from .schemas import ClassificationsData, EntryPointClassification

logger = logging.getLogger(__name__)


def utc_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


class DataStore:
    """Dataset files under one data directory."""

    def __init__(self, data_dir: Optional[Path] = None) -> None:
        self.data_dir = Path(data_dir) if data_dir is not None else config.DATA_DIR

    def path_for(self, slot: str) -> Path:
        return self.data_dir / config.DATASET_FILES[slot]

    def load_dataset(self, slot: str) -> Optional[BaseModel]:
        """Return the validated dataset for ``slot``, or ``None`` if unavailable."""
        path = self.path_for(slot)
        if not path.exists():
            return None
        try:
            return parse_dataset(slot, path.read_text(encoding="utf-8"), path.name)
        except (OSError, UnicodeDecodeError, IngestionError) as exc:
            logger.warning("Skipping %s: %s", path, exc)
            return None

    def load_all(self) -> Dict[str, BaseModel]:
        loaded: Dict[str, BaseModel] = {}
        for slot in config.DATASET_FILES:
            dataset = self.load_dataset(slot)
            if dataset is not None:
                loaded[slot] = dataset
        return loaded

    def available(self) -> List[str]:
        return [slot for slot in config.DATASET_FILES if self.path_for(slot).exists()]

    def save_classifications(self, data: ClassificationsData) -> Path:
        """Write classifications with their ``analyzedAt`` timestamp.

        Raises:
            OSError: if the directory or file cannot be written.
        """
        path = self.path_for("classifications")
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(data.model_dump(), indent=2), encoding="utf-8")
        return path


def make_classifications(items: List[EntryPointClassification]) -> ClassificationsData:
    return ClassificationsData(classifications=list(items), analyzedAt=utc_timestamp())
