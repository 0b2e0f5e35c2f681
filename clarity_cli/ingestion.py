"""Bulk ingestion of analyzer JSON files.

Files are routed to a dataset slot by a substring of their name and
validated against the slot's schema. A bad file is reported and skipped;
it never stops the remaining files from loading.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Iterable, List, Optional, Tuple, Union

from pydantic import BaseModel, ValidationError

from .errors import IngestionError
from .schemas import DATASET_MODELS

if TYPE_CHECKING:
    from .session import AppState

logger = logging.getLogger(__name__)

# First match wins
ROUTES = (
    ("structure", "structure"),
    ("calls", "calls"),
    ("arch", "arch"),
)

FileInput = Union[Path, str, Tuple[str, str]]


@dataclass
class IngestReport:
    name: str
    slot: Optional[str]
    ok: bool
    error: str = ""


def route_filename(name: str) -> Optional[str]:
    """Dataset slot for an uploaded file name, or ``None`` if it is ignored."""
    for needle, slot in ROUTES:
        if needle in name:
            return slot
    return None


def _first_error(exc: ValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return str(exc)
    first = errors[0]
    location = ".".join(str(part) for part in first.get("loc", ())) or "<root>"
    suffix = f" (+{len(errors) - 1} more)" if len(errors) > 1 else ""
    return f"{location}: {first.get('msg', 'invalid')}{suffix}"


def parse_dataset(slot: str, text: str, name: str = "<input>") -> BaseModel:
    """Parse ``text`` as JSON and validate it as the ``slot`` dataset.

    Raises:
        IngestionError: on invalid JSON or a schema mismatch.
    """
    model = DATASET_MODELS.get(slot)
    if model is None:
        raise IngestionError(name, f"unknown dataset '{slot}'")
    try:
        payload = json.loads(text)
    except json.JSONDecodeError as exc:
        raise IngestionError(name, f"invalid JSON: {exc.msg} at line {exc.lineno}") from exc
    try:
        return model.model_validate(payload)
    except ValidationError as exc:
        raise IngestionError(name, f"does not match the {slot} schema: {_first_error(exc)}") from exc


def _read(item: FileInput) -> Tuple[str, str]:
    if isinstance(item, tuple):
        return item
    path = Path(item)
    return path.name, path.read_text(encoding="utf-8")


def ingest_files(files: Iterable[FileInput], state: "AppState") -> List[IngestReport]:
    """Load every file into ``state``; each file succeeds or fails on its own.

    ``files`` holds paths or ``(name, text)`` pairs. Files whose names match
    no dataset are ignored and not reported.
    """
    reports: List[IngestReport] = []
    for item in files:
        name = item[0] if isinstance(item, tuple) else Path(item).name
        slot = route_filename(name)
        if slot is None:
            logger.debug("Ignoring %s: no dataset matches its name", name)
            continue
        try:
            name, text = _read(item)
            dataset = parse_dataset(slot, text, name)
        except (OSError, UnicodeDecodeError) as exc:
            logger.warning("Could not read %s: %s", name, exc)
            reports.append(IngestReport(name=name, slot=slot, ok=False, error=f"{name}: {exc}"))
            continue
        except IngestionError as exc:
            logger.warning("Skipping %s", exc)
            reports.append(IngestReport(name=name, slot=slot, ok=False, error=str(exc)))
            continue
        state.set_dataset(slot, dataset)
        reports.append(IngestReport(name=name, slot=slot, ok=True))
    return reports
