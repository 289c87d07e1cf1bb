"""JSON codec for catalog files used by the command line."""

from __future__ import annotations

import json
from logging import getLogger
from typing import TYPE_CHECKING

from pydantic import TypeAdapter, ValidationError

from modelcat.domain.model import ModelRecord
from modelcat.errors import ModelcatError

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence
    from pathlib import Path

log = getLogger(__name__)

RECORD: TypeAdapter[ModelRecord] = TypeAdapter(ModelRecord)
CATALOG: TypeAdapter[list[ModelRecord]] = TypeAdapter(list[ModelRecord])


class CatalogFileError(ModelcatError, ValueError):
    """Raised when a catalog file is not a JSON list of records."""


def parse_records(entries: Iterable[object], *, origin: str = "payload") -> list[ModelRecord]:
    """Validate record-shaped entries, skipping the ones that do not validate."""

    records: list[ModelRecord] = []
    for position, entry in enumerate(entries):
        try:
            records.append(RECORD.validate_python(entry))
        except ValidationError as exc:
            log.warning("Skipping invalid record %d in %s: %s", position, origin, exc)
    return records


def load_catalog(path: Path) -> list[ModelRecord]:
    if not path.exists():
        return []
    try:
        return CATALOG.validate_json(path.read_bytes())
    except ValidationError as exc:
        raise CatalogFileError(f"Invalid catalog file {path}: {exc}") from exc


def dump_catalog(records: Sequence[ModelRecord], path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(CATALOG.dump_json(list(records), indent=2, exclude_none=True))


def load_rows(path: Path) -> list[dict[str, object]]:
    """Read import rows from a JSON file holding a list (or ``{"models": [...]}``)."""

    payload = json.loads(path.read_text(encoding="utf-8"))
    if isinstance(payload, dict) and isinstance(payload.get("models"), list):
        payload = payload["models"]
    if not isinstance(payload, list):
        raise CatalogFileError(f"{path} does not hold a list of rows")
    return [row for row in payload if isinstance(row, dict)]
