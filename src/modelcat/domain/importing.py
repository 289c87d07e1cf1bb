"""Normalization of user-supplied import rows (spreadsheet or JSON) into records.

Rows come from arbitrary spreadsheets, so every field is looked up under a
handful of column aliases and parsed leniently. Normalized records then go
through the regular merge batch.
"""

from __future__ import annotations

import re
from datetime import UTC, date, datetime, timedelta
from logging import getLogger
from typing import TYPE_CHECKING

from modelcat.domain.model import (
    Domain,
    Hosting,
    License,
    LicenseType,
    ModelRecord,
    PricingEntry,
)
from modelcat.domain.text import clean_description

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping, Sequence

log = getLogger(__name__)

type ImportRow = Mapping[str, object]

SHEET_NAME_KEY = "__sheetName"

_NAME_KEYS = ("name", "model", "Model Name", "Model")
_PROVIDER_KEYS = (
    "provider",
    "Company/Developer",
    "Company",
    "Developer",
    "Author",
    "Provider",
    "Org",
)
_DOMAIN_KEYS = ("domain", "Model Type", "Type", "Domain")
_URL_KEYS = ("url", "homepage", "Repository/URL", "URL", "Homepage", "Website", "Link")
_REPO_KEYS = ("repo", "Repository", "Repo", "GitHub", "Git")
_LICENSE_KEYS = ("license_name", "license", "License", "License Name")
_COMMERCIAL_KEYS = ("commercial", "commercial_use", "Commercial Use", "Commercial")
_RELEASE_KEYS = ("release_date", "Released", "Release Date", "Date")
_UPDATED_KEYS = ("updated_at", "Updated")
_PARAMETER_KEYS = ("parameters", "Params", "Parameters", "Size")
_CONTEXT_KEYS = ("context_window", "Context Window")
_PRICING_KEYS = ("pricing", "price", "Pricing", "Cost")
_TAG_KEYS = ("tags", "Tags")
_FEATURE_KEYS = ("Key Features", "Features", "Notes")
_DESCRIPTION_KEYS = ("description", "Description")

_EXCEL_EPOCH = date(1899, 12, 30)
_ISO_DATE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_DATE_FORMATS = (
    "%m/%d/%Y",
    "%d.%m.%Y",
    "%Y/%m/%d",
    "%B %d, %Y",
    "%b %d, %Y",
    "%d %B %Y",
    "%d %b %Y",
)
_YES = re.compile(r"(^|\b)(yes|true|allowed|y)$")
_NO = re.compile(r"(^|\b)(no|false|not allowed|disallow|non-?commercial|nc)$")
_FREE = re.compile(r"^free(\b|\s|\()", re.IGNORECASE)
_PER_UNIT = re.compile(r"\$([0-9]+(?:\.[0-9]+)?)\s*per\s*([a-zA-Z\- ]+)", re.IGNORECASE)
_FEATURE_SPLIT = re.compile(r"[,;]|\s·\s")


def map_domain(value: object, sheet_name: str | None = None) -> Domain:
    """Map a free-text category (or the sheet it came from) onto :class:`Domain`."""

    text = str(value or sheet_name or "").lower()
    if any(key in text for key in ("vlm", "vision", "multimodal")):
        return Domain.VLM
    if any(key in text for key in ("llm", "language", "chat")):
        return Domain.LLM
    if "image" in text:
        return Domain.IMAGE_GEN
    if "video" in text:
        return Domain.VIDEO_GEN
    if any(key in text for key in ("audio", "asr", "speech", "tts")):
        return Domain.TTS if "tts" in text else Domain.ASR
    if "detect" in text or "segment" in text:
        return Domain.VLM
    if any(key in text for key in ("3d", "mesh", "nerf")):
        return Domain.THREE_D
    if "world" in text or "sim" in text:
        return Domain.WORLD_SIM
    return Domain.OTHER


def coerce_domain(value: object, sheet_name: str | None = None) -> Domain:
    """Accept an exact :class:`Domain` value, else fall back to :func:`map_domain`."""

    if isinstance(value, str):
        try:
            return Domain(value)
        except ValueError:
            pass
    return map_domain(value, sheet_name)


def map_license_type(name: str | None) -> LicenseType:
    text = (name or "").lower()
    if not text:
        return LicenseType.CUSTOM
    if re.search(r"(gpl|agpl|lgpl)", text):
        return LicenseType.COPYLEFT
    if re.search(r"(apache|mit|bsd|mpl)", text):
        return LicenseType.OSI
    if re.search(r"(non\s*-?commercial|nc)", text):
        return LicenseType.NON_COMMERCIAL
    if "proprietary" in text:
        return LicenseType.PROPRIETARY
    return LicenseType.CUSTOM


def parse_yes_no(value: object) -> bool | None:
    if isinstance(value, bool):
        return value
    text = str(value or "").strip().lower()
    if not text:
        return None
    if _NO.search(text):
        return False
    if _YES.search(text):
        return True
    return None


def parse_import_date(value: object) -> str | None:
    """Return ``YYYY-MM-DD`` for Excel serial numbers and common date spellings."""

    if value is None or value == "" or isinstance(value, bool):
        return None
    if isinstance(value, int | float):
        if 30000 < value < 100000:
            return (_EXCEL_EPOCH + timedelta(days=float(value))).isoformat()
        return None
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    text = str(value).strip()
    if _ISO_DATE.match(text):
        return text
    try:
        parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
    except ValueError:
        parsed = _parse_with_formats(text)
    if parsed is None:
        return None
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(UTC)
    return parsed.date().isoformat()


def parse_pricing(value: object) -> list[PricingEntry]:
    """Parse pricing cells: ``"Free"``, ``"$0.5 per image"`` or anything else as a note."""

    if isinstance(value, list):
        return [_pricing_from_mapping(entry) for entry in value if isinstance(entry, dict)]
    text = str(value or "").strip()
    if not text:
        return []
    if _FREE.match(text):
        return [PricingEntry(model="Usage", unit="usage", flat=0.0, currency="USD", notes=text)]
    match = _PER_UNIT.search(text)
    if match:
        return [
            PricingEntry(
                model="Usage",
                unit=match.group(2).strip().lower(),
                input=float(match.group(1)),
                currency="USD",
            )
        ]
    return [PricingEntry(model="Usage", unit="usage", notes=text)]


def split_tags(value: object) -> list[str]:
    if isinstance(value, list | tuple):
        return [str(tag) for tag in value]
    if isinstance(value, str):
        return [part.strip() for part in value.split(",") if part.strip()]
    return []


def normalize_import_row(
    row: ImportRow,
    index: int,
    *,
    sheet_name: str | None = None,
) -> ModelRecord:
    sheet = _text(row.get(SHEET_NAME_KEY)) or sheet_name
    source = _text(row.get("source")) or "Import"
    raw_name = _pick(row, _NAME_KEYS)
    record_id = _text(row.get("id")) or _text(row.get("uniqueId"))
    if record_id is None:
        prefix = _text(row.get("source")) or "import"
        record_id = f"{prefix}-{_text(raw_name) or index}"
    name = _text(raw_name) or record_id

    license_name = _text(_pick(row, _LICENSE_KEYS)) or "Unknown"
    commercial = parse_yes_no(_pick(row, _COMMERCIAL_KEYS))

    tags_value = _pick(row, _TAG_KEYS)
    if tags_value is not None:
        tags = split_tags(tags_value)
    else:
        features = _pick(row, _FEATURE_KEYS)
        tags = (
            [part.strip() for part in _FEATURE_SPLIT.split(str(features)) if part.strip()]
            if features is not None
            else []
        )

    description = _text(_pick(row, _DESCRIPTION_KEYS))
    return ModelRecord(
        id=record_id,
        name=name,
        description=clean_description(description) if description else None,
        provider=_text(_pick(row, _PROVIDER_KEYS)),
        domain=coerce_domain(_pick(row, _DOMAIN_KEYS), sheet),
        source=source,
        url=_text(_pick(row, _URL_KEYS)),
        repo=_text(_pick(row, _REPO_KEYS)),
        license=License(
            name=license_name,
            type=map_license_type(license_name),
            commercial_use=True if commercial is None else commercial,
            attribution_required=_flag(row.get("attribution_required"), default=False),
            share_alike=_flag(row.get("share_alike"), default=False),
            copyleft=_flag(row.get("copyleft"), default=False),
        ),
        hosting=Hosting(
            weights_available=_flag(row.get("weights_available"), default=True),
            api_available=_flag(row.get("api_available"), default=True),
            on_premise_friendly=_flag(row.get("on_premise_friendly"), default=True),
        ),
        pricing=parse_pricing(_pick(row, _PRICING_KEYS)),
        release_date=parse_import_date(_pick(row, _RELEASE_KEYS)),
        updated_at=parse_import_date(_pick(row, _UPDATED_KEYS)),
        tags=tags,
        parameters=_text(_pick(row, _PARAMETER_KEYS)),
        context_window=_text(_pick(row, _CONTEXT_KEYS)),
    )


def normalize_import_rows(
    rows: Iterable[ImportRow],
    *,
    sheet_name: str | None = None,
) -> list[ModelRecord]:
    records = [
        normalize_import_row(row, index, sheet_name=sheet_name) for index, row in enumerate(rows)
    ]
    log.info("Normalized %d import rows", len(records))
    return records


def _pick(row: ImportRow, keys: Sequence[str]) -> object | None:
    for key in keys:
        value = row.get(key)
        if value is None or (isinstance(value, str) and not value.strip()):
            continue
        return value
    return None


def _text(value: object) -> str | None:
    if value is None:
        return None
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    text = str(value).strip()
    return text or None


def _flag(value: object, *, default: bool) -> bool:
    if value is None:
        return default
    if isinstance(value, str):
        parsed = parse_yes_no(value)
        return default if parsed is None else parsed
    return bool(value)


def _parse_with_formats(text: str) -> datetime | None:
    for fmt in _DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt)  # noqa: DTZ007
        except ValueError:
            continue
    return None


def _pricing_from_mapping(entry: dict[str, object]) -> PricingEntry:
    return PricingEntry(
        model=_text(entry.get("model")),
        unit=_text(entry.get("unit")),
        input=_number(entry.get("input")),
        output=_number(entry.get("output")),
        flat=_number(entry.get("flat")),
        currency=_text(entry.get("currency")),
        notes=_text(entry.get("notes")),
        url=_text(entry.get("url")),
    )


def _number(value: object) -> float | None:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int | float):
        return float(value)
    try:
        return float(str(value))
    except ValueError:
        return None
