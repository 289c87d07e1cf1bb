"""Catalog domain model."""

from __future__ import annotations

from .enums import Domain, LicenseType, Tag
from .record import (
    BenchmarkEntry,
    Hosting,
    License,
    ModelRecord,
    PricingEntry,
    copy_record,
)

__all__ = [
    "BenchmarkEntry",
    "Domain",
    "Hosting",
    "License",
    "LicenseType",
    "ModelRecord",
    "PricingEntry",
    "Tag",
    "copy_record",
]
