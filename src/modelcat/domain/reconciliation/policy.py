"""Field groups driving the merge of two records.

Identity fields stay stable: the existing value wins when present. Dynamic
fields change between syncs, so the incoming value wins when present. List
fields and the user flags are merged explicitly in :mod:`.merge`.
"""

from __future__ import annotations

from typing import Final

IDENTITY_FIELDS: Final = ("name", "provider", "domain", "source", "url", "repo")
DYNAMIC_FIELDS: Final = (
    "release_date",
    "updated_at",
    "downloads",
    "parameters",
    "context_window",
    "indemnity",
    "data_provenance",
    "benchmarks",
    "analytics",
    "description",
)
LICENSE_FIELDS: Final = (
    "name",
    "type",
    "commercial_use",
    "attribution_required",
    "share_alike",
    "copyleft",
    "url",
    "notes",
)
HOSTING_FLAGS: Final = ("weights_available", "api_available", "on_premise_friendly")
