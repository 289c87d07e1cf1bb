"""Result of a sync run."""

from __future__ import annotations

from dataclasses import dataclass, field

from modelcat.domain.model import ModelRecord


@dataclass(slots=True, kw_only=True)
class SyncResult:
    """``complete`` records go on to reconciliation; ``flagged`` ones were withheld."""

    complete: list[ModelRecord] = field(default_factory=list[ModelRecord])
    flagged: list[ModelRecord] = field(default_factory=list[ModelRecord])
