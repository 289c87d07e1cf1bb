from __future__ import annotations

from datetime import UTC, datetime
from typing import TYPE_CHECKING

import pytest

if TYPE_CHECKING:
    from pathlib import Path


@pytest.fixture
def now() -> datetime:
    return datetime(2025, 6, 1, tzinfo=UTC)


@pytest.fixture(autouse=True)
def isolated_environment(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    for name in (
        "MODELCAT_SOURCES",
        "MODELCAT_BLOCK_NSFW",
        "MODELCAT_LOG_NSFW",
        "MODELCAT_NSFW_KEYWORDS",
        "MODELCAT_TRANSLATE",
        "MODELCAT_AUTO_MERGE",
        "MODELCAT_LLM_BASE_URL",
        "MODELCAT_LLM_MODEL",
        "MODELCAT_LLM_PROTOCOL",
        "MODELCAT_LLM_API_KEY",
        "MODELCAT_OLLAMA_URL",
    ):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("MODELCAT_DATA_DIR", str(tmp_path / "data"))
