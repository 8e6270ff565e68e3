"""Shared fixtures for genexref tests."""

from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path

import pytest

from genexref import config, context
from genexref.config import Settings
from genexref.loader import load
from genexref.matrix import ConverterMatrix
from genexref.resolver import CorrectionLog

FIXTURES_DIR = Path(__file__).parent / "fixtures"
SAMPLE_TABLE = FIXTURES_DIR / "hgnc_sample.txt"


@pytest.fixture(autouse=True)
def _isolate_process_state(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Keep the process-wide settings and active dictionary out of other tests."""
    for name in (
        "GENEXREF_DATA_DIR",
        "GENEXREF_SCHEMES",
        "GENEXREF_TABLE_URL",
        "GENEXREF_CORRECT_SYMBOLS",
        "GENEXREF_CORRECTION_POLICY",
        "GENEXREF_MAX_RETRIES",
        "GENEXREF_RETRY_DELAY",
        "GENEXREF_RETRY_MAX_DELAY",
    ):
        monkeypatch.delenv(name, raising=False)
    config.reset_settings()
    context.set_active(None)
    yield
    config.reset_settings()
    context.set_active(None)


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    return Settings(data_dir=tmp_path / "data", retry_initial_delay=0.0)


@pytest.fixture
def correction_log(tmp_path: Path) -> CorrectionLog:
    return CorrectionLog(tmp_path / "correction_history.tsv")


@pytest.fixture
def sample_table() -> Path:
    return SAMPLE_TABLE


@pytest.fixture
def sample_lines() -> list[str]:
    """Sample table split into lines, line endings kept."""
    return SAMPLE_TABLE.read_text(encoding="utf-8").splitlines(keepends=True)


@pytest.fixture
def hgnc(
    sample_lines: list[str], settings: Settings, correction_log: CorrectionLog
) -> ConverterMatrix:
    """Matrix over the sample table with automatic correction."""
    return load(sample_lines, correction_log=correction_log, settings=settings)
