"""Tests for the command-line entry point."""

from __future__ import annotations

import io
from collections.abc import Iterator
from pathlib import Path
from unittest.mock import patch

import pytest

from genexref.__main__ import main
from genexref.config import get_settings
from genexref.resolver import CorrectionPolicy


@pytest.fixture(autouse=True)
def _no_root_logging() -> Iterator[None]:
    """Leave the root logger to pytest."""
    with patch("genexref.__main__.configure_logging"):
        yield


@pytest.fixture
def env_args(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> list[str]:
    """Point the CLI at an empty .env and a temporary data directory."""
    monkeypatch.setenv("GENEXREF_DATA_DIR", str(tmp_path / "data"))
    monkeypatch.setenv("GENEXREF_RETRY_DELAY", "0")
    return ["--env", str(tmp_path / ".env")]


class TestConvert:
    """Tests for identifier conversion from the command line."""

    def test_convert_values(
        self, env_args: list[str], sample_table: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        code = main([*env_args, "--table", str(sample_table), "--from", "symbol", "--to", "entrez", "ASIC1", "RGS5"])
        assert code == 0
        assert capsys.readouterr().out == "ASIC1\t41\nRGS5\t8490\n"

    def test_convert_stdin(
        self, env_args: list[str], sample_table: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        stdin = io.StringIO("8490\n\n41\n")
        code = main([*env_args, "--table", str(sample_table), "--from", "entrez", "--to", "symbol"], stdin=stdin)
        assert code == 0
        assert capsys.readouterr().out == "8490\tRGS5\n41\tASIC1\n"

    def test_correction_is_persisted(
        self, env_args: list[str], sample_table: Path, tmp_path: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        code = main([*env_args, "--table", str(sample_table), "--from", "symbol", "--to", "hgncid", "Asic-1"])
        assert code == 0
        assert capsys.readouterr().out == "Asic-1\tHGNC:100\n"
        log = tmp_path / "data" / "hgnc" / "correction_history.tsv"
        assert log.read_text(encoding="utf-8") == "Asic-1\tASIC1\n"

    def test_no_correct(
        self, env_args: list[str], sample_table: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        code = main([*env_args, "--no-correct", "--table", str(sample_table), "--from", "symbol", "--to", "entrez", "asic1"])
        assert code == 0
        assert capsys.readouterr().out == "asic1\t\n"
        assert get_settings().correct_symbols is False

    def test_manual_switch(
        self,
        env_args: list[str],
        sample_table: Path,
        monkeypatch: pytest.MonkeyPatch,
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        monkeypatch.setattr("sys.stdin", io.StringIO("y\n"))
        code = main([*env_args, "--manual", "--table", str(sample_table), "--from", "symbol", "--to", "entrez", "asic1"])
        assert code == 0
        assert get_settings().correction_policy is CorrectionPolicy.MANUAL
        out = capsys.readouterr().out
        assert 'Use "ASIC1" instead? [Yn] ' in out
        assert out.endswith("asic1\t41\n")

    def test_manual_with_exhausted_stdin(
        self,
        env_args: list[str],
        sample_table: Path,
        tmp_path: Path,
        monkeypatch: pytest.MonkeyPatch,
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        monkeypatch.setattr("sys.stdin", io.StringIO(""))
        code = main([*env_args, "--manual", "--table", str(sample_table), "--from", "symbol", "--to", "entrez", "asic-1"])
        assert code == 0
        assert capsys.readouterr().out.endswith("asic-1\t\n")
        log = tmp_path / "data" / "hgnc" / "correction_history.tsv"
        assert log.read_text(encoding="utf-8") == "asic-1\t\n"

    def test_manual_values_from_stdin(
        self,
        env_args: list[str],
        sample_table: Path,
        monkeypatch: pytest.MonkeyPatch,
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        stdin = io.StringIO("RGS5\nasic-1\n")
        monkeypatch.setattr("sys.stdin", stdin)
        code = main([*env_args, "--manual", "--table", str(sample_table), "--from", "symbol", "--to", "entrez"], stdin=stdin)
        assert code == 0
        out = capsys.readouterr().out
        assert "RGS5\t8490\n" in out
        assert out.endswith("asic-1\t\n")

    def test_missing_table(self, env_args: list[str], tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        code = main([*env_args, "--table", str(tmp_path / "nope.txt"), "--from", "symbol", "--to", "entrez", "ASIC1"])
        assert code == 1
        assert "does not exist" in capsys.readouterr().err

    def test_unknown_scheme(
        self, env_args: list[str], sample_table: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        code = main([*env_args, "--table", str(sample_table), "--from", "symbol", "--to", "omim", "ASIC1"])
        assert code == 1
        assert "Unknown identifier scheme" in capsys.readouterr().err

    def test_from_and_to_are_required(self, env_args: list[str], sample_table: Path) -> None:
        with pytest.raises(SystemExit) as excinfo:
            main([*env_args, "--table", str(sample_table), "ASIC1"])
        assert excinfo.value.code == 2


class TestInformational:
    """Tests for --stats and --list-converters."""

    def test_stats(self, env_args: list[str], sample_table: Path, capsys: pytest.CaptureFixture[str]) -> None:
        assert main([*env_args, "--table", str(sample_table), "--stats"]) == 0
        out = capsys.readouterr().out
        assert out.startswith("Loaded: 12 rows, 1 without primary key, 1 malformed")
        assert "  hgncid           12" in out
        assert "  symbol           30" in out

    def test_list_converters(
        self, env_args: list[str], sample_table: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        assert main([*env_args, "--table", str(sample_table), "--list-converters"]) == 0
        out = capsys.readouterr().out
        assert "Direct converters:\n  hgncid2symbol\n" in out
        assert "  symbol2entrez\n" in out


class TestDownload:
    """Tests for the default table download."""

    def test_download_only(
        self, env_args: list[str], sample_table: Path, tmp_path: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        text = sample_table.read_text(encoding="utf-8")
        with patch("genexref.source.fetch_text", return_value=text):
            assert main([*env_args, "--download-only"]) == 0

        cached = tmp_path / "data" / "hgnc" / "hgnc_downloads.txt"
        assert capsys.readouterr().out.strip() == str(cached)
        assert cached.read_text(encoding="utf-8") == text

    def test_default_table_is_downloaded_for_conversion(
        self, env_args: list[str], sample_table: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        text = sample_table.read_text(encoding="utf-8")
        with patch("genexref.source.fetch_text", return_value=text):
            assert main([*env_args, "--from", "entrez", "--to", "ensembl", "324"]) == 0
        assert capsys.readouterr().out == "324\tENSG00000134982\n"

    def test_download_failure(
        self, env_args: list[str], monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
    ) -> None:
        monkeypatch.setenv("GENEXREF_MAX_RETRIES", "0")
        with patch("genexref.source.fetch_text", side_effect=OSError("offline")):
            assert main([*env_args, "--download-only"]) == 1
        assert "offline" in capsys.readouterr().err
