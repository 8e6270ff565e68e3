"""Build a converter matrix from an HGNC-style table.

Table format:

- UTF-8 text, tab-separated columns
- lines whose first non-blank character is ``#`` are comments
- the first other line is the header; its labels are matched exactly against
  the scheme declaration
- ``-`` or an empty cell means "no value"
- alias columns hold lists separated by ``", "``

Every row is keyed by its primary-key cell; rows without one are skipped.
A canonical column overwrites earlier entries for the same value, alias
columns never do.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

from genexref.errors import ConfigurationError
from genexref.matrix import ConverterMatrix, DirectMap
from genexref.resolver import CorrectionLog, CorrectionPrompt, CorrectionResolver
from genexref.schema import IdentifierScheme, SchemaRegistry, get_registry

if TYPE_CHECKING:
    from genexref.config import Settings

logger = logging.getLogger(__name__)

MISSING_VALUES = frozenset({"", "-"})
LIST_SEPARATOR = ", "


@dataclass
class LoadStats:
    """Statistics from one table load."""

    rows_loaded: int = 0
    rows_skipped: int = 0
    rows_malformed: int = 0
    duration_seconds: float = 0.0

    def __str__(self) -> str:
        """Return a human-readable summary."""
        parts = [f"{self.rows_loaded:,} rows"]
        if self.rows_skipped:
            parts.append(f"{self.rows_skipped:,} without primary key")
        if self.rows_malformed:
            parts.append(f"{self.rows_malformed:,} malformed")
        return f"{', '.join(parts)} ({self.duration_seconds:.1f}s)"


@dataclass(frozen=True)
class _Column:
    """A header column bound to the map it feeds."""

    index: int
    label: str
    scheme: IdentifierScheme
    canonical: bool


def _is_comment(line: str) -> bool:
    return line.lstrip().startswith("#")


def _split_values(cell: str) -> list[str]:
    values = []
    for value in cell.split(LIST_SEPARATOR):
        value = value.strip()
        if value not in MISSING_VALUES:
            values.append(value)
    return values


def _bind_header(header: str, registry: SchemaRegistry) -> tuple[int, list[_Column]]:
    """Resolve declared column labels to indexes in ``header``.

    Returns:
        Index of the primary-key column and the satellite columns found.

    Raises:
        ConfigurationError: If the primary-key column is not in the header.
    """
    labels = [label.strip() for label in header.rstrip("\r\n").split("\t")]
    positions = {label: i for i, label in reversed(list(enumerate(labels)))}

    primary_label = registry.columns_for(registry.primary)[0]
    if primary_label not in positions:
        raise ConfigurationError(f"Header has no primary-key column '{primary_label}'")

    columns: list[_Column] = []
    for scheme in registry.satellites:
        for i, label in enumerate(registry.columns_for(scheme)):
            if label not in positions:
                logger.warning("Header has no column '%s' for scheme '%s'", label, scheme.value)
                continue
            columns.append(_Column(positions[label], label, scheme, canonical=(i == 0)))

    return positions[primary_label], columns


def load(
    lines: Iterable[str],
    registry: SchemaRegistry | None = None,
    *,
    correction_log: CorrectionLog | None = None,
    prompt: CorrectionPrompt | None = None,
    settings: Settings | None = None,
) -> ConverterMatrix:
    """Parse a table into a converter matrix.

    Args:
        lines: Raw table lines, header included.
        registry: Scheme declaration; the packaged default when None.
        correction_log: Durable log for symbol corrections.
        prompt: Operator prompt used by the manual correction policy.
        settings: Fixed settings for the resolver; None follows the
            process-wide switches.

    Returns:
        The populated matrix; ``matrix.load_stats`` describes the load.

    Raises:
        ConfigurationError: If there is no header or it lacks the primary key.
    """
    registry = registry or get_registry()
    start = time.monotonic()
    stats = LoadStats()

    maps = {scheme: DirectMap(scheme) for scheme in registry.satellites}
    primary_keys: set[str] = set()

    primary_index: int | None = None
    columns: list[_Column] = []
    width = 0

    for line_number, line in enumerate(lines, start=1):
        if not line.strip() or _is_comment(line):
            continue
        if primary_index is None:
            primary_index, columns = _bind_header(line, registry)
            width = max([primary_index] + [c.index for c in columns]) + 1
            continue

        cells = line.rstrip("\r\n").split("\t")
        if len(cells) < width:
            stats.rows_malformed += 1
            logger.warning(
                "Skipping malformed line %d: %d columns, expected at least %d",
                line_number,
                len(cells),
                width,
            )
            continue

        primary_key = cells[primary_index].strip()
        if primary_key in MISSING_VALUES:
            stats.rows_skipped += 1
            continue

        primary_keys.add(primary_key)
        for column in columns:
            values = _split_values(cells[column.index])
            if not values:
                continue
            direct = maps[column.scheme]
            if column.canonical:
                for value in values:
                    direct.to_primary[value] = primary_key
                direct.from_primary[primary_key] = values[0]
            else:
                for value in values:
                    direct.to_primary.setdefault(value, primary_key)
        stats.rows_loaded += 1

    if primary_index is None:
        raise ConfigurationError("Table has no header line")

    stats.duration_seconds = time.monotonic() - start
    logger.info("Loaded HGNC table: %s", stats)

    resolver = CorrectionResolver(
        maps[IdentifierScheme.SYMBOL].to_primary,
        log=correction_log,
        prompt=prompt,
        settings=settings,
    )
    matrix = ConverterMatrix(
        registry,
        maps,
        primary_keys=frozenset(primary_keys),
        resolver=resolver,
        load_stats=stats,
    )
    logger.debug("New matrix %r", matrix)
    return matrix


def load_file(
    path: Path | str,
    registry: SchemaRegistry | None = None,
    *,
    correction_log: CorrectionLog | None = None,
    prompt: CorrectionPrompt | None = None,
    settings: Settings | None = None,
) -> ConverterMatrix:
    """Load a table file.

    Raises:
        ConfigurationError: If ``path`` does not exist.
    """
    path = Path(path)
    if not path.exists():
        raise ConfigurationError(f"{path} does not exist")
    with path.open("r", encoding="utf-8") as f:
        return load(
            f,
            registry,
            correction_log=correction_log,
            prompt=prompt,
            settings=settings,
        )


def open_dictionary(
    table_path: Path | str | None = None,
    *,
    settings: Settings | None = None,
    prompt: CorrectionPrompt | None = None,
    force_download: bool = False,
) -> ConverterMatrix:
    """Build the converter matrix for a table, downloading the default one if needed.

    Args:
        table_path: A pre-fetched table. When None the default table is taken
            from the cache in the data directory, downloading it first if absent.
        settings: Settings to use; the process-wide settings when None. The
            resolver keeps following the process-wide switches in that case.
        prompt: Operator prompt used by the manual correction policy.
        force_download: Re-download the default table even if cached.

    Raises:
        ConfigurationError: If an explicit ``table_path`` does not exist.
        DownloadError: If the default table cannot be downloaded.
    """
    from genexref.config import get_settings
    from genexref.source import HGNCSource

    active_settings = settings or get_settings()
    if active_settings.schemes_path is not None:
        registry = SchemaRegistry.from_yaml(active_settings.schemes_path)
    else:
        registry = get_registry()

    if table_path is not None:
        path = Path(table_path)
        if not path.exists():
            raise ConfigurationError(f"{path} does not exist")
    else:
        if not active_settings.table_path.exists():
            logger.info("Default HGNC table not found, downloading one")
        path = HGNCSource(active_settings).download(force=force_download)

    return load_file(
        path,
        registry,
        correction_log=CorrectionLog(active_settings.correction_log_path),
        prompt=prompt,
        settings=settings,
    )
