"""Runtime settings for genexref.

Settings come from environment variables and an optional ``.env`` file. The
two correction switches (``correct_symbols`` and ``correction_policy``) are
process-wide: resolvers built without explicit settings read the active
``Settings`` object on every lookup, so changing them affects later lookups
only.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

from genexref.errors import ConfigurationError
from genexref.resolver import CorrectionPolicy

# Default HGNC custom download (protein-coding genes, approved and withdrawn)
DEFAULT_TABLE_URL = (
    "https://www.genenames.org/cgi-bin/download/custom?"
    "col=gd_hgnc_id&col=gd_app_sym&col=gd_app_name&col=gd_status&col=gd_prev_sym"
    "&col=gd_aliases&col=gd_pub_chrom_map&col=gd_pub_acc_ids&col=gd_pub_refseq_ids"
    "&col=md_eg_id&col=md_refseq_id&col=md_prot_id&col=md_ensembl_id"
    "&status=Approved&status=Entry%20Withdrawn&hgnc_dbtag=on"
    "&order_by=gd_hgnc_id&format=text&submit=submit"
)
TABLE_FILENAME = "hgnc_downloads.txt"
CORRECTION_LOG_FILENAME = "correction_history.tsv"

_TRUE_VALUES = frozenset({"1", "true", "yes", "on"})
_FALSE_VALUES = frozenset({"0", "false", "no", "off"})


@dataclass
class Settings:
    """genexref configuration loaded from environment."""

    # Paths
    data_dir: Path = field(default_factory=lambda: Path("./data"))
    schemes_path: Path | None = None

    # Default table source
    table_url: str = DEFAULT_TABLE_URL

    # Correction switches
    correct_symbols: bool = True
    correction_policy: CorrectionPolicy = CorrectionPolicy.AUTO

    # Retry settings
    max_retries: int = 3
    retry_initial_delay: float = 2.0
    retry_max_delay: float = 60.0

    @classmethod
    def from_env(cls, env_file: Path | None = None) -> Settings:
        """Load settings from environment variables and optional .env file.

        Args:
            env_file: Optional path to .env file. If None, looks for .env in cwd.

        Returns:
            Settings instance with values from environment.

        Raises:
            ConfigurationError: If a numeric or boolean value cannot be parsed.
        """
        if env_file is None:
            env_file = Path(".env")

        if env_file.exists():
            _load_dotenv(env_file)

        schemes_raw = os.environ.get("GENEXREF_SCHEMES")

        return cls(
            data_dir=Path(os.environ.get("GENEXREF_DATA_DIR", "./data")),
            schemes_path=Path(schemes_raw) if schemes_raw else None,
            table_url=os.environ.get("GENEXREF_TABLE_URL") or DEFAULT_TABLE_URL,
            correct_symbols=_env_bool("GENEXREF_CORRECT_SYMBOLS", True),
            correction_policy=CorrectionPolicy.parse(
                os.environ.get("GENEXREF_CORRECTION_POLICY", "auto")
            ),
            max_retries=_env_number("GENEXREF_MAX_RETRIES", "3", int),
            retry_initial_delay=_env_number("GENEXREF_RETRY_DELAY", "2.0", float),
            retry_max_delay=_env_number("GENEXREF_RETRY_MAX_DELAY", "60.0", float),
        )

    @property
    def hgnc_dir(self) -> Path:
        return self.data_dir / "hgnc"

    @property
    def table_path(self) -> Path:
        """Where the default table is cached."""
        return self.hgnc_dir / TABLE_FILENAME

    @property
    def correction_log_path(self) -> Path:
        """Where learned corrections are persisted."""
        return self.hgnc_dir / CORRECTION_LOG_FILENAME


def _env_bool(name: str, default: bool) -> bool:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    value = raw.strip().lower()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    raise ConfigurationError(f"{name} must be a boolean, got {raw!r}")


def _env_number(name: str, default: str, kind: type[int] | type[float]) -> int | float:
    raw = os.environ.get(name, default)
    try:
        return kind(raw)
    except ValueError:
        raise ConfigurationError(f"{name} must be a {kind.__name__}, got {raw!r}") from None


def _load_dotenv(path: Path) -> None:
    """Minimal .env reader.

    Parses KEY=VALUE lines, ignoring comments and empty lines.
    Does not override existing environment variables.
    """
    with path.open(encoding="utf-8") as f:
        for line in f:
            line = line.strip()
            if not line or line.startswith("#") or "=" not in line:
                continue
            key, _, value = line.partition("=")
            key = key.strip()
            value = value.strip()
            if len(value) >= 2 and value[0] == value[-1] and value[0] in "\"'":
                value = value[1:-1]
            if key and key not in os.environ:
                os.environ[key] = value


# Process-wide settings slot
_settings: Settings | None = None


def get_settings() -> Settings:
    """Get the process-wide settings, reading the environment on first use."""
    global _settings
    if _settings is None:
        _settings = Settings.from_env()
    return _settings


def set_settings(settings: Settings) -> Settings | None:
    """Install ``settings`` as the process-wide settings; return the previous ones."""
    global _settings
    previous, _settings = _settings, settings
    return previous


def reset_settings() -> None:
    """Forget the process-wide settings so the next access re-reads the environment."""
    global _settings
    _settings = None
