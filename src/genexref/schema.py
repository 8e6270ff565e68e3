"""Identifier schemes and the table columns that populate them.

The set of schemes is fixed. Which column labels feed each scheme is declared
in YAML (``schemes.yaml`` ships with the package) so that a table exported with
different headers can be read without code changes. Exactly one scheme is the
primary key; every conversion between two other schemes goes through it.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

import yaml

from genexref.errors import ConfigurationError

DEFAULT_SCHEMES_PATH = Path(__file__).resolve().parent / "schemes.yaml"

# Separator between the two scheme names in an accessor name ("symbol2entrez")
CONVERTER_SEPARATOR = "2"


class IdentifierScheme(str, Enum):
    """Gene identifier schemes known to the converter."""

    HGNCID = "hgncid"
    SYMBOL = "symbol"
    ENTREZ = "entrez"
    REFSEQ = "refseq"
    UNIPROT = "uniprot"
    ENSEMBL = "ensembl"


def coerce_scheme(value: IdentifierScheme | str) -> IdentifierScheme:
    """Return ``value`` as an ``IdentifierScheme``.

    Raises:
        ConfigurationError: If ``value`` names no known scheme.
    """
    if isinstance(value, IdentifierScheme):
        return value
    try:
        return IdentifierScheme(str(value).strip().lower())
    except ValueError:
        known = ", ".join(s.value for s in IdentifierScheme)
        raise ConfigurationError(
            f"Unknown identifier scheme {value!r} (known: {known})"
        ) from None


def converter_name(src: IdentifierScheme, dst: IdentifierScheme) -> str:
    """Build the ``<src>2<dst>`` accessor name for a scheme pair."""
    return f"{src.value}{CONVERTER_SEPARATOR}{dst.value}"


def parse_converter_name(name: str) -> tuple[IdentifierScheme, IdentifierScheme]:
    """Split an accessor name such as ``symbol2entrez`` into its scheme pair.

    Raises:
        ConfigurationError: If the name is not two known schemes joined by ``2``.
    """
    src, sep, dst = name.partition(CONVERTER_SEPARATOR)
    if not sep or not src or not dst:
        raise ConfigurationError(f"{name!r} is not a <src>2<dst> converter name")
    return coerce_scheme(src), coerce_scheme(dst)


@dataclass(frozen=True)
class ColumnSpec:
    """Source columns of one scheme; the first label is the canonical column."""

    scheme: IdentifierScheme
    labels: tuple[str, ...]

    @property
    def canonical(self) -> str:
        return self.labels[0]

    @property
    def aliases(self) -> tuple[str, ...]:
        return self.labels[1:]


class SchemaRegistry:
    """Static declaration of the scheme set, its columns and its primary key."""

    def __init__(
        self,
        columns: Mapping[IdentifierScheme, ColumnSpec],
        primary: IdentifierScheme,
    ) -> None:
        """Initialize and validate the registry.

        Raises:
            ConfigurationError: If a scheme is undeclared or has no columns, the
                primary has more than one column or is the symbol scheme, or a
                label is used twice.
        """
        self._columns = dict(columns)
        self.primary = primary
        self._validate()

    def _validate(self) -> None:
        missing = [s.value for s in IdentifierScheme if s not in self._columns]
        if missing:
            raise ConfigurationError(f"No columns declared for: {', '.join(missing)}")

        seen: set[str] = set()
        for scheme, spec in self._columns.items():
            if not spec.labels:
                raise ConfigurationError(f"Scheme '{scheme.value}' has no columns")
            for label in spec.labels:
                if label in seen:
                    raise ConfigurationError(f"Column '{label}' is declared more than once")
                seen.add(label)

        # Symbol is always a satellite: corrections resolve through its to-primary map
        if self.primary == IdentifierScheme.SYMBOL:
            raise ConfigurationError("The symbol scheme cannot be the primary scheme")
        if len(self._columns[self.primary].labels) != 1:
            raise ConfigurationError(
                f"Primary scheme '{self.primary.value}' must have exactly one column"
            )

    @classmethod
    def from_mapping(cls, data: Mapping[str, object]) -> SchemaRegistry:
        """Build a registry from a parsed declaration.

        Expected shape::

            {"primary": "hgncid", "schemes": {"hgncid": ["HGNC ID"], ...}}
        """
        primary_raw = data.get("primary")
        if not primary_raw:
            raise ConfigurationError("Scheme declaration has no primary scheme")
        primary = coerce_scheme(str(primary_raw))

        schemes_raw = data.get("schemes")
        if not isinstance(schemes_raw, Mapping):
            raise ConfigurationError("Scheme declaration must map scheme names to columns")

        columns: dict[IdentifierScheme, ColumnSpec] = {}
        for name, labels_raw in schemes_raw.items():
            scheme = coerce_scheme(str(name))
            if isinstance(labels_raw, str):
                labels_raw = [labels_raw]
            if not isinstance(labels_raw, list):
                raise ConfigurationError(f"Columns of '{scheme.value}' must be a list of labels")
            labels = tuple(str(label).strip() for label in labels_raw if str(label).strip())
            columns[scheme] = ColumnSpec(scheme=scheme, labels=labels)

        return cls(columns, primary)

    @classmethod
    def from_yaml(cls, path: Path | str) -> SchemaRegistry:
        """Load a registry from a YAML declaration file."""
        path = Path(path)
        if not path.exists():
            raise ConfigurationError(f"Scheme declaration {path} does not exist")
        with path.open("r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
        if not isinstance(data, Mapping):
            raise ConfigurationError(f"Scheme declaration {path} is not a mapping")
        return cls.from_mapping(data)

    def columns_for(self, scheme: IdentifierScheme | str) -> list[str]:
        """Column labels of ``scheme``, canonical first."""
        return list(self._columns[coerce_scheme(scheme)].labels)

    def spec_for(self, scheme: IdentifierScheme | str) -> ColumnSpec:
        return self._columns[coerce_scheme(scheme)]

    def is_primary(self, scheme: IdentifierScheme | str) -> bool:
        return coerce_scheme(scheme) == self.primary

    @property
    def schemes(self) -> list[IdentifierScheme]:
        """All schemes in declaration order, primary included."""
        return list(self._columns)

    @property
    def satellites(self) -> list[IdentifierScheme]:
        """All non-primary schemes in declaration order."""
        return [s for s in self._columns if s != self.primary]

    def __repr__(self) -> str:
        return f"SchemaRegistry(primary={self.primary.value!r}, schemes={[s.value for s in self._columns]})"


# Global registry instance
_registry: SchemaRegistry | None = None


def get_registry() -> SchemaRegistry:
    """Get the default registry, loading ``schemes.yaml`` on first use."""
    global _registry
    if _registry is None:
        _registry = SchemaRegistry.from_yaml(DEFAULT_SCHEMES_PATH)
    return _registry
