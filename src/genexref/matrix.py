"""Conversion between every pair of identifier schemes.

Only primary-key tables are stored: for each satellite scheme one
satellite-to-primary and one primary-to-satellite map. A conversion between
two satellite schemes is always computed as two hops through the primary key,
so adding a scheme adds two maps rather than a row of pairwise tables.

Usage::

    matrix.convert("symbol", "entrez", "ASIC1")   # "41"
    matrix.symbol2entrez("ASIC1")                 # same, by accessor name
    matrix.symbol2hgncid()["ASIC1"]               # bulk map, direct pairs only
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import TYPE_CHECKING

from genexref.errors import ConfigurationError
from genexref.schema import (
    IdentifierScheme,
    SchemaRegistry,
    coerce_scheme,
    converter_name,
    parse_converter_name,
)

if TYPE_CHECKING:
    from genexref.loader import LoadStats
    from genexref.resolver import CorrectionResolver


@dataclass
class DirectMap:
    """Both directions of one (primary, satellite) pair."""

    scheme: IdentifierScheme
    to_primary: dict[str, str] = field(default_factory=dict)
    from_primary: dict[str, str] = field(default_factory=dict)


class Converter:
    """Accessor for one scheme pair; returned by ``ConverterMatrix.<src>2<dst>``."""

    def __init__(self, matrix: ConverterMatrix, src: IdentifierScheme, dst: IdentifierScheme) -> None:
        self.matrix = matrix
        self.src = src
        self.dst = dst

    @property
    def name(self) -> str:
        return converter_name(self.src, self.dst)

    def __call__(self, key: str | None = None) -> str | Mapping[str, str]:
        return self.matrix.convert(self.src, self.dst, key)

    def __repr__(self) -> str:
        return f"<Converter {self.name}>"


class ConverterMatrix:
    """Read-only conversion matrix built from one loaded table."""

    def __init__(
        self,
        registry: SchemaRegistry,
        maps: Mapping[IdentifierScheme, DirectMap],
        primary_keys: frozenset[str] = frozenset(),
        resolver: CorrectionResolver | None = None,
        load_stats: LoadStats | None = None,
    ) -> None:
        self.registry = registry
        self._maps = dict(maps)
        self.primary_keys = primary_keys
        self.resolver = resolver
        self.load_stats = load_stats

    @property
    def primary(self) -> IdentifierScheme:
        return self.registry.primary

    def is_direct(self, src: IdentifierScheme, dst: IdentifierScheme) -> bool:
        """Whether the pair is backed by a stored map (one side is the primary key)."""
        return self.primary in (src, dst)

    def convert(
        self,
        src: IdentifierScheme | str,
        dst: IdentifierScheme | str,
        key: str | None = None,
    ) -> str | Mapping[str, str]:
        """Convert ``key`` from ``src`` to ``dst``.

        Without ``key`` the read-only map of a direct pair is returned. With a
        key the mapped value is returned, or "" if there is none.

        Raises:
            ConfigurationError: If a scheme is unknown, ``src == dst``, or a bulk
                map is requested for an indirect pair.
            TypeError: If ``key`` is not a string.
        """
        src, dst = self._pair(src, dst)

        if key is None:
            return self.table(src, dst)
        if not isinstance(key, str):
            raise TypeError(
                f'The parameter "{key}"({type(key).__name__}) can\'t be converted into a string'
            )

        key = key.strip()
        if not key:
            return ""
        if src == self.primary:
            return self._maps[dst].from_primary.get(key, "")

        primary_key = self.to_primary(src, key)
        if dst == self.primary or not primary_key:
            return primary_key
        return self._maps[dst].from_primary.get(primary_key, "")

    def table(self, src: IdentifierScheme | str, dst: IdentifierScheme | str) -> Mapping[str, str]:
        """Read-only map of a direct pair.

        Symbol correction does not apply here: a bulk map only holds what the
        table holds.
        """
        src, dst = self._pair(src, dst)
        if not self.is_direct(src, dst):
            raise ConfigurationError(
                f"Bulk access is not supported for indirect converter "
                f"{converter_name(src, dst)}; convert through {self.primary.value} instead"
            )
        if src == self.primary:
            return MappingProxyType(self._maps[dst].from_primary)
        return MappingProxyType(self._maps[src].to_primary)

    def to_primary(self, src: IdentifierScheme, key: str) -> str:
        """First hop of every conversion out of a satellite scheme."""
        if src == IdentifierScheme.SYMBOL and self.resolver is not None:
            return self.resolver.lookup(key)
        return self._maps[src].to_primary.get(key, "")

    def converter(self, src: IdentifierScheme | str, dst: IdentifierScheme | str) -> Converter:
        src, dst = self._pair(src, dst)
        return Converter(self, src, dst)

    def converter_list(self) -> dict[str, list[str]]:
        """Accessor names, split into direct and indirect pairs."""
        listing: dict[str, list[str]] = {"direct": [], "indirect": []}
        for src in self.registry.schemes:
            for dst in self.registry.schemes:
                if src == dst:
                    continue
                kind = "direct" if self.is_direct(src, dst) else "indirect"
                listing[kind].append(converter_name(src, dst))
        return listing

    def stat(self) -> dict[str, int]:
        """Entry counts: primary keys for the primary, lookup keys for satellites."""
        counts: dict[str, int] = {}
        for scheme in self.registry.schemes:
            if scheme == self.primary:
                counts[scheme.value] = len(self.primary_keys)
            else:
                counts[scheme.value] = len(self._maps[scheme].to_primary)
        return counts

    def as_dictionary(self) -> ConverterMatrix:
        """Make this matrix the active dictionary for ambient helpers."""
        from genexref.context import set_active

        set_active(self)
        return self

    def _pair(
        self, src: IdentifierScheme | str, dst: IdentifierScheme | str
    ) -> tuple[IdentifierScheme, IdentifierScheme]:
        src = coerce_scheme(src)
        dst = coerce_scheme(dst)
        if src == dst:
            raise ConfigurationError(f"Cannot convert '{src.value}' into itself")
        return src, dst

    def __getattr__(self, name: str) -> Converter:
        # Only reached for names that are not real attributes
        if name.startswith("_"):
            raise AttributeError(name)
        try:
            src, dst = parse_converter_name(name)
        except ConfigurationError:
            raise AttributeError(
                f"{type(self).__name__!r} object has no attribute {name!r}"
            ) from None
        return self.converter(src, dst)

    def __repr__(self) -> str:
        return f"<ConverterMatrix stat={self.stat()!r}>"
