"""Process-wide active dictionary for ambient conversions.

Text-processing code often converts identifiers far away from where the
table was loaded. Instead of threading the matrix through every call, one
matrix can be registered as the active dictionary and the helpers here fall
back to it when no ``dictionary`` argument is given::

    open_dictionary().as_dictionary()
    symbol2entrez = converter("symbol", "entrez")
    symbol2entrez("APC")                              # "324"
    convert_all(["APC", "IL1"], "symbol", "entrez")   # ["324", "3552"]
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Iterator
from contextlib import contextmanager
from typing import TYPE_CHECKING, cast

from genexref.errors import ConfigurationError, DictionaryNotConfigured
from genexref.schema import IdentifierScheme, coerce_scheme

if TYPE_CHECKING:
    from genexref.matrix import ConverterMatrix

_active: ConverterMatrix | None = None


def set_active(matrix: ConverterMatrix | None) -> ConverterMatrix | None:
    """Register ``matrix`` as the active dictionary; None deregisters.

    Returns:
        The previously active matrix, so callers can restore it later.
    """
    global _active
    if matrix is not None and not hasattr(matrix, "convert"):
        raise TypeError(f"Not a converter matrix: {matrix!r}")
    previous, _active = _active, matrix
    return previous


def active() -> ConverterMatrix | None:
    """The active dictionary, or None."""
    return _active


def require_active(dictionary: ConverterMatrix | None = None) -> ConverterMatrix:
    """Return ``dictionary`` if given, else the active one.

    Raises:
        DictionaryNotConfigured: If neither is available.
    """
    if dictionary is not None:
        return dictionary
    if _active is None:
        raise DictionaryNotConfigured(
            "No gene dictionary configured; call set_active() or as_dictionary() first"
        )
    return _active


@contextmanager
def using(matrix: ConverterMatrix | None) -> Iterator[ConverterMatrix | None]:
    """Make ``matrix`` active inside a ``with`` block, restoring the previous one after."""
    previous = set_active(matrix)
    try:
        yield matrix
    finally:
        set_active(previous)


def convert(
    value: str,
    src: IdentifierScheme | str,
    dst: IdentifierScheme | str,
    *,
    dictionary: ConverterMatrix | None = None,
) -> str:
    """Convert one identifier; "" when it has no counterpart."""
    if not isinstance(value, str):
        raise TypeError(f'"{value}"({type(value).__name__}) is not a string')
    return cast(str, require_active(dictionary).convert(src, dst, value))


def convert_all(
    values: Iterable[str],
    src: IdentifierScheme | str,
    dst: IdentifierScheme | str,
    *,
    dictionary: ConverterMatrix | None = None,
) -> list[str]:
    """Convert every identifier in ``values``, keeping order and length.

    Raises:
        TypeError: If any element is not a string; nothing is converted then.
    """
    items = list(values)
    for item in items:
        if not isinstance(item, str):
            raise TypeError(f'The element "{item}"({type(item).__name__}) is not a string')
    matrix = require_active(dictionary)
    return [convert(item, src, dst, dictionary=matrix) for item in items]


def converter(
    src: IdentifierScheme | str,
    dst: IdentifierScheme | str,
) -> Callable[[str], str]:
    """A one-argument converter that uses whichever dictionary is active at call time."""
    src_scheme = coerce_scheme(src)
    dst_scheme = coerce_scheme(dst)
    if src_scheme == dst_scheme:
        raise ConfigurationError(f"Cannot convert '{src_scheme.value}' into itself")

    def _convert(value: str) -> str:
        return convert(value, src_scheme, dst_scheme)

    _convert.__name__ = f"{src_scheme.value}2{dst_scheme.value}"
    return _convert
