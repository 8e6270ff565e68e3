"""Exception types raised by genexref.

Lookup misses are never exceptions: a conversion that finds nothing returns
the empty string. Only misconfiguration and the missing ambient dictionary
are propagated to callers.
"""

from __future__ import annotations


class GenexrefError(Exception):
    """Base class for all genexref errors."""

    pass


class ConfigurationError(GenexrefError, ValueError):
    """Raised for fatal setup problems.

    Covers an unknown or identical scheme pair, bulk access to an indirect
    pair, a table path that does not exist, an unreadable header and an
    invalid scheme declaration.
    """

    pass


class DictionaryNotConfigured(GenexrefError, RuntimeError):
    """Raised when an ambient helper runs with no active dictionary."""

    pass


class DownloadError(GenexrefError):
    """Raised when the default table cannot be fetched after all retries."""

    pass
