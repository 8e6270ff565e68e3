"""Correction of gene symbols that are not found verbatim in the table.

When a symbol lookup misses, the resolver tries to find the symbol the caller
meant. The automatic policy normalizes case and hyphens; the manual policy
shows the automatic suggestion to an operator and otherwise asks for a
replacement. Every decision, including "cannot be resolved", is remembered in
memory and appended to a tab-separated correction log so it is never asked
again, not even in a later run.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from genexref.config import Settings

logger = logging.getLogger(__name__)


class CorrectionPolicy(str, Enum):
    """How an unrecognized symbol is corrected."""

    AUTO = "auto"
    MANUAL = "manual"

    @classmethod
    def parse(cls, value: str | CorrectionPolicy) -> CorrectionPolicy:
        """Anything other than ``manual`` selects the automatic policy."""
        if isinstance(value, CorrectionPolicy):
            return value
        return cls.MANUAL if str(value).strip().lower() == cls.MANUAL.value else cls.AUTO


def auto_candidates(symbol: str) -> list[str]:
    """Candidate spellings tried by the automatic policy, in order."""
    return [
        symbol.upper(),
        symbol.replace("-", ""),
        symbol.upper().replace("-", ""),
    ]


def auto_correct(symbol: str, known: Mapping[str, str]) -> str:
    """Return the first candidate spelling present in ``known``, or ""."""
    for candidate in auto_candidates(symbol):
        if candidate in known:
            return candidate
    return ""


@runtime_checkable
class CorrectionPrompt(Protocol):
    """Operator interaction used by the manual policy."""

    def confirm(self, symbol: str, suggestion: str) -> bool:
        """Ask whether ``suggestion`` should replace ``symbol``."""
        ...

    def ask(self, symbol: str) -> str:
        """Ask for a replacement of ``symbol``; "" abandons the correction."""
        ...

    def reject(self, symbol: str, replacement: str) -> None:
        """Tell the operator that ``replacement`` was not recognized either."""
        ...


class TerminalPrompt:
    """``CorrectionPrompt`` reading answers from a terminal."""

    def __init__(
        self,
        input_func: Callable[[str], str] = input,
        output_func: Callable[[str], None] = print,
    ) -> None:
        self._input = input_func
        self._output = output_func

    def _read(self, text: str) -> str | None:
        """Read one answer; None once input is exhausted."""
        try:
            return self._input(text)
        except EOFError:
            return None

    def confirm(self, symbol: str, suggestion: str) -> bool:
        answer = self._read(f'"{symbol}" unrecognized. Use "{suggestion}" instead? [Yn] ')
        # No answer at all declines the suggestion
        if answer is None:
            return False
        return answer.strip().lower() != "n"

    def ask(self, symbol: str) -> str:
        answer = self._read(
            f'Please correct "{symbol}" or press enter directly to leave it unresolved: '
        )
        return (answer or "").strip()

    def reject(self, symbol: str, replacement: str) -> None:
        self._output(f'Failed to recognize "{replacement}"')


class CorrectionLog:
    """Append-only correction history, one ``attempted<TAB>resolved`` record per line."""

    def __init__(self, path: Path | str) -> None:
        self.path = Path(path)

    def load(self) -> dict[str, str]:
        """Read all recorded corrections; a missing file means no history."""
        history: dict[str, str] = {}
        if not self.path.exists():
            return history
        with self.path.open("r", encoding="utf-8") as f:
            for line in f:
                line = line.rstrip("\r\n")
                if not line:
                    continue
                attempted, _, resolved = line.partition("\t")
                history[attempted] = resolved
        logger.info("Loaded %d corrections from %s", len(history), self.path)
        return history

    def append(self, attempted: str, resolved: str) -> None:
        """Write one record as a single whole line and flush it."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with self.path.open("a", encoding="utf-8") as f:
            f.write(f"{attempted}\t{resolved}\n")
            f.flush()


class CorrectionResolver:
    """Symbol-to-primary-key lookup with learned corrections.

    The resolver owns the in-memory correction cache and the handle to the
    durable log. It is not thread-safe; one resolver per log file.
    """

    def __init__(
        self,
        symbols: Mapping[str, str],
        log: CorrectionLog | None = None,
        prompt: CorrectionPrompt | None = None,
        settings: Settings | None = None,
    ) -> None:
        """Initialize the resolver.

        Args:
            symbols: The symbol-to-primary-key map corrections must land in.
            log: Durable correction log; None keeps corrections in memory only.
            prompt: Operator prompt for the manual policy (terminal by default).
            settings: Fixed settings; None reads the process-wide settings on
                every lookup.
        """
        self._symbols = symbols
        self._log = log
        self._prompt = prompt
        self._settings = settings
        self.history: dict[str, str] = log.load() if log is not None else {}
        self.unresolved = 0

    @property
    def settings(self) -> Settings:
        if self._settings is not None:
            return self._settings
        from genexref.config import get_settings

        return get_settings()

    @property
    def prompt(self) -> CorrectionPrompt:
        if self._prompt is None:
            self._prompt = TerminalPrompt()
        return self._prompt

    def lookup(self, symbol: str) -> str:
        """Primary key of ``symbol``, correcting it if needed; "" when unresolved."""
        primary = self._symbols.get(symbol)
        if primary is not None:
            return primary
        if not symbol or not self.settings.correct_symbols:
            return ""
        return self._symbols.get(self.correct(symbol), "")

    def correct(self, symbol: str, policy: CorrectionPolicy | None = None) -> str:
        """Run a correction policy for ``symbol`` and record the outcome.

        A symbol that already has a recorded decision is not corrected again.

        Returns:
            The corrected symbol, or "" when the symbol stays unresolved.
        """
        if symbol in self.history:
            return self.history[symbol]
        policy = policy or self.settings.correction_policy
        if policy == CorrectionPolicy.MANUAL:
            resolved = self._correct_manually(symbol)
        else:
            resolved = auto_correct(symbol, self._symbols)

        if resolved:
            logger.warning('Unrecognized symbol "%s", "%s" used instead', symbol, resolved)
        else:
            self.unresolved += 1
            logger.warning('Unrecognized symbol "%s" could not be resolved', symbol)
        self._record(symbol, resolved)
        return resolved

    def preview(self, symbol: str) -> str:
        """Automatic suggestion for ``symbol`` without recording anything."""
        return auto_correct(symbol, self._symbols)

    def _correct_manually(self, symbol: str) -> str:
        prompt = self.prompt
        suggestion = self.preview(symbol)
        if suggestion and prompt.confirm(symbol, suggestion):
            return suggestion
        while True:
            replacement = prompt.ask(symbol)
            if not replacement or replacement in self._symbols:
                return replacement
            prompt.reject(symbol, replacement)

    def _record(self, symbol: str, resolved: str) -> None:
        self.history[symbol] = resolved
        if self._log is None:
            return
        if any(c in symbol for c in "\t\r\n"):
            logger.warning("Correction for %r kept in memory only: contains a line or tab break", symbol)
            return
        self._log.append(symbol, resolved)
