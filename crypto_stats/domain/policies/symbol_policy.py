"""
Symbol allow/deny policy.

The forbidden set is fixed at construction and never mutated afterwards, so a
single instance can be shared by every request thread.
"""

from typing import Iterable


class SymbolPolicy:
    def __init__(self, forbidden_symbols: Iterable[str] = ()) -> None:
        self._forbidden = frozenset(forbidden_symbols)

    @property
    def forbidden_symbols(self) -> frozenset[str]:
        return self._forbidden

    def is_forbidden(self, symbol: str) -> bool:
        """Exact, case-sensitive membership test against the forbidden set."""
        return symbol in self._forbidden

    def allowed_symbols(self, known_symbols: Iterable[str]) -> list[str]:
        """Drop forbidden symbols and return the rest in descending order."""
        return sorted(
            {symbol for symbol in known_symbols if symbol not in self._forbidden},
            reverse=True,
        )
