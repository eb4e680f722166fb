"""
Domain error taxonomy.

"No data" is deliberately absent: an empty scope is returned as None or an
empty list, never raised.
"""


class CryptoStatsError(Exception):
    """Base class for every error raised by this package."""


class SymbolNotAllowedError(CryptoStatsError, ValueError):
    """The requested symbol is in the forbidden-symbol configuration."""

    def __init__(self, symbol: str) -> None:
        self.symbol = symbol
        super().__init__(f"Given crypto symbol is not allowed:{symbol}")


class MalformedInputError(CryptoStatsError, ValueError):
    """A date or datetime request parameter could not be parsed."""


class NoBatchRunError(CryptoStatsError, LookupError):
    def __init__(self) -> None:
        super().__init__("No such job instance (cryptoCsvImportJob) found.")


class IngestionError(CryptoStatsError):
    """Reading or storing a batch of price files failed."""
