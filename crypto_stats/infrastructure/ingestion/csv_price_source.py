"""
Infrastructure adapter: price CSV files → IPriceSource.

Responsibilities confined here:
  - File discovery in SOURCE_DIR by glob pattern.
  - Chunked CSV parsing via pandas.read_csv(chunksize=...).
  - Epoch-millisecond → wall-clock conversion in the configured zone.
  - Row validation: rows missing a field, or with a non-numeric or negative
    price, are dropped and counted instead of being partially stored.

Expected layout (header row is skipped, columns are positional):

    timestamp,symbol,price
    1641009600000,BTC,46813.21
"""

import glob
import logging
import os
from typing import Iterator

import pandas as pd

from crypto_stats.domain.entities.price_point import PricePoint
from crypto_stats.domain.ports.price_source_port import IPriceSource, PriceChunk

logger = logging.getLogger(__name__)

COLUMNS = ("timestamp", "symbol", "price")


class CsvPriceSource(IPriceSource):
    """Reads `<SYMBOL>_values.csv` files from a directory, chunk by chunk."""

    def __init__(
        self,
        source_dir: str,
        name_pattern: str = "*_values.csv",
        chunk_size: int = 10000,
        timezone: str = "UTC",
    ) -> None:
        self._source_dir = source_dir
        self._name_pattern = name_pattern
        self._chunk_size = chunk_size
        self._timezone = timezone

    def discover(self) -> list[str]:
        if not os.path.isdir(self._source_dir):
            logger.warning("Price source directory %s does not exist", self._source_dir)
            return []
        return sorted(glob.glob(os.path.join(self._source_dir, self._name_pattern)))

    def read(self, source: str) -> Iterator[PriceChunk]:
        reader = pd.read_csv(
            source,
            header=0,
            names=list(COLUMNS),
            dtype=str,
            skipinitialspace=True,
            chunksize=self._chunk_size,
        )
        with reader:
            for frame in reader:
                yield self._to_chunk(frame)

    def _to_chunk(self, frame: pd.DataFrame) -> PriceChunk:
        millis = pd.to_numeric(frame["timestamp"], errors="coerce")
        prices = pd.to_numeric(frame["price"], errors="coerce")
        symbols = frame["symbol"].fillna("").str.strip()

        valid = millis.notna() & prices.notna() & (prices >= 0) & (symbols != "")
        skipped = int((~valid).sum())
        if skipped:
            logger.warning("Dropped %d malformed price rows", skipped)

        stamps = (
            pd.to_datetime(millis[valid].astype("int64"), unit="ms", utc=True)
            .dt.tz_convert(self._timezone)
            .dt.tz_localize(None)
        )
        points = [
            PricePoint(symbol=symbol, timestamp=stamp.to_pydatetime(), price=float(price))
            for symbol, stamp, price in zip(symbols[valid], stamps, prices[valid])
        ]
        return PriceChunk(points=points, skipped=skipped)
