"""
HTTP request/response shapes.

Response models use the camelCase keys of the public JSON contract; the
from_entity() constructors are the only place where domain entities are
mapped to wire objects. Query-string parsing lives here as well so every
malformed value surfaces as the same MalformedInputError.
"""

from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel

from crypto_stats.domain.entities.batch_run import BatchRun
from crypto_stats.domain.entities.price_point import NormalizedOutput, PricePoint, StatisticSummary
from crypto_stats.domain.exceptions import MalformedInputError

# "2022-01-0100:00:01" is the compact form the public API has always accepted.
DATETIME_FORMATS = ("%Y-%m-%d%H:%M:%S", "%Y-%m-%d %H:%M:%S", "%Y-%m-%dT%H:%M:%S")


class StatisticSummaryResponse(BaseModel):
    cryptoSymbol: str
    interval: str
    oldestValue: float
    newestValue: float
    minValue: float
    maxValue: float

    @classmethod
    def from_entity(cls, summary: StatisticSummary) -> "StatisticSummaryResponse":
        return cls(
            cryptoSymbol=summary.symbol,
            interval=summary.interval,
            oldestValue=summary.oldest_value,
            newestValue=summary.newest_value,
            minValue=summary.min_value,
            maxValue=summary.max_value,
        )


class NormalizedResponse(BaseModel):
    symbol: str
    normalizedPrice: float

    @classmethod
    def from_entity(cls, output: NormalizedOutput) -> "NormalizedResponse":
        return cls(symbol=output.symbol, normalizedPrice=output.normalized_price)


class PricePointResponse(BaseModel):
    timestamp: datetime
    symbol: str
    price: float

    @classmethod
    def from_entity(cls, point: PricePoint) -> "PricePointResponse":
        return cls(timestamp=point.timestamp, symbol=point.symbol, price=point.price)


class BatchRunResponse(BaseModel):
    runId: int
    status: str
    startedAt: datetime
    finishedAt: datetime
    filesRead: int
    recordsWritten: int
    recordsSkipped: int
    error: Optional[str] = None

    @classmethod
    def from_entity(cls, run: BatchRun) -> "BatchRunResponse":
        return cls(
            runId=run.run_id,
            status=run.status,
            startedAt=run.started_at,
            finishedAt=run.finished_at,
            filesRead=run.files_read,
            recordsWritten=run.records_written,
            recordsSkipped=run.records_skipped,
            error=run.error,
        )


class ErrorMessage(BaseModel):
    message: str


def parse_date(value: str, name: str) -> date:
    """Parse a YYYY-MM-DD query parameter.

    Raises:
        MalformedInputError: if *value* is not a calendar date in that form.
    """
    try:
        return datetime.strptime(value, "%Y-%m-%d").date()
    except ValueError as exc:
        raise MalformedInputError(
            f"Invalid value for '{name}': {value!r}, expected YYYY-MM-DD"
        ) from exc


def parse_datetime(value: str, name: str) -> datetime:
    """Parse a local date-time query parameter in any of DATETIME_FORMATS.

    Raises:
        MalformedInputError: if no format matches.
    """
    for fmt in DATETIME_FORMATS:
        try:
            return datetime.strptime(value, fmt)
        except ValueError:
            continue
    raise MalformedInputError(
        f"Invalid value for '{name}': {value!r}, expected YYYY-MM-DDHH:MM:SS"
    )
