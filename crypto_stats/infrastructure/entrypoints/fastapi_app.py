"""
FastAPI entry point.

This module is the Composition Root: create_app() wires the infrastructure
adapters (SQLAlchemy store, CSV source, slowapi limiter, scheduler) and passes
them to the application layer. Tests call create_app() with their own
Settings and store; the module-level `app` is what uvicorn serves.

Run locally:
    uvicorn crypto_stats.infrastructure.entrypoints.fastapi_app:app --reload --port 8080
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import Optional

from dotenv import load_dotenv
from fastapi import APIRouter, BackgroundTasks, FastAPI, Query, Request, Response, status
from fastapi.responses import JSONResponse
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address

load_dotenv()

from crypto_stats.application.services.crypto_query_service import CryptoQueryService  # noqa: E402
from crypto_stats.application.services.price_ingestor import PriceIngestionService  # noqa: E402
from crypto_stats.domain.exceptions import (  # noqa: E402
    IngestionError,
    MalformedInputError,
    NoBatchRunError,
    SymbolNotAllowedError,
)
from crypto_stats.domain.policies.symbol_policy import SymbolPolicy  # noqa: E402
from crypto_stats.domain.ports.price_source_port import IPriceSource  # noqa: E402
from crypto_stats.domain.ports.price_store_port import IPriceStore  # noqa: E402
from crypto_stats.infrastructure.config.settings import Settings  # noqa: E402
from crypto_stats.infrastructure.entrypoints.schemas import (  # noqa: E402
    BatchRunResponse,
    ErrorMessage,
    NormalizedResponse,
    PricePointResponse,
    StatisticSummaryResponse,
    parse_date,
    parse_datetime,
)
from crypto_stats.infrastructure.ingestion.csv_price_source import CsvPriceSource  # noqa: E402
from crypto_stats.infrastructure.ingestion.scheduler import BatchScheduler  # noqa: E402
from crypto_stats.infrastructure.observability.logger import configure_logging  # noqa: E402
from crypto_stats.infrastructure.persistence.sqlalchemy_price_store import SqlAlchemyPriceStore  # noqa: E402

logger = logging.getLogger(__name__)


def _no_content() -> Response:
    return Response(status_code=status.HTTP_204_NO_CONTENT)


def _error_handler(status_code: int):
    async def handler(request: Request, exc: Exception) -> JSONResponse:
        return JSONResponse(
            status_code=status_code,
            content=ErrorMessage(message=str(exc)).model_dump(),
        )
    return handler


def create_app(
    settings: Optional[Settings] = None,
    store: Optional[IPriceStore] = None,
    source: Optional[IPriceSource] = None,
) -> FastAPI:
    """Build the application with all dependencies wired.

    Args:
        settings: Configuration; read from the environment when omitted.
        store:    IPriceStore implementation; SqlAlchemyPriceStore on DATABASE_URL by default.
        source:   IPriceSource implementation; CsvPriceSource on SOURCE_DIR by default.
    """
    settings = settings or Settings()
    configure_logging(settings.LOG_LEVEL)

    # ---------------------------------------------------------------------------
    # Composition Root: wire all dependencies once per app
    # ---------------------------------------------------------------------------
    store = store or SqlAlchemyPriceStore.from_url(settings.DATABASE_URL)
    source = source or CsvPriceSource(
        source_dir=settings.SOURCE_DIR,
        name_pattern=settings.FILE_NAME_PATTERN,
        chunk_size=settings.INGEST_CHUNK_SIZE,
        timezone=settings.TIMEZONE,
    )
    policy = SymbolPolicy(settings.forbidden_symbols)
    queries = CryptoQueryService(store, policy)
    ingestion = PriceIngestionService(source=source, store=store)
    scheduler = BatchScheduler(ingestion, settings.SCHEDULE_TIME, settings.SCHEDULE_TIMEZONE)
    limiter = Limiter(
        key_func=get_remote_address,
        enabled=settings.RATE_LIMIT_ENABLED,
    )
    # Checked per route and client address.
    rate_limit = limiter.limit(settings.RATE_LIMIT)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if settings.INGEST_ON_STARTUP:
            try:
                await asyncio.to_thread(ingestion.run)
            except IngestionError:
                logger.error("Startup ingestion failed; serving previously stored data")
        if settings.SCHEDULE_ENABLED:
            scheduler.start()
        yield
        await scheduler.stop()

    app = FastAPI(title=settings.APP_NAME, lifespan=lifespan)
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
    app.add_exception_handler(SymbolNotAllowedError, _error_handler(status.HTTP_400_BAD_REQUEST))
    app.add_exception_handler(MalformedInputError, _error_handler(status.HTTP_400_BAD_REQUEST))
    app.add_exception_handler(NoBatchRunError, _error_handler(status.HTTP_404_NOT_FOUND))

    # ---------------------------------------------------------------------------
    # Crypto info
    # ---------------------------------------------------------------------------
    info = APIRouter(prefix="/api/v1/crypto/info", tags=["crypto info"])

    @info.get("/normalized", response_model=list[NormalizedResponse])
    @rate_limit
    def get_normalized_cryptos(request: Request):
        """All allowed cryptos with their normalized ((max-min)/min) price, or 204."""
        results = queries.all_normalized()
        if not results:
            return _no_content()
        return [NormalizedResponse.from_entity(r) for r in results]

    @info.get("/normalized/highest", response_model=NormalizedResponse)
    @rate_limit
    def get_highest_normalized_for_day(request: Request, date: str = Query(..., examples=["2022-01-05"])):
        """The crypto with the highest normalized price on *date*, or 204."""
        result = queries.highest_normalized_on_day(parse_date(date, "date"))
        if result is None:
            return _no_content()
        return NormalizedResponse.from_entity(result)

    @info.get("/statistics", response_model=list[StatisticSummaryResponse])
    @rate_limit
    def get_statistics_for_all_allowed_cryptos(
        request: Request,
        yearMonth: str = Query(..., examples=["2022-01-05"]),
    ):
        """Statistics of every allowed crypto for the month containing *yearMonth*, or 204."""
        results = queries.all_statistics_for_month(parse_date(yearMonth, "yearMonth"))
        if not results:
            return _no_content()
        return [StatisticSummaryResponse.from_entity(r) for r in results]

    @info.get(
        "/statistics/{symbol}",
        response_model=StatisticSummaryResponse,
        responses={400: {"model": ErrorMessage}},
    )
    @rate_limit
    def get_statistics_for_crypto(
        request: Request,
        symbol: str,
        yearMonth: str = Query(..., examples=["2022-01-05"]),
    ):
        """Statistics of *symbol* for the month containing *yearMonth*; 400 if forbidden, 204 if no data."""
        result = queries.statistics_for_symbol(symbol, parse_date(yearMonth, "yearMonth"))
        if result is None:
            return _no_content()
        return StatisticSummaryResponse.from_entity(result)

    @info.get(
        "/range-statistics/{symbol}",
        response_model=StatisticSummaryResponse,
        responses={400: {"model": ErrorMessage}},
    )
    @rate_limit
    def get_statistics_for_time_range(
        request: Request,
        symbol: str,
        start: str = Query(..., alias="from", examples=["2022-01-0100:00:00"]),
        end: str = Query(..., alias="to", examples=["2022-01-3123:59:59"]),
    ):
        """Statistics of *symbol* between *from* and *to* inclusive; 400 if forbidden, 204 if no data."""
        result = queries.range_statistics_for_symbol(
            symbol,
            parse_datetime(start, "from"),
            parse_datetime(end, "to"),
        )
        if result is None:
            return _no_content()
        return StatisticSummaryResponse.from_entity(result)

    @info.get("", response_model=list[PricePointResponse])
    @rate_limit
    def get_available_cryptos(request: Request, symbol: Optional[str] = None):
        """Stored prices of allowed cryptos, newest first; only *symbol* when given, or 204."""
        results = queries.list_prices(symbol)
        if not results:
            return _no_content()
        return [PricePointResponse.from_entity(p) for p in results]

    # ---------------------------------------------------------------------------
    # Batch
    # ---------------------------------------------------------------------------
    batch = APIRouter(prefix="/api/v1/crypto/batch", tags=["batch"])

    def run_batch() -> None:
        try:
            ingestion.run()
        except IngestionError:
            # Logged and recorded as the last run by the ingestion service.
            return

    @batch.post("/trigger-batch", status_code=status.HTTP_202_ACCEPTED)
    @rate_limit
    def trigger_batch(request: Request, background_tasks: BackgroundTasks):
        """Start a CSV import run in the background."""
        background_tasks.add_task(run_batch)
        return Response(status_code=status.HTTP_202_ACCEPTED)

    @batch.get(
        "/last-batch-info",
        response_model=BatchRunResponse,
        responses={404: {"model": ErrorMessage}},
    )
    @rate_limit
    def get_last_batch_info(request: Request):
        """Outcome of the most recent CSV import run; 404 before the first one."""
        return BatchRunResponse.from_entity(ingestion.last_run())

    app.include_router(info)
    app.include_router(batch)

    @app.get("/health")
    def health():
        return {"status": "ok"}

    return app


app = create_app()
