"""
CLI entry point for the price ingestion batch.

This script is the Composition Root for a one-off ingestion: it wires the
infrastructure adapters (CsvPriceSource, SqlAlchemyPriceStore) to the
PriceIngestionService and triggers the pipeline. It is only useful with a
persistent DATABASE_URL, since the default in-memory database dies with the
process.

    export DATABASE_URL=sqlite:///crypto.db
    export SOURCE_DIR=data/prices
    python -m crypto_stats.infrastructure.ingestion.ingest
"""

from dotenv import load_dotenv

from crypto_stats.application.services.price_ingestor import PriceIngestionService
from crypto_stats.infrastructure.config.settings import Settings
from crypto_stats.infrastructure.ingestion.csv_price_source import CsvPriceSource
from crypto_stats.infrastructure.observability.logger import configure_logging
from crypto_stats.infrastructure.persistence.sqlalchemy_price_store import SqlAlchemyPriceStore


def main() -> None:
    load_dotenv()
    settings = Settings()
    log = configure_logging(settings.LOG_LEVEL)

    source = CsvPriceSource(
        source_dir=settings.SOURCE_DIR,
        name_pattern=settings.FILE_NAME_PATTERN,
        chunk_size=settings.INGEST_CHUNK_SIZE,
        timezone=settings.TIMEZONE,
    )
    store = SqlAlchemyPriceStore.from_url(settings.DATABASE_URL)
    service = PriceIngestionService(source=source, store=store)

    run = service.run()
    log.info(
        "Ingestion complete: %d records from %d files into %s",
        run.records_written, run.files_read, settings.DATABASE_URL,
    )


if __name__ == "__main__":
    main()
