"""
Application service: orchestrates the CSV price ingestion batch.

Business decisions owned here:
  - Ingestion flow: discover sources → read chunks → append each chunk to the store.
  - Every run, successful or not, becomes the "last run" reported to callers.
  - Runs never overlap; a second trigger waits for the first to finish.

Infrastructure adapters (IPriceSource, IPriceStore) are injected; no imports
from pandas, sqlalchemy, or any other external library appear here.
"""

import itertools
import logging
import threading
from datetime import datetime
from typing import Optional

from crypto_stats.domain.entities.batch_run import STATUS_COMPLETED, STATUS_FAILED, BatchRun
from crypto_stats.domain.exceptions import IngestionError, NoBatchRunError
from crypto_stats.domain.ports.price_source_port import IPriceSource
from crypto_stats.domain.ports.price_store_port import IPriceStore

logger = logging.getLogger(__name__)


class PriceIngestionService:
    def __init__(self, source: IPriceSource, store: IPriceStore) -> None:
        self._source = source
        self._store = store
        self._lock = threading.Lock()
        self._run_ids = itertools.count(1)
        self._last_run: Optional[BatchRun] = None

    def run(self) -> BatchRun:
        """Ingest every discovered source into the store.

        Returns:
            The completed BatchRun.

        Raises:
            IngestionError: if reading or storing fails; the failed run is
                            still recorded and available from last_run().
        """
        with self._lock:
            run_id = next(self._run_ids)
            started_at = datetime.now()
            files_read = written = skipped = 0
            logger.info("Batch run %d started", run_id)
            try:
                for path in self._source.discover():
                    file_written = 0
                    for chunk in self._source.read(path):
                        file_written += self._store.add_all(chunk.points)
                        skipped += chunk.skipped
                    files_read += 1
                    written += file_written
                    logger.info("Ingested %d records from %s", file_written, path)
            except Exception as exc:
                logger.exception("Batch run %d failed", run_id)
                self._last_run = BatchRun(
                    run_id=run_id,
                    status=STATUS_FAILED,
                    started_at=started_at,
                    finished_at=datetime.now(),
                    files_read=files_read,
                    records_written=written,
                    records_skipped=skipped,
                    error=str(exc),
                )
                raise IngestionError(f"Batch run {run_id} failed: {exc}") from exc

            self._last_run = BatchRun(
                run_id=run_id,
                status=STATUS_COMPLETED,
                started_at=started_at,
                finished_at=datetime.now(),
                files_read=files_read,
                records_written=written,
                records_skipped=skipped,
            )
            logger.info(
                "Batch run %d completed: %d files, %d records written, %d skipped",
                run_id, files_read, written, skipped,
            )
            return self._last_run

    def last_run(self) -> BatchRun:
        """Return the most recent run.

        Raises:
            NoBatchRunError: if no run has happened yet.
        """
        if self._last_run is None:
            raise NoBatchRunError()
        return self._last_run
