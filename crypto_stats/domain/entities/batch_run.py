"""
Domain entity describing one execution of the CSV ingestion batch.
Zero external dependencies, pure Python dataclass only.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

STATUS_COMPLETED = "COMPLETED"
STATUS_FAILED = "FAILED"


@dataclass(frozen=True)
class BatchRun:
    run_id: int
    status: str
    started_at: datetime
    finished_at: datetime
    files_read: int
    records_written: int
    records_skipped: int
    error: Optional[str] = None
