"""
Infrastructure adapter: SQLAlchemy → IPriceStore.

All SQLAlchemy details (table mapping, engine and session handling, SQL
aggregates) are confined here; the rest of the codebase depends only on
IPriceStore.

The default URL ``sqlite://`` is an in-memory database shared by every
thread through a single StaticPool connection, so data written by the
ingestion batch is visible to request threads. That connection carries one
transaction at a time, so sessions on it are serialized by a lock.
"""

import threading
from contextlib import nullcontext
from datetime import datetime
from typing import Iterable, Optional

from sqlalchemy import Column, DateTime, Float, Index, Integer, String, create_engine, delete, func, insert, select
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

from crypto_stats.domain.entities.price_point import PricePoint
from crypto_stats.domain.ports.price_store_port import IPriceStore

Base = declarative_base()


class PricePointRecord(Base):
    __tablename__ = "price_point"

    # Insertion sequence; breaks ties between records sharing a timestamp.
    id = Column(Integer, primary_key=True, autoincrement=True)
    timestamp = Column(DateTime, nullable=False)
    symbol = Column(String(16), nullable=False)
    price = Column(Float, nullable=False)

    __table_args__ = (
        Index("idx_price_point_symbol_timestamp", "symbol", "timestamp"),
        Index("idx_price_point_price", "price"),
    )

    def __repr__(self):
        return f"<PricePointRecord {self.symbol} @ {self.timestamp} price={self.price}>"


def create_store_engine(database_url: str) -> Engine:
    """Build an engine, sharing one connection across threads for in-memory SQLite."""
    url = make_url(database_url)
    if url.get_backend_name() != "sqlite":
        return create_engine(url)
    if url.database in (None, "", ":memory:"):
        return create_engine(
            url,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    return create_engine(url, connect_args={"check_same_thread": False})


class SqlAlchemyPriceStore(IPriceStore):
    """Relational price point store; creates its table on construction."""

    def __init__(self, engine: Engine) -> None:
        self._engine = engine
        self._session_factory = sessionmaker(bind=engine)
        self._lock = threading.RLock() if isinstance(engine.pool, StaticPool) else nullcontext()
        Base.metadata.create_all(engine)

    @classmethod
    def from_url(cls, database_url: str) -> "SqlAlchemyPriceStore":
        return cls(create_store_engine(database_url))

    # ------------------------------------------------------------------
    # Write path
    # ------------------------------------------------------------------

    def add_all(self, points: Iterable[PricePoint]) -> int:
        rows = [
            {"symbol": p.symbol, "timestamp": p.timestamp, "price": p.price}
            for p in points
        ]
        if not rows:
            return 0
        with self._lock, self._session_factory.begin() as session:
            session.execute(insert(PricePointRecord), rows)
        return len(rows)

    def purge(self) -> None:
        with self._lock, self._session_factory.begin() as session:
            session.execute(delete(PricePointRecord))

    # ------------------------------------------------------------------
    # Aggregates
    # ------------------------------------------------------------------

    def max_price(
        self,
        symbol: str,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> Optional[float]:
        stmt = select(func.max(PricePointRecord.price)).where(*self._window(symbol, start, end))
        return self._scalar(stmt)

    def min_price(
        self,
        symbol: str,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> Optional[float]:
        stmt = select(func.min(PricePointRecord.price)).where(*self._window(symbol, start, end))
        return self._scalar(stmt)

    def earliest_price(self, symbol: str, start: datetime, end: datetime) -> Optional[float]:
        stmt = (
            select(PricePointRecord.price)
            .where(*self._window(symbol, start, end))
            .order_by(PricePointRecord.timestamp.asc(), PricePointRecord.id.asc())
            .limit(1)
        )
        return self._scalar(stmt)

    def latest_price(self, symbol: str, start: datetime, end: datetime) -> Optional[float]:
        stmt = (
            select(PricePointRecord.price)
            .where(*self._window(symbol, start, end))
            .order_by(PricePointRecord.timestamp.desc(), PricePointRecord.id.desc())
            .limit(1)
        )
        return self._scalar(stmt)

    def distinct_symbols(self, excluding: Iterable[str] = ()) -> list[str]:
        stmt = (
            select(PricePointRecord.symbol)
            .distinct()
            .where(PricePointRecord.symbol.not_in(list(excluding)))
            .order_by(PricePointRecord.symbol.desc())
        )
        with self._lock, self._session_factory() as session:
            return list(session.scalars(stmt))

    def list_points(
        self,
        excluding: Iterable[str] = (),
        symbol: Optional[str] = None,
    ) -> list[PricePoint]:
        stmt = select(PricePointRecord).where(PricePointRecord.symbol.not_in(list(excluding)))
        if symbol is not None:
            stmt = stmt.where(PricePointRecord.symbol == symbol)
        stmt = stmt.order_by(
            PricePointRecord.symbol.desc(),
            PricePointRecord.timestamp.desc(),
            PricePointRecord.id.desc(),
        )
        with self._lock, self._session_factory() as session:
            return [self._to_entity(record) for record in session.scalars(stmt)]

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _scalar(self, stmt) -> Optional[float]:
        with self._lock, self._session_factory() as session:
            return session.execute(stmt).scalar()

    @staticmethod
    def _window(symbol: str, start: Optional[datetime], end: Optional[datetime]) -> list:
        clauses = [PricePointRecord.symbol == symbol]
        if start is not None:
            clauses.append(PricePointRecord.timestamp >= start)
        if end is not None:
            clauses.append(PricePointRecord.timestamp <= end)
        return clauses

    @staticmethod
    def _to_entity(record: PricePointRecord) -> PricePoint:
        return PricePoint(symbol=record.symbol, timestamp=record.timestamp, price=record.price)
