"""Persistence and SQLModel definitions for the family points store."""
from __future__ import annotations

import datetime as dt
from contextlib import contextmanager
from typing import Callable, Dict, Iterator, List, Mapping, Optional, Protocol
from uuid import uuid4

from sqlalchemy import JSON, Column, DateTime, UniqueConstraint
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.pool import StaticPool
from sqlmodel import Field, Session, SQLModel, create_engine, desc, select

from .exceptions import QueryFailureError, StoreUnavailableError
from .models import DailyProgress, Member, Transaction, TransactionType


def _new_id() -> str:
    return str(uuid4())


# ---------------------------------------------------------------------------
# Database models
# ---------------------------------------------------------------------------
class FamilyMemberRecord(SQLModel, table=True):
    __tablename__ = "family_members"

    id: str = Field(default_factory=_new_id, primary_key=True)
    name: str


class PointsTransactionRecord(SQLModel, table=True):
    __tablename__ = "points_transactions"

    id: str = Field(default_factory=_new_id, primary_key=True)
    member_id: str = Field(index=True)
    points: int
    reason: str
    transaction_type: str
    # naive local time
    created_at: dt.datetime = Field(sa_column=Column(DateTime(timezone=False), index=True, nullable=False))


class DailyProgressRecord(SQLModel, table=True):
    __tablename__ = "daily_progress"
    __table_args__ = (UniqueConstraint("member_id", "date", name="uq_daily_progress_member_date"),)

    id: str = Field(default_factory=_new_id, primary_key=True)
    member_id: str = Field(index=True)
    date: dt.date
    daily_points_awarded: bool = False
    rules_broken: Dict[str, bool] = Field(default_factory=dict, sa_column=Column(JSON, nullable=False))


STORE_TABLES = (
    FamilyMemberRecord.__table__,
    PointsTransactionRecord.__table__,
    DailyProgressRecord.__table__,
)


def _to_member(record: FamilyMemberRecord) -> Member:
    return Member(id=record.id, name=record.name)


def _to_transaction(record: PointsTransactionRecord) -> Transaction:
    return Transaction(
        id=record.id,
        member_id=record.member_id,
        points=record.points,
        reason=record.reason,
        transaction_type=TransactionType(record.transaction_type),
        created_at=record.created_at,
    )


def _to_progress(record: DailyProgressRecord) -> DailyProgress:
    return DailyProgress(
        id=record.id,
        member_id=record.member_id,
        date=record.date,
        daily_points_awarded=record.daily_points_awarded,
        rules_broken=dict(record.rules_broken or {}),
    )


# ---------------------------------------------------------------------------
# Store capability
# ---------------------------------------------------------------------------
class Store(Protocol):
    """Durable append/query service used by the ledger and progress engines."""

    def list_members(self) -> List[Member]: ...

    def get_member(self, member_id: str) -> Optional[Member]: ...

    def insert_transaction(
        self,
        member_id: str,
        points: int,
        reason: str,
        transaction_type: TransactionType,
        *,
        created_at: Optional[dt.datetime] = None,
    ) -> Transaction: ...

    def list_transactions(
        self,
        member_id: str,
        *,
        since: Optional[dt.datetime] = None,
        limit: Optional[int] = None,
    ) -> List[Transaction]: ...

    def delete_transaction(self, transaction_id: str) -> int: ...

    def delete_member_transactions(self, member_id: str) -> int: ...

    def get_progress(self, member_id: str, day: dt.date) -> Optional[DailyProgress]: ...

    def upsert_progress(self, progress: DailyProgress) -> DailyProgress: ...

    def update_rules_broken(self, member_id: str, day: dt.date, rules_broken: Mapping[str, bool]) -> int: ...

    def delete_progress(self, member_id: str, day: Optional[dt.date] = None) -> int: ...

    def awarded_progress(self, member_id: str, *, limit: int) -> List[DailyProgress]: ...


def build_engine(url: str) -> Engine:
    kwargs: dict = {"echo": False}
    if url.startswith("sqlite"):
        kwargs["connect_args"] = {"check_same_thread": False}
        if url in ("sqlite://", "sqlite:///:memory:"):
            kwargs["poolclass"] = StaticPool
    return create_engine(url, **kwargs)


class SQLStore:
    """SQLModel backed implementation of :class:`Store`."""

    def __init__(self, url: str, *, clock: Callable[[], dt.datetime] = dt.datetime.now) -> None:
        if not url:
            raise StoreUnavailableError("No database URL configured.")
        try:
            self._engine = build_engine(url)
            SQLModel.metadata.create_all(self._engine, tables=list(STORE_TABLES))
        except SQLAlchemyError as exc:
            raise StoreUnavailableError(f"Could not open store at {url!r}: {exc}") from exc
        self._clock = clock

    @property
    def engine(self) -> Engine:
        return self._engine

    @contextmanager
    def _session(self, operation: str) -> Iterator[Session]:
        session = Session(self._engine, expire_on_commit=False)
        try:
            yield session
            session.commit()
        except SQLAlchemyError as exc:
            session.rollback()
            raise QueryFailureError(operation, str(exc)) from exc
        finally:
            session.close()

    # Members -------------------------------------------------------------
    def add_member(self, name: str, *, member_id: Optional[str] = None) -> Member:
        record = FamilyMemberRecord(id=member_id or _new_id(), name=name)
        with self._session("add_member") as session:
            session.add(record)
        return _to_member(record)

    def list_members(self) -> List[Member]:
        with self._session("load_members") as session:
            records = session.exec(select(FamilyMemberRecord).order_by(FamilyMemberRecord.name)).all()
            return [_to_member(record) for record in records]

    def get_member(self, member_id: str) -> Optional[Member]:
        with self._session("load_member") as session:
            record = session.get(FamilyMemberRecord, member_id)
            return _to_member(record) if record else None

    # Transactions --------------------------------------------------------
    def insert_transaction(
        self,
        member_id: str,
        points: int,
        reason: str,
        transaction_type: TransactionType,
        *,
        created_at: Optional[dt.datetime] = None,
    ) -> Transaction:
        record = PointsTransactionRecord(
            member_id=member_id,
            points=int(points),
            reason=reason,
            transaction_type=TransactionType(transaction_type).value,
            created_at=created_at or self._clock(),
        )
        with self._session("add_transaction") as session:
            session.add(record)
        return _to_transaction(record)

    def list_transactions(
        self,
        member_id: str,
        *,
        since: Optional[dt.datetime] = None,
        limit: Optional[int] = None,
    ) -> List[Transaction]:
        """Return the member's transactions newest first, optionally bounded."""

        query = select(PointsTransactionRecord).where(PointsTransactionRecord.member_id == member_id)
        if since is not None:
            query = query.where(PointsTransactionRecord.created_at >= since)
        query = query.order_by(desc(PointsTransactionRecord.created_at))
        if limit is not None:
            query = query.limit(limit)
        with self._session("load_transactions") as session:
            return [_to_transaction(record) for record in session.exec(query).all()]

    def delete_transaction(self, transaction_id: str) -> int:
        with self._session("delete_transaction") as session:
            record = session.get(PointsTransactionRecord, transaction_id)
            if record is None:
                return 0
            session.delete(record)
            return 1

    def delete_member_transactions(self, member_id: str) -> int:
        query = select(PointsTransactionRecord).where(PointsTransactionRecord.member_id == member_id)
        with self._session("delete_transactions") as session:
            records = session.exec(query).all()
            for record in records:
                session.delete(record)
            return len(records)

    # Daily progress ------------------------------------------------------
    def _progress_query(self, member_id: str, day: dt.date):
        return select(DailyProgressRecord).where(
            DailyProgressRecord.member_id == member_id,
            DailyProgressRecord.date == day,
        )

    def get_progress(self, member_id: str, day: dt.date) -> Optional[DailyProgress]:
        with self._session("load_progress") as session:
            record = session.exec(self._progress_query(member_id, day)).first()
            return _to_progress(record) if record else None

    def upsert_progress(self, progress: DailyProgress) -> DailyProgress:
        """Insert or update the row keyed by ``(member_id, date)``."""

        with self._session("update_progress") as session:
            record = session.exec(self._progress_query(progress.member_id, progress.date)).first()
            if record is None:
                record = DailyProgressRecord(member_id=progress.member_id, date=progress.date)
            record.daily_points_awarded = progress.daily_points_awarded
            record.rules_broken = dict(progress.rules_broken)
            session.add(record)
        return _to_progress(record)

    def update_rules_broken(self, member_id: str, day: dt.date, rules_broken: Mapping[str, bool]) -> int:
        with self._session("update_progress") as session:
            record = session.exec(self._progress_query(member_id, day)).first()
            if record is None:
                return 0
            record.rules_broken = dict(rules_broken)
            session.add(record)
            return 1

    def delete_progress(self, member_id: str, day: Optional[dt.date] = None) -> int:
        query = select(DailyProgressRecord).where(DailyProgressRecord.member_id == member_id)
        if day is not None:
            query = query.where(DailyProgressRecord.date == day)
        with self._session("delete_progress") as session:
            records = session.exec(query).all()
            for record in records:
                session.delete(record)
            return len(records)

    def awarded_progress(self, member_id: str, *, limit: int) -> List[DailyProgress]:
        query = (
            select(DailyProgressRecord)
            .where(
                DailyProgressRecord.member_id == member_id,
                DailyProgressRecord.daily_points_awarded == True,  # noqa: E712
            )
            .order_by(desc(DailyProgressRecord.date))
            .limit(limit)
        )
        with self._session("load_streak") as session:
            return [_to_progress(record) for record in session.exec(query).all()]


__all__ = [
    "DailyProgressRecord",
    "FamilyMemberRecord",
    "PointsTransactionRecord",
    "SQLStore",
    "STORE_TABLES",
    "Store",
    "build_engine",
]
