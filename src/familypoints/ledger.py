"""Ledger engine: recording point transactions and deriving totals from them."""

from __future__ import annotations

from datetime import date, datetime, timedelta
from typing import Callable, List, Optional, Union

from .config import RECENT_TRANSACTION_LIMIT, STREAK_LOOKBACK_DAYS
from .exceptions import QueryFailureError
from .models import (
    UNDOABLE_TRANSACTION_TYPES,
    OfflineTransaction,
    Transaction,
    TransactionAction,
    TransactionType,
)
from .offline import OfflineQueue
from .ops import StructuredLogger
from .rewards import floor_at_zero
from .state import AppState
from .store import Store
from .undo import UndoController

RecordResult = Optional[Union[Transaction, OfflineTransaction]]


def week_start(now: datetime) -> datetime:
    """Return local Monday 00:00:00 of the week containing ``now``."""

    monday = now.date() - timedelta(days=now.weekday())
    return datetime.combine(monday, datetime.min.time())


def month_start(now: datetime) -> datetime:
    """Return 00:00:00 on the first day of the month containing ``now``."""

    return datetime.combine(now.date().replace(day=1), datetime.min.time())


def count_streak(awarded_days: List[date], today: date) -> int:
    """Count leading days in ``awarded_days`` (newest first) that run back from ``today``."""

    streak = 0
    for offset, day in enumerate(awarded_days):
        if day != today - timedelta(days=offset):
            break
        streak += 1
    return streak


class LedgerEngine:
    """Append transactions to the store or the offline queue and compute rollups."""

    def __init__(
        self,
        store: Optional[Store],
        queue: OfflineQueue,
        undo: UndoController,
        *,
        logger: Optional[StructuredLogger] = None,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self.store = store
        self._queue = queue
        self._undo = undo
        self._logger = logger or StructuredLogger()
        self._clock = clock

    def record_transaction(
        self,
        state: AppState,
        member_id: str,
        points: int,
        reason: str,
        transaction_type: TransactionType,
    ) -> RecordResult:
        """Record a transaction, returning ``None`` when the store rejects it."""

        transaction_type = TransactionType(transaction_type)
        if not state.online:
            queued = self._queue.enqueue(member_id, points, reason, transaction_type)
            state.snapshot(member_id).adjust(points)
            return queued

        if self.store is None:
            return None
        try:
            transaction = self.store.insert_transaction(member_id, points, reason, transaction_type)
        except QueryFailureError as exc:
            self._logger.store_error("add_transaction", exc, member=member_id, points=points)
            state.error = "error.addTransaction"
            return None

        self._logger.log(
            "transaction",
            member=member_id,
            type=transaction_type.value,
            points=points,
            reason=reason,
        )
        if transaction_type in UNDOABLE_TRANSACTION_TYPES:
            self._undo.record(
                TransactionAction(
                    member_id=member_id,
                    transaction_id=transaction.id,
                    points=points,
                    reason=reason,
                )
            )
        return transaction

    def compute_window_total(self, member_id: str, window_start: datetime) -> int:
        """Sum the member's points recorded at or after ``window_start``, floored at zero.

        Raises :class:`QueryFailureError` when the store cannot be read.
        """

        if self.store is None:
            return 0
        transactions = self.store.list_transactions(member_id, since=window_start)
        return floor_at_zero(sum(transaction.points for transaction in transactions))

    def weekly_total(self, member_id: str) -> int:
        return self.compute_window_total(member_id, week_start(self._clock()))

    def monthly_total(self, member_id: str) -> int:
        return self.compute_window_total(member_id, month_start(self._clock()))

    def compute_streak(self, member_id: str) -> int:
        if self.store is None:
            return 0
        try:
            records = self.store.awarded_progress(member_id, limit=STREAK_LOOKBACK_DAYS)
        except QueryFailureError as exc:
            self._logger.store_error("load_streak", exc, member=member_id)
            return 0
        return count_streak([record.date for record in records], self._clock().date())

    def recent_transactions(self, member_id: str, *, limit: int = RECENT_TRANSACTION_LIMIT) -> List[Transaction]:
        if self.store is None:
            return []
        return self.store.list_transactions(member_id, limit=limit)

    def history(self, member_id: str) -> List[Transaction]:
        if self.store is None:
            return []
        return self.store.list_transactions(member_id)


__all__ = ["LedgerEngine", "RecordResult", "count_streak", "month_start", "week_start"]
