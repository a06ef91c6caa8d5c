"""Buffer for transactions recorded while the store is unreachable."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Callable, List, Optional, Tuple
from uuid import uuid4

from .cache import LocalCache
from .config import OFFLINE_QUEUE_CACHE_KEY
from .exceptions import QueryFailureError
from .models import OfflineTransaction, Transaction, TransactionType
from .ops import StructuredLogger
from .store import Store


@dataclass(frozen=True, slots=True)
class ReplayResult:
    replayed: Tuple[Transaction, ...]
    remaining: int

    @property
    def complete(self) -> bool:
        return self.remaining == 0


class OfflineQueue:
    """Ordered queue of :class:`OfflineTransaction` persisted in the local cache."""

    def __init__(
        self,
        cache: LocalCache,
        *,
        logger: Optional[StructuredLogger] = None,
        clock: Callable[[], datetime] = datetime.now,
        key: str = OFFLINE_QUEUE_CACHE_KEY,
    ) -> None:
        self._cache = cache
        self._logger = logger or StructuredLogger()
        self._clock = clock
        self._key = key
        self._items: List[OfflineTransaction] = [
            OfflineTransaction.from_dict(payload) for payload in (cache.load(key) or [])
        ]

    def __len__(self) -> int:
        return len(self._items)

    @property
    def items(self) -> Tuple[OfflineTransaction, ...]:
        return tuple(self._items)

    def enqueue(
        self,
        member_id: str,
        points: int,
        reason: str,
        transaction_type: TransactionType,
    ) -> OfflineTransaction:
        item = OfflineTransaction(
            id=uuid4().hex,
            member_id=member_id,
            points=points,
            reason=reason,
            transaction_type=TransactionType(transaction_type),
            timestamp=self._clock(),
        )
        self._items.append(item)
        self._persist()
        self._logger.log("offline_enqueued", member=member_id, points=points, queued=len(self._items))
        return item

    def replay(self, store: Store) -> ReplayResult:
        """Insert queued items in FIFO order, stopping at the first failure."""

        replayed: List[Transaction] = []
        for index, item in enumerate(self._items):
            try:
                transaction = store.insert_transaction(
                    item.member_id,
                    item.points,
                    item.reason,
                    item.transaction_type,
                    created_at=item.timestamp,
                )
            except QueryFailureError as exc:
                self._logger.store_error("sync_offline_queue", exc, item=item.id)
                self._items = self._items[index:]
                self._persist()
                return ReplayResult(replayed=tuple(replayed), remaining=len(self._items))
            replayed.append(transaction)
        self._items = []
        self._persist()
        if replayed:
            self._logger.log("offline_replayed", count=len(replayed))
        return ReplayResult(replayed=tuple(replayed), remaining=0)

    def _persist(self) -> None:
        # the in-memory queue stays authoritative for this session
        try:
            self._cache.save(self._key, [item.as_dict() for item in self._items])
        except QueryFailureError as exc:
            self._logger.store_error("save_cache", exc, key=self._key, queued=len(self._items))


__all__ = ["OfflineQueue", "ReplayResult"]
