"""High level service coordinating members, the ledger, daily progress and sync."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Callable, List, Optional

from .cache import LocalCache, SQLiteCache
from .catalog import get_bonus_activity, get_school_event
from .config import (
    LANGUAGE_CACHE_KEY,
    MEMBERS_CACHE_KEY,
    SNAPSHOT_CACHE_KEY,
    SUPPORTED_LANGUAGES,
    Settings,
)
from .exceptions import (
    MemberNotFoundError,
    NoActionToUndoError,
    QueryFailureError,
    StoreUnavailableError,
)
from .i18n import Translator, next_language
from .ledger import LedgerEngine, month_start, week_start
from .models import LastAction, Member, ProgressState, Transaction, TransactionType
from .offline import OfflineQueue, ReplayResult
from .ops import StructuredLogger
from .progress import DailyProgressMachine
from .rewards import RewardProgress
from .state import AppState, MemberSnapshot
from .store import SQLStore, Store
from .undo import UndoController


class FamilyPoints:
    """Manage the points game for one client session.

    The UI calls the public methods and renders :attr:`state`; every store
    failure is logged and surfaced through ``state.error`` instead of raising.
    """

    __slots__ = (
        "_store",
        "_cache",
        "_clock",
        "_logger",
        "_translator",
        "_state",
        "_undo",
        "_queue",
        "_ledger",
        "_progress",
    )

    def __init__(
        self,
        store: Optional[Store],
        cache: LocalCache,
        *,
        clock: Callable[[], datetime] = datetime.now,
        logger: Optional[StructuredLogger] = None,
        translator: Optional[Translator] = None,
        online: bool = True,
        language: Optional[str] = None,
    ) -> None:
        self._store = store
        self._cache = cache
        self._clock = clock
        self._logger = logger or StructuredLogger()
        self._translator = translator or Translator()
        self._state = AppState(online=online)
        saved_language = self._load_cache(LANGUAGE_CACHE_KEY)
        if saved_language in SUPPORTED_LANGUAGES:
            self._state.language = saved_language
        elif language in SUPPORTED_LANGUAGES:
            self._state.language = language
        self._undo = UndoController(logger=self._logger)
        self._queue = OfflineQueue(cache, logger=self._logger, clock=clock)
        self._ledger = LedgerEngine(store, self._queue, self._undo, logger=self._logger, clock=clock)
        self._progress = DailyProgressMachine(
            self._ledger,
            self._undo,
            self._translator,
            logger=self._logger,
            clock=clock,
        )
        if store is None:
            self._state.connection_error = self._translator.translate("error.connection", locale=self._state.language)

    @classmethod
    def connect(
        cls,
        settings: Optional[Settings] = None,
        *,
        cache: Optional[LocalCache] = None,
        clock: Callable[[], datetime] = datetime.now,
        logger: Optional[StructuredLogger] = None,
    ) -> "FamilyPoints":
        """Build a session from ``settings``; an unreachable store is recorded, not raised."""

        settings = settings or Settings.from_env()
        logger = logger or StructuredLogger(path=settings.log_path)
        store: Optional[Store]
        try:
            store = SQLStore(settings.database_url, clock=clock)
        except StoreUnavailableError as exc:
            logger.log("store_unavailable", error=str(exc))
            store = None
        app = cls(
            store,
            cache if cache is not None else SQLiteCache(settings.cache_path),
            clock=clock,
            logger=logger,
            language=settings.language,
        )
        if store is not None:
            app.load_members()
        return app

    def reconnect(self, settings: Optional[Settings] = None) -> bool:
        """Retry building the store after a connection error."""

        settings = settings or Settings.from_env()
        try:
            store = SQLStore(settings.database_url, clock=self._clock)
        except StoreUnavailableError as exc:
            self._logger.log("store_unavailable", error=str(exc))
            return False
        self._store = store
        self._ledger.store = store
        self._state.connection_error = None
        self.load_members()
        return True

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------
    @property
    def state(self) -> AppState:
        return self._state

    @property
    def store(self) -> Optional[Store]:
        return self._store

    @property
    def logger(self) -> StructuredLogger:
        return self._logger

    @property
    def translator(self) -> Translator:
        return self._translator

    @property
    def last_action(self) -> Optional[LastAction]:
        return self._undo.pending

    @property
    def offline_queue(self) -> OfflineQueue:
        return self._queue

    @property
    def error_message(self) -> Optional[str]:
        if not self._state.error:
            return None
        return self.translate(self._state.error)

    def translate(self, key: str, **params: object) -> str:
        return self._translator.translate(key, locale=self._state.language, **params)

    def dismiss_error(self) -> None:
        self._state.error = None

    def progress_state(self, member_id: Optional[str] = None) -> Optional[ProgressState]:
        target = self._member_id(member_id)
        if target is None:
            return None
        return self._progress.current_state(self._state, target)

    def reward_progress(self, member_id: Optional[str] = None) -> Optional[RewardProgress]:
        target = self._member_id(member_id)
        if target is None:
            return None
        return self._state.snapshot(target).reward

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------
    def load_members(self) -> List[Member]:
        if self._store is None:
            return self._restore_members()
        try:
            members = self._store.list_members()
        except QueryFailureError as exc:
            self._logger.store_error("load_members", exc)
            self._state.error = "error.loadMembers"
            return self._restore_members()
        self._state.members = members
        self._save_cache(MEMBERS_CACHE_KEY, [member.as_dict() for member in members])
        return members

    def get_member(self, member_id: str) -> Member:
        for member in self._state.members:
            if member.id == member_id:
                return member
        raise MemberNotFoundError(f"Member '{member_id}' does not exist.")

    def select_member(self, member_id: Optional[str]) -> Optional[MemberSnapshot]:
        if member_id is None:
            self._state.selected_member_id = None
            return None
        self._state.selected_member_id = self.get_member(member_id).id
        return self.load_member_data(member_id)

    def load_member_data(self, member_id: str) -> MemberSnapshot:
        """Recompute the member's aggregates from the store."""

        if self._store is None or not self._state.online:
            return self._state.snapshot(member_id)

        self._state.loading = True
        try:
            now = self._clock()
            snapshot = MemberSnapshot(
                member_id=member_id,
                weekly_points=self._ledger.compute_window_total(member_id, week_start(now)),
                monthly_points=self._ledger.compute_window_total(member_id, month_start(now)),
                today_progress=self._store.get_progress(member_id, now.date()),
                recent_transactions=self._ledger.recent_transactions(member_id),
                streak=self._ledger.compute_streak(member_id),
            )
        except QueryFailureError as exc:
            self._logger.store_error("load_member_data", exc, member=member_id)
            self._state.error = "error.loadMemberData"
            return self._restore_snapshot(member_id)
        finally:
            self._state.loading = False

        self._state.snapshots[member_id] = snapshot
        self._save_cache(SNAPSHOT_CACHE_KEY, snapshot.as_dict())
        return snapshot

    def member_history(self, member_id: Optional[str] = None) -> List[Transaction]:
        target = self._member_id(member_id)
        if target is None:
            return []
        try:
            return self._ledger.history(target)
        except QueryFailureError as exc:
            self._logger.store_error("load_history", exc, member=target)
            self._state.error = "error.loadMemberData"
            return []

    # ------------------------------------------------------------------
    # Point actions
    # ------------------------------------------------------------------
    def award_daily_points(self, member_id: Optional[str] = None) -> bool:
        target = self._member_id(member_id)
        if target is None:
            return False
        awarded = self._progress.award_daily_points(self._state, target)
        if awarded:
            self._state.notice = self.translate("dailyPointsAwarded")
            self.load_member_data(target)
        return awarded

    def break_rule(self, rule_key: str, member_id: Optional[str] = None) -> bool:
        target = self._member_id(member_id)
        if target is None:
            return False
        broken = self._progress.break_rule(self._state, target, rule_key)
        if broken:
            self._state.notice = self.translate("pointsDeducted", points=1)
            self.load_member_data(target)
        return broken

    def add_bonus_points(self, activity_key: str, member_id: Optional[str] = None) -> bool:
        activity = get_bonus_activity(activity_key)
        return self._add_points(
            member_id,
            activity.points,
            self.translate(f"bonus.{activity.key}"),
            TransactionType.BONUS_ACTIVITY,
        )

    def add_school_reward(self, points: int, reason: str, member_id: Optional[str] = None) -> bool:
        transaction_type = TransactionType.SCHOOL_REWARD if points > 0 else TransactionType.SCHOOL_PENALTY
        return self._add_points(member_id, points, reason, transaction_type)

    def add_school_event(self, event_key: str, member_id: Optional[str] = None) -> bool:
        event = get_school_event(event_key)
        return self.add_school_reward(event.points, self.translate(f"school.{event.key}"), member_id)

    def reset_member_points(self, member_id: Optional[str] = None) -> bool:
        """Delete every transaction and progress record of the member."""

        target = self._member_id(member_id)
        if target is None or self._store is None:
            return False
        try:
            removed = self._store.delete_member_transactions(target)
            self._store.delete_progress(target)
        except QueryFailureError as exc:
            self._logger.store_error("reset_member", exc, member=target)
            self._state.notice = self.translate("resetFailed")
            return False
        self._undo.clear()
        self._logger.log("member_reset", member=target, transactions=removed)
        self._state.notice = self.translate("resetSuccess")
        self.load_member_data(target)
        return True

    def undo_last_action(self) -> bool:
        try:
            action = self._undo.undo(self._store if self._state.online else None)
        except (NoActionToUndoError, QueryFailureError):
            self._state.notice = self.translate("cannotUndo")
            return False
        self._state.notice = self.translate("actionUndone")
        self.load_member_data(action.member_id)
        return True

    # ------------------------------------------------------------------
    # Connectivity & preferences
    # ------------------------------------------------------------------
    def set_online(self, online: bool) -> Optional[ReplayResult]:
        """Apply a connectivity signal; going online replays the offline queue."""

        was_online = self._state.online
        self._state.online = online
        if was_online != online:
            self._logger.log("connectivity", online=online, queued=len(self._queue))
        if online and not was_online:
            return self.sync_offline_queue()
        return None

    def sync_offline_queue(self) -> Optional[ReplayResult]:
        if not len(self._queue) or self._store is None or not self._state.online:
            return None
        result = self._queue.replay(self._store)
        if result.complete and self._state.selected_member_id:
            self.load_member_data(self._state.selected_member_id)
        return result

    def toggle_language(self) -> str:
        language = next_language(self._state.language)
        self._state.language = language
        self._save_cache(LANGUAGE_CACHE_KEY, language)
        return language

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _member_id(self, member_id: Optional[str]) -> Optional[str]:
        if member_id is None:
            return self._state.selected_member_id
        return self.get_member(member_id).id

    def _add_points(
        self,
        member_id: Optional[str],
        points: int,
        reason: str,
        transaction_type: TransactionType,
    ) -> bool:
        target = self._member_id(member_id)
        if target is None:
            return False
        recorded = self._ledger.record_transaction(self._state, target, points, reason, transaction_type)
        if recorded is None:
            return False
        key = "pointsAdded" if points > 0 else "pointsDeducted"
        self._state.notice = self.translate(key, points=abs(points))
        self.load_member_data(target)
        return True

    def _load_cache(self, key: str) -> Any:
        try:
            return self._cache.load(key)
        except QueryFailureError as exc:
            self._logger.store_error("load_cache", exc, key=key)
            return None

    def _save_cache(self, key: str, value: Any) -> None:
        try:
            self._cache.save(key, value)
        except QueryFailureError as exc:
            self._logger.store_error("save_cache", exc, key=key)

    def _restore_members(self) -> List[Member]:
        if not self._state.members:
            cached = self._load_cache(MEMBERS_CACHE_KEY) or []
            self._state.members = [Member.from_dict(item) for item in cached]
        return self._state.members

    def _restore_snapshot(self, member_id: str) -> MemberSnapshot:
        cached = self._load_cache(SNAPSHOT_CACHE_KEY)
        if member_id not in self._state.snapshots and cached and cached.get("memberId") == member_id:
            self._state.snapshots[member_id] = MemberSnapshot.from_dict(cached)
        return self._state.snapshot(member_id)


__all__ = ["FamilyPoints"]
