"""Daily routine state machine for each member and calendar day.

A member starts every day in :attr:`ProgressState.NOT_STARTED`. Granting the
daily award moves the day to ``AWARDED``; breaking any rule afterwards moves it
to ``AWARDED_WITH_BREAKS``. A record left over from an earlier date counts as
``NOT_STARTED`` for today. Rules can only be broken once the award has been
granted and each rule at most once per day.
"""

from __future__ import annotations

from dataclasses import replace
from datetime import date, datetime
from typing import Callable, Optional, Tuple

from .catalog import get_rule
from .config import DAILY_AWARD_POINTS, DAILY_AWARD_REASON, RULE_PENALTY_POINTS
from .exceptions import QueryFailureError
from .i18n import Translator
from .ledger import LedgerEngine
from .models import (
    DailyAwardAction,
    DailyProgress,
    ProgressState,
    RuleBrokenAction,
    TransactionType,
)
from .ops import StructuredLogger
from .state import AppState
from .undo import UndoController


def state_of(progress: Optional[DailyProgress], today: date) -> ProgressState:
    if progress is None or progress.date != today or not progress.daily_points_awarded:
        return ProgressState.NOT_STARTED
    if any(progress.rules_broken.values()):
        return ProgressState.AWARDED_WITH_BREAKS
    return ProgressState.AWARDED


class DailyProgressMachine:
    """Drive award and rule-break transitions through the ledger and the store."""

    def __init__(
        self,
        ledger: LedgerEngine,
        undo: UndoController,
        translator: Translator,
        *,
        logger: Optional[StructuredLogger] = None,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self._ledger = ledger
        self._undo = undo
        self._translator = translator
        self._logger = logger or StructuredLogger()
        self._clock = clock

    def today(self) -> date:
        return self._clock().date()

    def current_state(self, state: AppState, member_id: str) -> ProgressState:
        return state_of(state.snapshot(member_id).today_progress, self.today())

    def refresh_today(self, state: AppState, member_id: str) -> Optional[DailyProgress]:
        """Re-read today's record from the store while online.

        Another session, or a member that was never loaded, may have a record
        the local snapshot does not show yet.
        """

        snapshot = state.snapshot(member_id)
        store = self._ledger.store
        if state.online and store is not None:
            snapshot.today_progress = store.get_progress(member_id, self.today())
        return snapshot.today_progress

    def _guarded_progress(self, state: AppState, member_id: str) -> Tuple[bool, Optional[DailyProgress]]:
        try:
            return True, self.refresh_today(state, member_id)
        except QueryFailureError as exc:
            self._logger.store_error("load_progress", exc, member=member_id)
            state.error = "error.loadMemberData"
            return False, None

    def award_daily_points(self, state: AppState, member_id: str) -> bool:
        """Grant today's award once; returns ``False`` for no-ops and failures."""

        loaded, current = self._guarded_progress(state, member_id)
        today = self.today()
        if not loaded or state_of(current, today) is not ProgressState.NOT_STARTED:
            return False

        snapshot = state.snapshot(member_id)
        previous = current if current is not None and current.date == today else None

        recorded = self._ledger.record_transaction(
            state,
            member_id,
            DAILY_AWARD_POINTS,
            DAILY_AWARD_REASON,
            TransactionType.DAILY_AWARD,
        )
        if recorded is None:
            return False

        awarded = DailyProgress(member_id=member_id, date=today, daily_points_awarded=True, rules_broken={})
        if not state.online:
            snapshot.today_progress = replace(awarded, id="offline")
            return True

        store = self._ledger.store
        try:
            snapshot.today_progress = store.upsert_progress(awarded)
        except QueryFailureError as exc:
            self._logger.store_error("update_progress", exc, member=member_id)
            state.error = "error.updateProgress"
            return False

        self._undo.record(
            DailyAwardAction(
                member_id=member_id,
                day=today,
                transaction_id=recorded.id,
                previous=previous,
                points=DAILY_AWARD_POINTS,
            )
        )
        self._logger.log("daily_award", member=member_id, date=today.isoformat())
        return True

    def break_rule(self, state: AppState, member_id: str, rule_key: str) -> bool:
        """Deduct a point for ``rule_key``; no-op before the award or on a repeat break."""

        get_rule(rule_key)
        loaded, progress = self._guarded_progress(state, member_id)
        if not loaded or state_of(progress, self.today()) is ProgressState.NOT_STARTED:
            return False
        if progress is None or progress.is_broken(rule_key):
            return False
        snapshot = state.snapshot(member_id)

        label = self._translator.rule_label(rule_key, locale=state.language)
        recorded = self._ledger.record_transaction(
            state,
            member_id,
            -RULE_PENALTY_POINTS,
            f"Rule broken: {label}",
            TransactionType.RULE_BROKEN,
        )
        if recorded is None:
            return False

        updated = progress.with_rule_broken(rule_key)
        if not state.online:
            snapshot.today_progress = updated
            return True

        try:
            snapshot.today_progress = self._ledger.store.upsert_progress(updated)
        except QueryFailureError as exc:
            self._logger.store_error("update_progress", exc, member=member_id, rule=rule_key)
            state.error = "error.updateProgress"
            return False

        self._undo.record(
            RuleBrokenAction(
                member_id=member_id,
                day=progress.date,
                rule_key=rule_key,
                previous_rules_broken=dict(progress.rules_broken),
                points=-RULE_PENALTY_POINTS,
            )
        )
        self._logger.log("rule_broken", member=member_id, rule=rule_key)
        return True


__all__ = ["DailyProgressMachine", "state_of"]
