"""Single-level undo for the most recent reversible action."""

from __future__ import annotations

from typing import Optional

from .exceptions import NoActionToUndoError, QueryFailureError
from .models import DailyAwardAction, LastAction, RuleBrokenAction, TransactionAction
from .ops import StructuredLogger
from .store import Store


class UndoController:
    """Remember exactly one reversible action and roll it back on request."""

    def __init__(self, *, logger: Optional[StructuredLogger] = None) -> None:
        self._logger = logger or StructuredLogger()
        self._last_action: Optional[LastAction] = None

    @property
    def pending(self) -> Optional[LastAction]:
        return self._last_action

    def record(self, action: LastAction) -> None:
        """Register ``action``, discarding any previously pending one."""

        self._last_action = action
        self._logger.log("undo_registered", kind=action.kind, member=action.member_id)

    def clear(self) -> None:
        self._last_action = None

    def undo(self, store: Optional[Store]) -> LastAction:
        """Reverse the pending action against ``store`` and return it.

        The pending action is consumed whether the reversal succeeds or not.
        """

        action = self._last_action
        if action is None:
            raise NoActionToUndoError("No undoable action is available.")
        if store is None:
            raise NoActionToUndoError("The store is unavailable.")
        self.clear()
        try:
            if isinstance(action, TransactionAction):
                store.delete_transaction(action.transaction_id)
            elif isinstance(action, DailyAwardAction):
                if action.previous is None:
                    store.delete_progress(action.member_id, action.day)
                else:
                    store.upsert_progress(action.previous)
                store.delete_transaction(action.transaction_id)
            elif isinstance(action, RuleBrokenAction):
                # The -1 transaction is kept; only the broken flag is restored.
                store.update_rules_broken(action.member_id, action.day, action.previous_rules_broken)
            else:  # pragma: no cover - exhaustive over LastAction
                raise TypeError(f"Unsupported action {action!r}")
        except QueryFailureError as exc:
            self._logger.store_error("undo", exc, kind=action.kind, member=action.member_id)
            raise
        self._logger.log("undo_applied", kind=action.kind, member=action.member_id, points=action.points)
        return action


__all__ = ["UndoController"]
