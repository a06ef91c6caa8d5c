from datetime import date

import pytest

from familypoints.exceptions import NoActionToUndoError, QueryFailureError
from familypoints.models import ProgressState, TransactionAction, TransactionType
from familypoints.undo import UndoController


def test_undo_without_pending_action() -> None:
    controller = UndoController()

    with pytest.raises(NoActionToUndoError):
        controller.undo(None)


def test_service_reports_cannot_undo_when_nothing_is_pending(app) -> None:
    assert app.undo_last_action() is False
    assert app.state.notice == "Cannot undo"


def test_undo_bonus_deletes_the_transaction(app, store) -> None:
    app.add_bonus_points("takeOutEmy")
    assert app.state.selected_snapshot.weekly_points == 15

    assert app.undo_last_action() is True

    assert store.list_transactions("ava") == []
    assert app.state.selected_snapshot.weekly_points == 0
    assert app.last_action is None
    assert app.state.notice == "Action undone"


def test_only_the_latest_action_is_kept(app, store) -> None:
    app.add_bonus_points("setTable")
    app.add_school_event("allSubjects")

    assert isinstance(app.last_action, TransactionAction)
    assert app.last_action.points == 150

    app.undo_last_action()
    assert [tx.points for tx in store.list_transactions("ava")] == [5]
    assert app.undo_last_action() is False


def test_undo_daily_award_restores_not_started(app, store) -> None:
    app.award_daily_points()

    assert app.undo_last_action() is True

    assert store.get_progress("ava", date(2026, 10, 14)) is None
    assert store.list_transactions("ava") == []
    assert app.progress_state() is ProgressState.NOT_STARTED
    assert app.award_daily_points() is True


def test_undo_daily_award_leaves_other_awards_alone(app, store, clock) -> None:
    store.insert_transaction("ava", 15, "Daily routine completed", TransactionType.DAILY_AWARD, created_at=clock.now)
    app.award_daily_points()

    app.undo_last_action()

    assert [tx.points for tx in store.list_transactions("ava")] == [15]


def test_undo_rule_break_clears_flag_but_keeps_the_deduction(app, store) -> None:
    app.award_daily_points()
    app.break_rule("teeth")
    assert app.state.selected_snapshot.weekly_points == 14

    assert app.undo_last_action() is True

    assert store.get_progress("ava", date(2026, 10, 14)).rules_broken == {}
    penalties = [tx for tx in store.list_transactions("ava") if tx.transaction_type is TransactionType.RULE_BROKEN]
    assert [tx.points for tx in penalties] == [-1]
    assert app.state.selected_snapshot.weekly_points == 14
    assert app.progress_state() is ProgressState.AWARDED


def test_failed_undo_still_consumes_the_action(app, store, monkeypatch) -> None:
    app.add_bonus_points("setTable")

    def failing_delete(_transaction_id):
        raise QueryFailureError("delete_transaction", "timeout")

    monkeypatch.setattr(store, "delete_transaction", failing_delete)

    assert app.undo_last_action() is False
    assert app.state.notice == "Cannot undo"
    assert app.last_action is None
    assert app.logger.tail(event="store_error")[-1]["operation"] == "undo"


def test_undo_while_offline_is_refused(app) -> None:
    app.add_bonus_points("setTable")
    app.set_online(False)

    assert app.undo_last_action() is False
    assert app.last_action is not None


def test_reset_clears_pending_undo(app, store) -> None:
    app.award_daily_points()
    app.add_bonus_points("setTable")

    assert app.reset_member_points() is True

    assert store.list_transactions("ava") == []
    assert store.awarded_progress("ava", limit=30) == []
    assert app.last_action is None
    assert app.state.selected_snapshot.weekly_points == 0
