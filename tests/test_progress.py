from datetime import date, datetime

import pytest

from familypoints.cache import MemoryCache
from familypoints.exceptions import MemberNotFoundError, QueryFailureError
from familypoints.models import (
    DailyAwardAction,
    DailyProgress,
    ProgressState,
    RuleBrokenAction,
    TransactionType,
)
from familypoints.progress import state_of
from familypoints.service import FamilyPoints


def _of_type(store, member_id, transaction_type):
    return [tx for tx in store.list_transactions(member_id) if tx.transaction_type is transaction_type]


def test_state_of_follows_award_and_breaks() -> None:
    today = date(2026, 10, 14)

    assert state_of(None, today) is ProgressState.NOT_STARTED
    awarded = DailyProgress(member_id="ava", date=today, daily_points_awarded=True)
    assert state_of(awarded, today) is ProgressState.AWARDED
    assert state_of(awarded.with_rule_broken("bed"), today) is ProgressState.AWARDED_WITH_BREAKS
    # yesterday's record does not carry over
    assert state_of(awarded, date(2026, 10, 15)) is ProgressState.NOT_STARTED


def test_daily_award_is_granted_once_per_day(app, store) -> None:
    assert app.award_daily_points() is True
    assert app.award_daily_points() is False

    assert len(_of_type(store, "ava", TransactionType.DAILY_AWARD)) == 1
    assert len(store.awarded_progress("ava", limit=30)) == 1
    assert app.progress_state() is ProgressState.AWARDED
    assert app.state.selected_snapshot.weekly_points == 15
    assert isinstance(app.last_action, DailyAwardAction)
    assert app.last_action.previous is None


def test_rule_cannot_be_broken_before_the_award(app, store) -> None:
    assert app.break_rule("bed") is False
    assert store.list_transactions("ava") == []
    assert app.last_action is None


def test_breaking_a_rule_deducts_one_point_once(app, store) -> None:
    app.award_daily_points()

    assert app.break_rule("bed") is True
    assert app.break_rule("bed") is False

    penalties = _of_type(store, "ava", TransactionType.RULE_BROKEN)
    assert [tx.points for tx in penalties] == [-1]
    assert penalties[0].reason == "Rule broken: Making the bed"
    progress = store.get_progress("ava", date(2026, 10, 14))
    assert progress.rules_broken == {"bed": True}
    assert app.progress_state() is ProgressState.AWARDED_WITH_BREAKS
    assert app.state.selected_snapshot.weekly_points == 14


def test_breaking_another_rule_preserves_earlier_breaks(app, store) -> None:
    app.award_daily_points()
    app.break_rule("bed")
    app.break_rule("teeth")

    assert store.get_progress("ava", date(2026, 10, 14)).rules_broken == {"bed": True, "teeth": True}
    assert isinstance(app.last_action, RuleBrokenAction)
    assert app.last_action.previous_rules_broken == {"bed": True}


def test_rule_reason_uses_current_language(app, store) -> None:
    app.award_daily_points()
    app.toggle_language()

    app.break_rule("bed")

    assert _of_type(store, "ava", TransactionType.RULE_BROKEN)[0].reason == "Rule broken: Faire son lit"


def test_unknown_rule_is_rejected(app) -> None:
    app.award_daily_points()

    with pytest.raises(ValueError):
        app.break_rule("homework")


def test_new_day_starts_fresh(app, store, clock) -> None:
    app.award_daily_points()
    app.break_rule("bed")

    clock.advance(days=1)
    app.load_member_data("ava")

    assert app.progress_state() is ProgressState.NOT_STARTED
    assert app.award_daily_points() is True
    assert len(_of_type(store, "ava", TransactionType.DAILY_AWARD)) == 2
    assert app.state.selected_snapshot.streak == 2


def test_offline_award_only_queues_the_transaction(app, store) -> None:
    app.set_online(False)

    assert app.award_daily_points() is True
    assert app.break_rule("plate") is True

    assert store.list_transactions("ava") == []
    assert store.get_progress("ava", date(2026, 10, 14)) is None
    assert [item.points for item in app.offline_queue.items] == [15, -1]
    snapshot = app.state.selected_snapshot
    assert snapshot.today_progress.daily_points_awarded is True
    assert snapshot.today_progress.rules_broken == {"plate": True}
    assert snapshot.weekly_points == 14
    assert app.last_action is None


def test_award_fails_cleanly_when_progress_cannot_be_saved(app, store, monkeypatch) -> None:
    def failing_upsert(_progress):
        raise QueryFailureError("update_progress", "disk full")

    monkeypatch.setattr(store, "upsert_progress", failing_upsert)

    assert app.award_daily_points() is False
    assert app.state.error == "error.updateProgress"
    assert app.error_message == "Failed to update daily progress"
    assert app.last_action is None
    # the award transaction was already written and stays in the ledger
    assert [tx.points for tx in _of_type(store, "ava", TransactionType.DAILY_AWARD)] == [15]
    assert app.progress_state() is ProgressState.NOT_STARTED


def test_weekly_maximum_is_reached_at_exactly_75(app, store) -> None:
    for hour in range(4):
        store.insert_transaction(
            "ava",
            15,
            "Daily routine completed",
            TransactionType.DAILY_AWARD,
            created_at=datetime(2026, 10, 12, 8 + hour),
        )
    app.load_member_data("ava")

    before = app.reward_progress()
    assert before.weekly_points == 60
    assert before.chf_earned == 4
    assert before.max_reached is False

    app.award_daily_points()

    after = app.reward_progress()
    assert after.weekly_points == 75
    assert after.chf_earned == 5
    assert after.max_reached is True


def _second_session(store, clock) -> FamilyPoints:
    other = FamilyPoints(store, MemoryCache(), clock=clock)
    other.load_members()
    return other


def test_award_granted_in_another_session_is_not_repeated(app, store, clock) -> None:
    app.select_member("ben")
    assert app.award_daily_points() is True

    other = _second_session(store, clock)

    assert other.award_daily_points("ben") is False
    assert len(_of_type(store, "ben", TransactionType.DAILY_AWARD)) == 1
    assert other.break_rule("bed", "ben") is True
    assert [tx.points for tx in _of_type(store, "ben", TransactionType.RULE_BROKEN)] == [-1]


def test_stale_snapshot_does_not_allow_a_second_award(app, store, clock) -> None:
    other = _second_session(store, clock)
    other.select_member("ben")
    assert other.progress_state() is ProgressState.NOT_STARTED

    app.award_daily_points("ben")

    assert other.award_daily_points() is False
    assert other.progress_state() is ProgressState.AWARDED
    assert len(_of_type(store, "ben", TransactionType.DAILY_AWARD)) == 1


def test_award_for_unknown_member_is_rejected(app, store) -> None:
    with pytest.raises(MemberNotFoundError):
        app.award_daily_points("nobody")

    assert store.list_transactions("nobody") == []


def test_award_is_skipped_when_todays_progress_cannot_be_read(app, store, monkeypatch) -> None:
    def failing_get(_member_id, _day):
        raise QueryFailureError("load_progress", "locked")

    monkeypatch.setattr(store, "get_progress", failing_get)

    assert app.award_daily_points() is False
    assert app.state.error == "error.loadMemberData"
    assert store.list_transactions("ava") == []
    assert app.logger.tail(event="store_error")[-1]["operation"] == "load_progress"
