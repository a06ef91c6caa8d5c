from datetime import date, datetime

import pytest

from familypoints.exceptions import QueryFailureError, StoreUnavailableError
from familypoints.models import DailyProgress, TransactionType
from familypoints.store import PointsTransactionRecord, SQLStore


def test_members_are_listed_by_name(store) -> None:
    store.add_member("Zoe", member_id="zoe")
    store.add_member("Ava", member_id="ava")

    names = [member.name for member in store.list_members()]

    assert names == ["Ava", "Zoe"]
    assert store.get_member("zoe").name == "Zoe"
    assert store.get_member("missing") is None


def test_transactions_filter_order_and_limit(store) -> None:
    store.insert_transaction("ava", 5, "Set the table", TransactionType.BONUS_ACTIVITY, created_at=datetime(2026, 10, 1, 8))
    store.insert_transaction("ava", 15, "Daily routine completed", TransactionType.DAILY_AWARD, created_at=datetime(2026, 10, 12, 8))
    store.insert_transaction("ava", -1, "Rule broken: Making the bed", TransactionType.RULE_BROKEN, created_at=datetime(2026, 10, 13, 8))
    store.insert_transaction("ben", 5, "General Help", TransactionType.BONUS_ACTIVITY, created_at=datetime(2026, 10, 13, 9))

    recent = store.list_transactions("ava", since=datetime(2026, 10, 12))
    assert [tx.points for tx in recent] == [-1, 15]

    limited = store.list_transactions("ava", limit=1)
    assert len(limited) == 1
    assert limited[0].transaction_type is TransactionType.RULE_BROKEN


def test_upsert_progress_keeps_one_row_per_member_and_day(store) -> None:
    day = date(2026, 10, 14)
    store.upsert_progress(DailyProgress(member_id="ava", date=day, daily_points_awarded=True))
    store.upsert_progress(DailyProgress(member_id="ava", date=day, daily_points_awarded=True, rules_broken={"bed": True}))

    awarded = store.awarded_progress("ava", limit=30)

    assert len(awarded) == 1
    assert awarded[0].rules_broken == {"bed": True}


def test_update_rules_broken_replaces_mapping(store) -> None:
    day = date(2026, 10, 14)
    store.upsert_progress(
        DailyProgress(member_id="ava", date=day, daily_points_awarded=True, rules_broken={"bed": True, "teeth": True})
    )

    assert store.update_rules_broken("ava", day, {"bed": True}) == 1
    assert store.get_progress("ava", day).rules_broken == {"bed": True}
    assert store.update_rules_broken("ava", date(2026, 10, 15), {}) == 0


def test_delete_helpers_only_touch_the_member(store) -> None:
    tx = store.insert_transaction("ava", 5, "General Help", TransactionType.BONUS_ACTIVITY)
    store.insert_transaction("ben", 5, "General Help", TransactionType.BONUS_ACTIVITY)
    store.upsert_progress(DailyProgress(member_id="ava", date=date(2026, 10, 13), daily_points_awarded=True))
    store.upsert_progress(DailyProgress(member_id="ava", date=date(2026, 10, 14), daily_points_awarded=True))

    assert store.delete_transaction(tx.id) == 1
    assert store.delete_transaction(tx.id) == 0
    assert store.delete_progress("ava", date(2026, 10, 14)) == 1
    assert store.delete_progress("ava") == 1
    assert store.delete_member_transactions("ben") == 1
    assert store.list_transactions("ben") == []


def test_missing_or_invalid_url_is_unavailable(tmp_path) -> None:
    with pytest.raises(StoreUnavailableError):
        SQLStore("")

    with pytest.raises(StoreUnavailableError):
        SQLStore("nosuchdialect://localhost/points")


def test_sql_errors_become_query_failures(store) -> None:
    PointsTransactionRecord.__table__.drop(store.engine)

    with pytest.raises(QueryFailureError) as excinfo:
        store.list_transactions("ava")

    assert excinfo.value.operation == "load_transactions"


def test_created_at_stores_naive_local_time(store, clock) -> None:
    assert PointsTransactionRecord.__table__.c.created_at.type.timezone is False

    stamped = store.insert_transaction("ava", 5, "Set the table", TransactionType.BONUS_ACTIVITY)
    explicit = store.insert_transaction(
        "ava", 15, "Daily routine completed", TransactionType.DAILY_AWARD, created_at=datetime(2026, 10, 13, 7, 30)
    )

    loaded = {tx.id: tx.created_at for tx in store.list_transactions("ava", since=datetime(2026, 10, 13))}
    assert loaded == {stamped.id: clock.now, explicit.id: datetime(2026, 10, 13, 7, 30)}
    assert loaded[stamped.id].tzinfo is None
