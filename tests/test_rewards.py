from decimal import Decimal

from familypoints.rewards import RewardProgress, chf_earned, max_reached, progress_percentage


def test_chf_is_one_per_fifteen_points_capped_at_five() -> None:
    assert chf_earned(0) == 0
    assert chf_earned(14) == 0
    assert chf_earned(15) == 1
    assert chf_earned(74) == 4
    assert chf_earned(75) == 5
    assert chf_earned(300) == 5
    assert chf_earned(-20) == 0


def test_progress_percentage_is_capped() -> None:
    assert progress_percentage(30) == Decimal("40.00")
    assert progress_percentage(50) == Decimal("66.67")
    assert progress_percentage(120) == Decimal("100.00")


def test_maximum_is_reached_at_75_not_below() -> None:
    assert max_reached(74) is False
    assert max_reached(75) is True

    progress = RewardProgress.from_weekly(75)
    assert progress.chf_earned == 5
    assert progress.max_reached is True
