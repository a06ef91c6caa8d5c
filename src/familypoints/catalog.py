"""Fixed catalogues of daily rules, bonus activities and school events."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Tuple


@dataclass(frozen=True, slots=True)
class DailyRule:
    key: str
    label: str


@dataclass(frozen=True, slots=True)
class BonusActivity:
    key: str
    label: str
    points: int


@dataclass(frozen=True, slots=True)
class SchoolEvent:
    key: str
    label: str
    points: int


DAILY_RULES: Tuple[DailyRule, ...] = (
    DailyRule("organization", "Tidying up when an activity is finished"),
    DailyRule("bed", "Making the bed"),
    DailyRule("plate", "Bringing out plate after meals"),
    DailyRule("teeth", "Brushing teeth after breakfast and dinner"),
    DailyRule("shower", "Showering every other day and tidying bathrobe"),
    DailyRule("ipad", "Charging iPad and tidying folders"),
    DailyRule("pajamas", "Putting on pajamas"),
    DailyRule("laundry", "Putting dirty laundry in hamper or trash in the bin"),
    DailyRule("family_manners", "Good family manners"),
    DailyRule("bedtime", "Going to bed on time"),
    DailyRule("table_manners", "Good table manners"),
    DailyRule("parent", "Don't act like a parent"),
    DailyRule("interrupt", "Don't interrupt others"),
    DailyRule("repeat", "Don't make mom repeat things"),
)

BONUS_ACTIVITIES: Tuple[BonusActivity, ...] = (
    BonusActivity("setTable", "Set the table", 5),
    BonusActivity("hangWashing", "Hang out washing", 5),
    BonusActivity("takeOutEmy", "Take out Emy", 15),
    BonusActivity("generalHelp", "General Help", 5),
    BonusActivity("takeOutGarbage", "Take out garbage", 5),
    BonusActivity("cleanRabbit", "Clean rabbit area", 15),
    BonusActivity("orderDrawers", "Order drawers/closets", 15),
    BonusActivity("generalCleaning", "General cleaning", 15),
)

SCHOOL_EVENTS: Tuple[SchoolEvent, ...] = (
    SchoolEvent("monthlyAvg", "Monthly average above target", 75),
    SchoolEvent("allSubjects", "All subjects above target", 150),
    SchoolEvent("belowMin", "Below minimum in a subject", -75),
)

_RULES_BY_KEY: Dict[str, DailyRule] = {rule.key: rule for rule in DAILY_RULES}
_BONUS_BY_KEY: Dict[str, BonusActivity] = {activity.key: activity for activity in BONUS_ACTIVITIES}
_SCHOOL_BY_KEY: Dict[str, SchoolEvent] = {event.key: event for event in SCHOOL_EVENTS}


def get_rule(key: str) -> DailyRule:
    try:
        return _RULES_BY_KEY[key]
    except KeyError as exc:
        raise ValueError(f"Unknown daily rule '{key}'.") from exc


def get_bonus_activity(key: str) -> BonusActivity:
    try:
        return _BONUS_BY_KEY[key]
    except KeyError as exc:
        raise ValueError(f"Unknown bonus activity '{key}'.") from exc


def get_school_event(key: str) -> SchoolEvent:
    try:
        return _SCHOOL_BY_KEY[key]
    except KeyError as exc:
        raise ValueError(f"Unknown school event '{key}'.") from exc


__all__ = [
    "BONUS_ACTIVITIES",
    "BonusActivity",
    "DAILY_RULES",
    "DailyRule",
    "SCHOOL_EVENTS",
    "SchoolEvent",
    "get_bonus_activity",
    "get_rule",
    "get_school_event",
]
