"""Domain models used by the Family Points package."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import date, datetime
from enum import Enum
from typing import Any, ClassVar, Dict, Mapping, Optional, Union


class TransactionType(str, Enum):
    """Enumerates the supported kinds of point transactions."""

    DAILY_AWARD = "daily_award"
    RULE_BROKEN = "rule_broken"
    BONUS_ACTIVITY = "bonus_activity"
    SCHOOL_REWARD = "school_reward"
    SCHOOL_PENALTY = "school_penalty"


UNDOABLE_TRANSACTION_TYPES = frozenset(
    {
        TransactionType.BONUS_ACTIVITY,
        TransactionType.SCHOOL_REWARD,
        TransactionType.SCHOOL_PENALTY,
    }
)


class ProgressState(str, Enum):
    """Daily routine lifecycle for a single member and calendar day."""

    NOT_STARTED = "not_started"
    AWARDED = "awarded"
    AWARDED_WITH_BREAKS = "awarded_with_breaks"


@dataclass(frozen=True, slots=True)
class Member:
    """A family member taking part in the points game."""

    id: str
    name: str

    def as_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "name": self.name}

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "Member":
        return cls(id=str(payload["id"]), name=str(payload["name"]))


@dataclass(frozen=True, slots=True)
class Transaction:
    """Represents a single persisted ledger entry."""

    id: str
    member_id: str
    points: int
    reason: str
    transaction_type: TransactionType
    created_at: datetime

    def as_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "member_id": self.member_id,
            "points": self.points,
            "reason": self.reason,
            "transaction_type": self.transaction_type.value,
            "created_at": self.created_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "Transaction":
        return cls(
            id=str(payload["id"]),
            member_id=str(payload["member_id"]),
            points=int(payload["points"]),
            reason=str(payload["reason"]),
            transaction_type=TransactionType(payload["transaction_type"]),
            created_at=datetime.fromisoformat(payload["created_at"]),
        )


@dataclass(frozen=True, slots=True)
class DailyProgress:
    """Daily routine record for one member on one calendar day."""

    member_id: str
    date: date
    daily_points_awarded: bool = False
    rules_broken: Mapping[str, bool] = field(default_factory=dict)
    id: Optional[str] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "rules_broken", dict(self.rules_broken))

    def is_broken(self, rule_key: str) -> bool:
        return bool(self.rules_broken.get(rule_key))

    def with_rule_broken(self, rule_key: str) -> "DailyProgress":
        """Return a copy with ``rule_key`` marked as broken, other keys preserved."""

        rules = dict(self.rules_broken)
        rules[rule_key] = True
        return replace(self, rules_broken=rules)

    def as_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "member_id": self.member_id,
            "date": self.date.isoformat(),
            "daily_points_awarded": self.daily_points_awarded,
            "rules_broken": dict(self.rules_broken),
        }

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "DailyProgress":
        return cls(
            id=payload.get("id"),
            member_id=str(payload["member_id"]),
            date=date.fromisoformat(payload["date"]),
            daily_points_awarded=bool(payload.get("daily_points_awarded")),
            rules_broken={str(key): bool(value) for key, value in (payload.get("rules_broken") or {}).items()},
        )


@dataclass(frozen=True, slots=True)
class OfflineTransaction:
    """Transaction payload buffered while the store is unreachable."""

    id: str
    member_id: str
    points: int
    reason: str
    transaction_type: TransactionType
    timestamp: datetime

    def as_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "member_id": self.member_id,
            "points": self.points,
            "reason": self.reason,
            "transaction_type": self.transaction_type.value,
            "timestamp": self.timestamp.isoformat(),
        }

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "OfflineTransaction":
        return cls(
            id=str(payload["id"]),
            member_id=str(payload["member_id"]),
            points=int(payload["points"]),
            reason=str(payload["reason"]),
            transaction_type=TransactionType(payload["transaction_type"]),
            timestamp=datetime.fromisoformat(payload["timestamp"]),
        )


# ---------------------------------------------------------------------------
# Reversible actions
# ---------------------------------------------------------------------------
@dataclass(frozen=True, slots=True)
class TransactionAction:
    """A plain ledger insert (bonus activity or school event)."""

    kind: ClassVar[str] = "transaction"

    member_id: str
    transaction_id: str
    points: int
    reason: str


@dataclass(frozen=True, slots=True)
class DailyAwardAction:
    """The daily award grant together with the progress state it replaced."""

    kind: ClassVar[str] = "daily_award"

    member_id: str
    day: date
    transaction_id: str
    previous: Optional[DailyProgress]
    points: int


@dataclass(frozen=True, slots=True)
class RuleBrokenAction:
    """A rule break; only the broken flags are restored when undone."""

    kind: ClassVar[str] = "rule_broken"

    member_id: str
    day: date
    rule_key: str
    previous_rules_broken: Mapping[str, bool]
    points: int


LastAction = Union[TransactionAction, DailyAwardAction, RuleBrokenAction]


__all__ = [
    "DailyAwardAction",
    "DailyProgress",
    "LastAction",
    "Member",
    "OfflineTransaction",
    "ProgressState",
    "RuleBrokenAction",
    "Transaction",
    "TransactionAction",
    "TransactionType",
    "UNDOABLE_TRANSACTION_TYPES",
]
