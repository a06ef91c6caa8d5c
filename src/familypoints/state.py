"""Session state shared between the family points components."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional

from .config import DEFAULT_LANGUAGE
from .models import DailyProgress, Member, Transaction
from .rewards import RewardProgress, floor_at_zero


@dataclass(slots=True)
class MemberSnapshot:
    """Derived aggregates for one member, rebuilt from the store on every load."""

    member_id: str
    weekly_points: int = 0
    monthly_points: int = 0
    today_progress: Optional[DailyProgress] = None
    recent_transactions: List[Transaction] = field(default_factory=list)
    streak: int = 0

    def adjust(self, points: int) -> None:
        """Optimistically apply ``points`` to both windows, floored at zero."""

        self.weekly_points = floor_at_zero(self.weekly_points + points)
        self.monthly_points = floor_at_zero(self.monthly_points + points)

    @property
    def reward(self) -> RewardProgress:
        return RewardProgress.from_weekly(self.weekly_points)

    def as_dict(self) -> Dict[str, Any]:
        return {
            "memberId": self.member_id,
            "weeklyPoints": self.weekly_points,
            "monthlyPoints": self.monthly_points,
            "todayProgress": self.today_progress.as_dict() if self.today_progress else None,
            "recentTransactions": [transaction.as_dict() for transaction in self.recent_transactions],
            "streak": self.streak,
        }

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "MemberSnapshot":
        progress = payload.get("todayProgress")
        return cls(
            member_id=str(payload["memberId"]),
            weekly_points=floor_at_zero(int(payload.get("weeklyPoints", 0))),
            monthly_points=floor_at_zero(int(payload.get("monthlyPoints", 0))),
            today_progress=DailyProgress.from_dict(progress) if progress else None,
            recent_transactions=[Transaction.from_dict(item) for item in payload.get("recentTransactions", [])],
            streak=int(payload.get("streak", 0)),
        )


@dataclass(slots=True)
class AppState:
    """Everything the UI renders; mutated only through :class:`FamilyPoints`."""

    members: List[Member] = field(default_factory=list)
    selected_member_id: Optional[str] = None
    online: bool = True
    snapshots: Dict[str, MemberSnapshot] = field(default_factory=dict)
    language: str = DEFAULT_LANGUAGE
    loading: bool = False
    # translation key of the current dismissible error banner
    error: Optional[str] = None
    notice: Optional[str] = None
    connection_error: Optional[str] = None

    def snapshot(self, member_id: str) -> MemberSnapshot:
        existing = self.snapshots.get(member_id)
        if existing is None:
            existing = self.snapshots[member_id] = MemberSnapshot(member_id=member_id)
        return existing

    @property
    def selected_member(self) -> Optional[Member]:
        for member in self.members:
            if member.id == self.selected_member_id:
                return member
        return None

    @property
    def selected_snapshot(self) -> Optional[MemberSnapshot]:
        if self.selected_member_id is None:
            return None
        return self.snapshot(self.selected_member_id)


__all__ = ["AppState", "MemberSnapshot"]
