"""Configuration values and scoring constants for Family Points."""
from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional, Tuple

from dotenv import load_dotenv

load_dotenv()

DAILY_AWARD_POINTS = 15
DAILY_AWARD_REASON = "Daily routine completed"
RULE_PENALTY_POINTS = 1
WEEKLY_TARGET_POINTS = 75
POINTS_PER_CHF = 15
MAX_WEEKLY_CHF = 5
STREAK_LOOKBACK_DAYS = 30
RECENT_TRANSACTION_LIMIT = 15

SUPPORTED_LANGUAGES: Tuple[str, ...] = ("en", "fr", "it")
DEFAULT_LANGUAGE = "en"

MEMBERS_CACHE_KEY = "familyPointsMembers"
SNAPSHOT_CACHE_KEY = "familyPointsData"
OFFLINE_QUEUE_CACHE_KEY = "familyPointsOfflineQueue"
LANGUAGE_CACHE_KEY = "familyPointsLanguage"


@dataclass(frozen=True)
class Settings:
    """Runtime settings read from the environment (``.env`` files included)."""

    database_url: str = "sqlite:///familypoints.db"
    cache_path: str = "familypoints-cache.db"
    log_path: Optional[str] = None
    language: str = DEFAULT_LANGUAGE

    @classmethod
    def from_env(cls) -> "Settings":
        language = os.environ.get("FAMILYPOINTS_LANGUAGE", DEFAULT_LANGUAGE)
        if language not in SUPPORTED_LANGUAGES:
            language = DEFAULT_LANGUAGE
        return cls(
            database_url=os.environ.get("FAMILYPOINTS_DATABASE_URL", cls.database_url),
            cache_path=os.environ.get("FAMILYPOINTS_CACHE_PATH", cls.cache_path),
            log_path=os.environ.get("FAMILYPOINTS_LOG_PATH") or None,
            language=language,
        )


__all__ = [
    "DAILY_AWARD_POINTS",
    "DAILY_AWARD_REASON",
    "RULE_PENALTY_POINTS",
    "WEEKLY_TARGET_POINTS",
    "POINTS_PER_CHF",
    "MAX_WEEKLY_CHF",
    "STREAK_LOOKBACK_DAYS",
    "RECENT_TRANSACTION_LIMIT",
    "SUPPORTED_LANGUAGES",
    "DEFAULT_LANGUAGE",
    "MEMBERS_CACHE_KEY",
    "SNAPSHOT_CACHE_KEY",
    "OFFLINE_QUEUE_CACHE_KEY",
    "LANGUAGE_CACHE_KEY",
    "Settings",
]
