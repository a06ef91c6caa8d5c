"""Family Points package: a household chore and reward points tracker."""

from .cache import LocalCache, MemoryCache, SQLiteCache
from .catalog import BONUS_ACTIVITIES, DAILY_RULES, SCHOOL_EVENTS
from .config import Settings
from .exceptions import (
    FamilyPointsError,
    MemberNotFoundError,
    NoActionToUndoError,
    QueryFailureError,
    StoreUnavailableError,
)
from .i18n import Translator
from .ledger import LedgerEngine
from .models import (
    DailyAwardAction,
    DailyProgress,
    LastAction,
    Member,
    OfflineTransaction,
    ProgressState,
    RuleBrokenAction,
    Transaction,
    TransactionAction,
    TransactionType,
)
from .offline import OfflineQueue, ReplayResult
from .ops import StructuredLogger
from .progress import DailyProgressMachine
from .rewards import RewardProgress
from .service import FamilyPoints
from .state import AppState, MemberSnapshot
from .store import SQLStore, Store
from .undo import UndoController

__all__ = [
    "AppState",
    "BONUS_ACTIVITIES",
    "DAILY_RULES",
    "DailyAwardAction",
    "DailyProgress",
    "DailyProgressMachine",
    "FamilyPoints",
    "FamilyPointsError",
    "LastAction",
    "LedgerEngine",
    "LocalCache",
    "Member",
    "MemberNotFoundError",
    "MemberSnapshot",
    "MemoryCache",
    "NoActionToUndoError",
    "OfflineQueue",
    "OfflineTransaction",
    "ProgressState",
    "QueryFailureError",
    "ReplayResult",
    "RewardProgress",
    "RuleBrokenAction",
    "SCHOOL_EVENTS",
    "SQLStore",
    "SQLiteCache",
    "Settings",
    "Store",
    "StoreUnavailableError",
    "StructuredLogger",
    "Transaction",
    "TransactionAction",
    "TransactionType",
    "Translator",
    "UndoController",
]
