"""
Database models.

Usage:
    from wagerdesk.models import Pick, BettingScript
"""
from wagerdesk.models.models import (
    Base,
    User,
    UserSession,
    LeagueSchedule,
    BettingScript,
    Pick,
    BankrollHistory,
    UploadedData,
    PICK_RESULTS,
    SETTLED_RESULTS,
    SCHEDULE_STATUSES,
    BANKROLL_CHANGE_TYPES,
)

__all__ = [
    "Base",
    "User",
    "UserSession",
    "LeagueSchedule",
    "BettingScript",
    "Pick",
    "BankrollHistory",
    "UploadedData",
    "PICK_RESULTS",
    "SETTLED_RESULTS",
    "SCHEDULE_STATUSES",
    "BANKROLL_CHANGE_TYPES",
]
