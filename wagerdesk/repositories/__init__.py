"""
Repository layer for data access.

Usage:
    from wagerdesk.repositories import PickRepository
    from wagerdesk.core.database import SessionLocal

    db = SessionLocal()
    picks = PickRepository(db).search(user_id)
    db.close()
"""

from wagerdesk.repositories.base import BaseRepository, OwnedRepository
from wagerdesk.repositories.user_repository import UserRepository, UserSessionRepository
from wagerdesk.repositories.schedule_repository import ScheduleRepository
from wagerdesk.repositories.script_repository import ScriptRepository
from wagerdesk.repositories.pick_repository import BankrollHistoryRepository, PickFilters, PickRepository
from wagerdesk.repositories.upload_repository import UploadedDataRepository

__all__ = [
    "BaseRepository",
    "OwnedRepository",
    "UserRepository",
    "UserSessionRepository",
    "ScheduleRepository",
    "ScriptRepository",
    "PickRepository",
    "PickFilters",
    "BankrollHistoryRepository",
    "UploadedDataRepository",
]
