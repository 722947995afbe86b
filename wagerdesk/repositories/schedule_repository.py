"""
Schedule repository.

Usage:
    repo = ScheduleRepository(db)
    todays = repo.find_for_day(user_id)
"""
from datetime import datetime
from typing import List, Optional

from sqlalchemy import desc

from wagerdesk.models import LeagueSchedule
from wagerdesk.repositories.base import OwnedRepository
from wagerdesk.utils.timezone import local_day_bounds


class ScheduleRepository(OwnedRepository[LeagueSchedule]):
    """Repository for league fixtures."""

    RESOURCE_NAME = "Schedule"

    def __init__(self, db):
        super().__init__(LeagueSchedule, db)

    def list_newest_first(self, user_id: str) -> List[LeagueSchedule]:
        return self.for_user(user_id).order_by(desc(LeagueSchedule.date)).all()

    def find_for_day(self, user_id: str, now: Optional[datetime] = None) -> List[LeagueSchedule]:
        """Fixtures on the local calendar day of `now`, ordered by kick-off time."""
        start, end = local_day_bounds(now)
        return (
            self.for_user(user_id)
            .filter(LeagueSchedule.date >= start, LeagueSchedule.date < end)
            .order_by(LeagueSchedule.time, LeagueSchedule.date)
            .all()
        )

