"""
Pick and bankroll history repositories.

Usage:
    repo = PickRepository(db)
    picks = repo.search(user_id, PickFilters(sport="NBA"))
"""
from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional

from sqlalchemy import desc

from wagerdesk.models import BankrollHistory, Pick
from wagerdesk.repositories.base import BaseRepository, OwnedRepository


@dataclass
class PickFilters:
    """Optional, AND-combined pick filters. Date bounds are inclusive."""
    sport: Optional[str] = None
    league: Optional[str] = None
    bet_type: Optional[str] = None
    result: Optional[str] = None
    date_from: Optional[datetime] = None
    date_to: Optional[datetime] = None


class PickRepository(OwnedRepository[Pick]):
    """Repository for logged picks."""

    RESOURCE_NAME = "Pick"

    def __init__(self, db):
        super().__init__(Pick, db)

    def search(self, user_id: str, filters: Optional[PickFilters] = None) -> List[Pick]:
        """Filtered picks, newest first."""
        filters = filters or PickFilters()
        query = self.for_user(user_id)

        if filters.sport:
            query = query.filter(Pick.sport == filters.sport)
        if filters.league:
            query = query.filter(Pick.league == filters.league)
        if filters.bet_type:
            query = query.filter(Pick.bet_type == filters.bet_type)
        if filters.result:
            query = query.filter(Pick.result == filters.result)
        if filters.date_from:
            query = query.filter(Pick.date >= filters.date_from)
        if filters.date_to:
            query = query.filter(Pick.date <= filters.date_to)

        return query.order_by(desc(Pick.date), desc(Pick.created_at)).all()


class BankrollHistoryRepository(BaseRepository[BankrollHistory]):
    """Append-only bankroll audit trail."""

    def __init__(self, db):
        super().__init__(BankrollHistory, db)

    def append(
        self,
        user_id: str,
        amount: float,
        change: float,
        change_type: str,
        description: str,
        related_pick_id: Optional[str] = None,
    ) -> BankrollHistory:
        return self.create(
            user_id=user_id,
            amount=amount,
            change=change,
            change_type=change_type,
            description=description,
            related_pick_id=related_pick_id,
        )

    def recent(self, user_id: str, limit: Optional[int] = None) -> List[BankrollHistory]:
        query = (
            self.query()
            .filter(BankrollHistory.user_id == user_id)
            .order_by(desc(BankrollHistory.date), desc(BankrollHistory.created_at))
        )
        if limit:
            query = query.limit(limit)
        return query.all()
