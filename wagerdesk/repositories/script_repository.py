"""
Betting script repository.

Usage:
    repo = ScriptRepository(db)
    script = repo.find_by_league(user_id, "NBA")
"""
from typing import List, Optional

from sqlalchemy import desc

from wagerdesk.models import BettingScript
from wagerdesk.repositories.base import OwnedRepository


class ScriptRepository(OwnedRepository[BettingScript]):
    """Repository for per-league betting scripts."""

    RESOURCE_NAME = "Script"

    def __init__(self, db):
        super().__init__(BettingScript, db)

    def find_by_league(self, user_id: str, league: str) -> Optional[BettingScript]:
        return self.where_first(BettingScript.user_id == user_id, BettingScript.league == league)

    def list_recently_updated(self, user_id: str) -> List[BettingScript]:
        return self.for_user(user_id).order_by(desc(BettingScript.updated_at)).all()
