"""
Uploaded workbook payload repository.
"""
from typing import List, Optional

from sqlalchemy import desc

from wagerdesk.models import UploadedData
from wagerdesk.repositories.base import OwnedRepository


class UploadedDataRepository(OwnedRepository[UploadedData]):
    """At most one active row per (user, sport, league)."""

    RESOURCE_NAME = "Upload"

    def __init__(self, db):
        super().__init__(UploadedData, db)

    def deactivate_scope(self, user_id: str, sport: str, league: str) -> int:
        """Mark the scope's active rows inactive; returns how many were changed."""
        return (
            self.for_user(user_id)
            .filter(
                UploadedData.sport == sport,
                UploadedData.league == league,
                UploadedData.is_active.is_(True),
            )
            .update({UploadedData.is_active: False}, synchronize_session=False)
        )

    def find_active(
        self, user_id: str, sport: Optional[str] = None, league: Optional[str] = None
    ) -> List[UploadedData]:
        query = self.for_user(user_id).filter(UploadedData.is_active.is_(True))
        if sport:
            query = query.filter(UploadedData.sport == sport)
        if league:
            query = query.filter(UploadedData.league == league)
        return query.order_by(desc(UploadedData.upload_date)).all()
