"""
Storage of raw three-sheet workbook payloads (betting script, fixtures, stats).
"""
import json
import logging
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from wagerdesk.core.auth import Principal
from wagerdesk.core.errors import ValidationFailed
from wagerdesk.models import UploadedData
from wagerdesk.repositories import UploadedDataRepository
from wagerdesk.utils.spreadsheet import read_workbook_sheets

logger = logging.getLogger(__name__)


def _decode(blob: Optional[str]) -> Any:
    return json.loads(blob) if blob else None


class UploadService:
    """Keeps one active payload per (user, sport, league)."""

    def __init__(self, db: Session):
        self.db = db
        self.uploads = UploadedDataRepository(db)

    def store(
        self,
        principal: Principal,
        file_name: Optional[str],
        sport: Optional[str],
        league: Optional[str],
        betting_script: Optional[List[Any]] = None,
        fixtures: Optional[List[Any]] = None,
        stats: Optional[List[Any]] = None,
    ) -> UploadedData:
        """
        Deactivate the scope's current payload and store the new one.

        Raises:
            ValidationFailed: file name, sport or league missing
        """
        if not file_name or not sport or not league:
            raise ValidationFailed("Missing required fields: fileName, sport, league")

        deactivated = self.uploads.deactivate_scope(principal.user_id, sport, league)
        upload = self.uploads.create(
            user_id=principal.user_id,
            file_name=file_name,
            sport=sport,
            league=league,
            betting_script=json.dumps(betting_script or [], default=str),
            fixtures=json.dumps(fixtures or [], default=str),
            stats=json.dumps(stats or [], default=str),
            is_active=True,
        )
        self.uploads.save()
        self.uploads.refresh(upload)
        logger.info(
            f"Stored upload {upload.id} for {sport}/{league}",
            extra={"deactivated": deactivated},
        )
        return upload

    def store_workbook(
        self, principal: Principal, file_name: str, content: bytes, sport: str, league: str
    ) -> UploadedData:
        """
        Store an Excel workbook whose first three sheets are script, fixtures and stats.

        Raises:
            ValidationFailed: not a readable workbook with three sheets
        """
        try:
            script_rows, fixture_rows, stat_rows = read_workbook_sheets(content, file_name)
        except ValueError as e:
            logger.warning(f"Could not read workbook {file_name}: {e}")
            raise ValidationFailed(
                "Excel file must contain 3 sheets: Betting Script, Fixtures/Results, and Stats"
            )
        return self.store(principal, file_name, sport, league, script_rows, fixture_rows, stat_rows)

    def list_active(
        self, principal: Principal, sport: Optional[str] = None, league: Optional[str] = None
    ) -> List[Dict[str, Any]]:
        """Active payloads with their JSON blobs decoded."""
        return [
            {
                "id": upload.id,
                "file_name": upload.file_name,
                "sport": upload.sport,
                "league": upload.league,
                "upload_date": upload.upload_date,
                "is_active": upload.is_active,
                "betting_script": _decode(upload.betting_script),
                "fixtures": _decode(upload.fixtures),
                "stats": _decode(upload.stats),
            }
            for upload in self.uploads.find_active(principal.user_id, sport, league)
        ]

    def count_active(self, principal: Principal) -> int:
        return self.uploads.count(
            UploadedData.user_id == principal.user_id,
            UploadedData.is_active.is_(True),
        )
