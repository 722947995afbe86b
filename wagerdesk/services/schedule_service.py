"""
Schedule management and spreadsheet ingestion.

Uploads are processed row by row and each accepted row is committed on its
own, so a bad row (or a crash part-way through) never discards the rows
already stored.
"""
import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from wagerdesk.core.auth import Principal
from wagerdesk.core.errors import ValidationFailed
from wagerdesk.core.metrics import upload_rows_total
from wagerdesk.models import LeagueSchedule, SCHEDULE_STATUSES
from wagerdesk.repositories import ScheduleRepository
from wagerdesk.utils.spreadsheet import normalize_schedule_row, read_spreadsheet
from wagerdesk.utils.timezone import is_in_local_day, parse_match_date

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("date", "home_team", "away_team", "league")
# Fields that may not be cleared by an explicit null in a patch
NON_NULLABLE_FIELDS = {"date", "home_team", "away_team", "league", "sport", "status"}


def _text(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


class ScheduleService:
    """CRUD and upload for a user's league fixtures."""

    def __init__(self, db: Session):
        self.db = db
        self.schedules = ScheduleRepository(db)

    # ========================================================================
    # Queries
    # ========================================================================

    def overview(self, principal: Principal, now: Optional[datetime] = None) -> Dict[str, Any]:
        """All fixtures (newest first), today's fixtures and summary counts."""
        schedules = self.schedules.list_newest_first(principal.user_id)
        todays = self.schedules.find_for_day(principal.user_id, now)
        return {
            "schedules": schedules,
            "todays_matches": todays,
            "stats": {
                "total_schedules": len(schedules),
                "todays_games": len(todays),
                "leagues_with_schedules": len({s.league for s in schedules}),
            },
        }

    def todays_matches(self, principal: Principal, now: Optional[datetime] = None) -> List[LeagueSchedule]:
        return self.schedules.find_for_day(principal.user_id, now)

    def get(self, principal: Principal, schedule_id: str) -> LeagueSchedule:
        return self.schedules.get_owned(schedule_id, principal.user_id)

    # ========================================================================
    # Mutations
    # ========================================================================

    def create(self, principal: Principal, data: Dict[str, Any]) -> LeagueSchedule:
        """
        Create one fixture.

        Raises:
            ValidationFailed: a required field is missing or the date is unreadable
        """
        home_team = _text(data.get("home_team"))
        away_team = _text(data.get("away_team"))
        league = _text(data.get("league"))
        raw_date = data.get("date")
        if not (home_team and away_team and league and raw_date):
            raise ValidationFailed()

        try:
            match_date = parse_match_date(raw_date)
        except ValueError:
            raise ValidationFailed("Invalid date")

        schedule = self.schedules.create(
            user_id=principal.user_id,
            date=match_date,
            home_team=home_team,
            away_team=away_team,
            league=league,
            sport=_text(data.get("sport")) or "Unknown",
            time=_text(data.get("time")),
            venue=_text(data.get("venue")),
            status="Scheduled",
        )
        self.schedules.save()
        self.schedules.refresh(schedule)
        logger.info(f"Created schedule {schedule.id}: {schedule.matchup}")
        return schedule

    def update(self, principal: Principal, schedule_id: str, changes: Dict[str, Any]) -> LeagueSchedule:
        """
        Apply a patch; only keys present in `changes` are touched.

        Raises:
            NotFound / Forbidden: ownership check
            ValidationFailed: bad date or status
        """
        schedule = self.schedules.get_owned(schedule_id, principal.user_id)

        patch: Dict[str, Any] = {}
        for key, value in changes.items():
            if isinstance(value, str):
                value = value.strip()
            if value is None and key in NON_NULLABLE_FIELDS:
                continue
            patch[key] = value

        if "date" in patch:
            try:
                patch["date"] = parse_match_date(patch["date"])
            except ValueError:
                raise ValidationFailed("Invalid date")
        if "status" in patch and patch["status"] not in SCHEDULE_STATUSES:
            raise ValidationFailed(f"Invalid status: {patch['status']}")

        self.schedules.apply(schedule, patch)
        self.schedules.save()
        self.schedules.refresh(schedule)
        return schedule

    def delete(self, principal: Principal, schedule_id: str) -> None:
        schedule = self.schedules.get_owned(schedule_id, principal.user_id)
        self.schedules.delete_instance(schedule)
        self.schedules.save()
        logger.info(f"Deleted schedule {schedule_id}")

    # ========================================================================
    # Upload
    # ========================================================================

    def upload_rows(
        self,
        principal: Principal,
        file_name: Optional[str],
        rows: List[Dict[str, Any]],
        now: Optional[datetime] = None,
    ) -> Dict[str, Any]:
        """
        Ingest spreadsheet rows, skipping invalid ones.

        Returns:
            Summary with total/successful row counts, how many stored rows fall
            on today's local date and, when any row was rejected, the
            "Row N: ..." error list (1-based).
        """
        successful_rows = 0
        todays_matches = 0
        errors: List[str] = []

        for index, raw_row in enumerate(rows, start=1):
            row = normalize_schedule_row(raw_row if isinstance(raw_row, dict) else {})
            if any(row[field] is None for field in REQUIRED_FIELDS):
                errors.append(f"Row {index}: Missing required fields")
                upload_rows_total.labels(outcome="missing_fields").inc()
                continue

            try:
                match_date = parse_match_date(row["date"])
                self.schedules.create(
                    user_id=principal.user_id,
                    date=match_date,
                    home_team=str(row["home_team"]).strip(),
                    away_team=str(row["away_team"]).strip(),
                    league=str(row["league"]).strip(),
                    sport=_text(row["sport"]) or "Unknown",
                    time=_text(row["time"]),
                    venue=_text(row["venue"]),
                )
                self.schedules.save()
            except (ValueError, SQLAlchemyError) as e:
                self.schedules.rollback()
                logger.warning(f"Error processing row {index} of {file_name}: {e}")
                errors.append(f"Row {index}: Processing error")
                upload_rows_total.labels(outcome="error").inc()
                continue

            successful_rows += 1
            upload_rows_total.labels(outcome="accepted").inc()
            if is_in_local_day(match_date, now):
                todays_matches += 1

        logger.info(
            f"Schedule upload {file_name}: {successful_rows}/{len(rows)} rows stored",
            extra={"rejected": len(errors)},
        )
        return {
            "success": True,
            "file_name": file_name,
            "total_rows": len(rows),
            "successful_rows": successful_rows,
            "todays_matches": todays_matches,
            "errors": errors or None,
        }

    def upload_file(self, principal: Principal, file_name: str, content: bytes) -> Dict[str, Any]:
        """
        Ingest the first sheet of an .xlsx or .csv upload.

        Raises:
            ValidationFailed: unsupported or unreadable file
        """
        try:
            rows = read_spreadsheet(content, file_name)
        except ValueError as e:
            logger.warning(f"Could not read schedule file {file_name}: {e}")
            raise ValidationFailed("Invalid schedule data")
        return self.upload_rows(principal, file_name, rows)
