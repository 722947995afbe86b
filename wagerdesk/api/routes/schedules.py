"""
League schedule routes: CRUD plus spreadsheet upload.
"""
import logging
from datetime import datetime
from typing import Any, Dict, List, Optional, Union

from fastapi import APIRouter, Depends, File, UploadFile
from pydantic import Field
from sqlalchemy.orm import Session

from wagerdesk.api.schemas import CamelModel, MessageResponse, ScheduleOut, ScheduleStats
from wagerdesk.core.auth import Principal, get_principal
from wagerdesk.core.database import get_db
from wagerdesk.core.errors import ValidationFailed
from wagerdesk.services.schedule_service import ScheduleService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/schedules", tags=["schedules"])

DateInput = Union[datetime, str, float, int]


# Request/Response models
class ScheduleCreate(CamelModel):
    home_team: Optional[str] = None
    away_team: Optional[str] = None
    league: Optional[str] = None
    date: Optional[DateInput] = None
    sport: Optional[str] = None
    time: Optional[str] = None
    venue: Optional[str] = None


class ScheduleUpdate(CamelModel):
    """Patch: only keys present in the body are applied."""
    home_team: Optional[str] = None
    away_team: Optional[str] = None
    league: Optional[str] = None
    sport: Optional[str] = None
    date: Optional[DateInput] = None
    time: Optional[str] = None
    venue: Optional[str] = None
    status: Optional[str] = None
    home_score: Optional[int] = None
    away_score: Optional[int] = None
    season: Optional[str] = None
    round: Optional[str] = None
    notes: Optional[str] = None


class ScheduleUploadRequest(CamelModel):
    file_name: Optional[str] = None
    # Raw spreadsheet rows; header names vary, see utils.spreadsheet
    schedules: Optional[List[Dict[str, Any]]] = None


class ScheduleResponse(CamelModel):
    schedule: ScheduleOut


class ScheduleListResponse(CamelModel):
    schedules: List[ScheduleOut]
    todays_matches: List[ScheduleOut]
    stats: ScheduleStats


class TodaysMatchesResponse(CamelModel):
    todays_matches: List[ScheduleOut]
    count: int


class ScheduleUploadResponse(CamelModel):
    success: bool
    file_name: Optional[str] = None
    total_rows: int
    successful_rows: int
    todays_matches: int
    errors: Optional[List[str]] = Field(default=None)


@router.get("", response_model=ScheduleListResponse)
async def list_schedules(principal: Principal = Depends(get_principal), db: Session = Depends(get_db)):
    """All fixtures (newest first) with today's matches and counts."""
    return ScheduleService(db).overview(principal)


@router.get("/today", response_model=TodaysMatchesResponse)
async def todays_matches(principal: Principal = Depends(get_principal), db: Session = Depends(get_db)):
    matches = ScheduleService(db).todays_matches(principal)
    return {"todays_matches": matches, "count": len(matches)}


@router.post("", response_model=ScheduleResponse)
async def create_schedule(
    body: ScheduleCreate,
    principal: Principal = Depends(get_principal),
    db: Session = Depends(get_db),
):
    schedule = ScheduleService(db).create(principal, body.model_dump())
    return {"schedule": schedule}


@router.post("/upload", response_model=ScheduleUploadResponse, response_model_exclude_none=True)
async def upload_schedules(
    body: ScheduleUploadRequest,
    principal: Principal = Depends(get_principal),
    db: Session = Depends(get_db),
):
    """
    Ingest spreadsheet rows parsed client-side.

    Rows missing date, home, away or league are skipped and reported as
    "Row N: Missing required fields"; the rest of the batch still runs.
    """
    if body.schedules is None:
        raise ValidationFailed("Invalid schedule data")
    return ScheduleService(db).upload_rows(principal, body.file_name, body.schedules)


@router.post("/upload-file", response_model=ScheduleUploadResponse, response_model_exclude_none=True)
async def upload_schedule_file(
    file: UploadFile = File(...),
    principal: Principal = Depends(get_principal),
    db: Session = Depends(get_db),
):
    """Ingest the first sheet of an .xlsx or .csv file."""
    content = await file.read()
    return ScheduleService(db).upload_file(principal, file.filename or "", content)


@router.get("/{schedule_id}", response_model=ScheduleResponse)
async def get_schedule(
    schedule_id: str,
    principal: Principal = Depends(get_principal),
    db: Session = Depends(get_db),
):
    return {"schedule": ScheduleService(db).get(principal, schedule_id)}


@router.put("/{schedule_id}", response_model=ScheduleResponse)
async def update_schedule(
    schedule_id: str,
    body: ScheduleUpdate,
    principal: Principal = Depends(get_principal),
    db: Session = Depends(get_db),
):
    schedule = ScheduleService(db).update(principal, schedule_id, body.model_dump(exclude_unset=True))
    return {"schedule": schedule}


@router.delete("/{schedule_id}", response_model=MessageResponse)
async def delete_schedule(
    schedule_id: str,
    principal: Principal = Depends(get_principal),
    db: Session = Depends(get_db),
):
    ScheduleService(db).delete(principal, schedule_id)
    return MessageResponse(message="Schedule deleted successfully")
