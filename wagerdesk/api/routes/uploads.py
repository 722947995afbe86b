"""
Raw workbook payload routes (betting script, fixtures and stats sheets).
"""
import logging
from datetime import datetime
from typing import Any, List, Optional

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile
from sqlalchemy.orm import Session

from wagerdesk.api.schemas import CamelModel
from wagerdesk.core.auth import Principal, get_principal
from wagerdesk.core.database import get_db
from wagerdesk.services.upload_service import UploadService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/upload-data", tags=["uploads"])


class UploadDataRequest(CamelModel):
    file_name: Optional[str] = None
    sport: Optional[str] = None
    league: Optional[str] = None
    betting_script: Optional[List[Any]] = None
    fixtures: Optional[List[Any]] = None
    stats: Optional[List[Any]] = None


class UploadDataResponse(CamelModel):
    success: bool
    upload_id: str
    message: str


class UploadOut(CamelModel):
    id: str
    file_name: str
    sport: str
    league: str
    upload_date: datetime
    is_active: bool
    betting_script: Optional[List[Any]] = None
    fixtures: Optional[List[Any]] = None
    stats: Optional[List[Any]] = None


class UploadListResponse(CamelModel):
    uploads: List[UploadOut]


@router.post("", response_model=UploadDataResponse)
async def upload_data(
    body: UploadDataRequest,
    principal: Principal = Depends(get_principal),
    db: Session = Depends(get_db),
):
    """Replace the active payload for (sport, league)."""
    upload = UploadService(db).store(
        principal,
        body.file_name,
        body.sport,
        body.league,
        body.betting_script,
        body.fixtures,
        body.stats,
    )
    return UploadDataResponse(success=True, upload_id=upload.id, message="Data uploaded successfully")


@router.post("/file", response_model=UploadDataResponse)
async def upload_workbook(
    file: UploadFile = File(...),
    sport: str = Form(...),
    league: str = Form(...),
    principal: Principal = Depends(get_principal),
    db: Session = Depends(get_db),
):
    """Store a three-sheet Excel workbook (script, fixtures/results, stats)."""
    content = await file.read()
    upload = UploadService(db).store_workbook(principal, file.filename or "", content, sport, league)
    return UploadDataResponse(success=True, upload_id=upload.id, message="Data uploaded successfully")


@router.get("", response_model=UploadListResponse)
async def list_uploads(
    sport: Optional[str] = Query(None),
    league: Optional[str] = Query(None),
    principal: Principal = Depends(get_principal),
    db: Session = Depends(get_db),
):
    """Active payloads only, JSON sheets decoded."""
    return {"uploads": UploadService(db).list_active(principal, sport, league)}
