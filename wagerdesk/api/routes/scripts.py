"""
Betting script routes: CRUD plus text-file upload.
"""
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile
from sqlalchemy.orm import Session

from wagerdesk.api.schemas import CamelModel, MessageResponse, ScriptOut, ScriptStats
from wagerdesk.core.auth import Principal, get_principal
from wagerdesk.core.database import get_db
from wagerdesk.core.errors import ValidationFailed
from wagerdesk.services.script_service import ScriptService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/scripts", tags=["scripts"])


# Request/Response models
class ScriptCreate(CamelModel):
    league: Optional[str] = None
    content: Optional[str] = None
    sport: Optional[str] = None
    description: Optional[str] = None
    file_name: Optional[str] = None


class ScriptUpdate(CamelModel):
    """Patch: only keys present in the body are applied. Version is bumped unless given."""
    league: Optional[str] = None
    sport: Optional[str] = None
    content: Optional[str] = None
    description: Optional[str] = None
    file_name: Optional[str] = None
    version: Optional[str] = None
    is_active: Optional[bool] = None
    rules: Optional[str] = None
    guidelines: Optional[str] = None
    stake_logic: Optional[str] = None
    risk_management: Optional[str] = None


class ScriptUploadRequest(CamelModel):
    file_name: Optional[str] = None
    content: Optional[str] = None
    league: Optional[str] = None
    sport: Optional[str] = None


class ScriptResponse(CamelModel):
    script: ScriptOut


class ScriptListResponse(CamelModel):
    scripts: List[ScriptOut]
    stats: ScriptStats


class ScriptUploadResponse(CamelModel):
    success: bool
    file_name: str
    league: str
    content: str
    script: ScriptOut
    updated: bool


@router.get("", response_model=ScriptListResponse)
async def list_scripts(principal: Principal = Depends(get_principal), db: Session = Depends(get_db)):
    """Scripts, most recently updated first, with summary counts."""
    return ScriptService(db).overview(principal)


@router.post("", response_model=ScriptResponse)
async def create_script(
    body: ScriptCreate,
    principal: Principal = Depends(get_principal),
    db: Session = Depends(get_db),
):
    return {"script": ScriptService(db).create(principal, body.model_dump())}


@router.post("/upload", response_model=ScriptUploadResponse)
async def upload_script(
    body: ScriptUploadRequest,
    principal: Principal = Depends(get_principal),
    db: Session = Depends(get_db),
):
    """
    Store a script file's text. An existing script for the same league is
    updated in place (version +0.1, usage reset) and reported as `updated`.
    """
    return ScriptService(db).upload(principal, body.file_name, body.content, body.league, body.sport)


@router.post("/upload-file", response_model=ScriptUploadResponse)
async def upload_script_file(
    file: UploadFile = File(...),
    league: Optional[str] = Form(None),
    sport: Optional[str] = Form(None),
    principal: Principal = Depends(get_principal),
    db: Session = Depends(get_db),
):
    raw = await file.read()
    try:
        content = raw.decode("utf-8")
    except UnicodeDecodeError:
        raise ValidationFailed("Script file must be UTF-8 text")
    return ScriptService(db).upload(principal, file.filename, content, league, sport)


@router.get("/{script_id}", response_model=ScriptResponse)
async def get_script(
    script_id: str,
    principal: Principal = Depends(get_principal),
    db: Session = Depends(get_db),
):
    return {"script": ScriptService(db).get(principal, script_id)}


@router.put("/{script_id}", response_model=ScriptResponse)
async def update_script(
    script_id: str,
    body: ScriptUpdate,
    principal: Principal = Depends(get_principal),
    db: Session = Depends(get_db),
):
    script = ScriptService(db).update(principal, script_id, body.model_dump(exclude_unset=True))
    return {"script": script}


@router.delete("/{script_id}", response_model=MessageResponse)
async def delete_script(
    script_id: str,
    principal: Principal = Depends(get_principal),
    db: Session = Depends(get_db),
):
    ScriptService(db).delete(principal, script_id)
    return MessageResponse(message="Script deleted successfully")
