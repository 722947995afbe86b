"""
Dashboard routes: one summary payload for every tab, and workflow readiness.
"""
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from wagerdesk.api.schemas import CamelModel, InjuryCheckOut, PickStats, ScheduleOut, ScheduleStats, ScriptStats
from wagerdesk.core.auth import Principal, get_principal
from wagerdesk.core.database import get_db
from wagerdesk.services.dashboard_service import DashboardService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/dashboard", tags=["dashboard"])


class DashboardSummary(CamelModel):
    bankroll: float
    schedule_stats: ScheduleStats
    todays_matches: List[ScheduleOut]
    script_stats: ScriptStats
    pick_stats: PickStats
    active_uploads: int
    tabs: List[str]


class WorkflowRequest(CamelModel):
    schedule_id: Optional[str] = None
    script_id: Optional[str] = None
    preview: Optional[str] = None
    odds: Optional[str] = None
    stats: Optional[str] = None
    cis: Optional[str] = None


class WorkflowStatus(CamelModel):
    selected_schedule_id: Optional[str] = None
    selected_script_id: Optional[str] = None
    can_generate_cis: bool
    can_execute_script: bool
    has_optimal_data: bool
    missing: List[str]
    script_available: bool
    injury_validation: Optional[InjuryCheckOut] = None
    warnings: List[str]


@router.get("/summary", response_model=DashboardSummary)
async def dashboard_summary(principal: Principal = Depends(get_principal), db: Session = Depends(get_db)):
    return DashboardService(db).summary(principal)


@router.post("/workflow", response_model=WorkflowStatus)
async def dashboard_workflow(
    body: WorkflowRequest,
    principal: Principal = Depends(get_principal),
    db: Session = Depends(get_db),
):
    """
    Readiness of the match -> preview -> CIS -> script flow.

    Without `scriptId` the script for the selected match's league is used.
    """
    return DashboardService(db).workflow(principal, **body.model_dump())
