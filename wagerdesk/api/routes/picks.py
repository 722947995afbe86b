"""
Pick ledger routes: log, list with statistics, export, settle and delete.
"""
import logging
from typing import List, Optional, Union

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.orm import Session

from wagerdesk.api.schemas import BankrollHistoryOut, CamelModel, MessageResponse, PickOut, PickStats
from wagerdesk.core.auth import Principal, get_principal
from wagerdesk.core.database import get_db
from wagerdesk.core.errors import ValidationFailed
from wagerdesk.repositories import PickFilters
from wagerdesk.services.pick_ledger_service import PickLedgerService
from wagerdesk.utils.timezone import parse_filter_date

logger = logging.getLogger(__name__)

router = APIRouter(tags=["picks"])

Number = Union[float, str]


# Request/Response models
class LogPickRequest(CamelModel):
    match_id: Optional[str] = None
    sport: Optional[str] = None
    league: Optional[str] = None
    event: Optional[str] = None
    bet_type: Optional[str] = None
    selection: Optional[str] = None
    line: Optional[str] = None
    odds_american: Optional[str] = None
    odds_decimal: Optional[Number] = None
    stake: Optional[Number] = None
    potential_win: Optional[Number] = None
    cis_generated: Optional[str] = None
    script_summary: Optional[str] = None
    justification: Optional[str] = None
    confidence: Optional[int] = None
    tags: Optional[str] = None
    notes: Optional[str] = None


class LoggedPick(CamelModel):
    id: str
    entry_id: str
    event: str
    bet_type: str
    selection: str
    stake: float


class LogPickResponse(CamelModel):
    success: bool
    pick: LoggedPick


class SettlePickRequest(CamelModel):
    """Patch: only keys present in the body are applied."""
    result: Optional[str] = None
    actual_result: Optional[str] = None
    profit_loss: Optional[float] = None
    running_bankroll: Optional[float] = None
    bankroll_change: Optional[float] = None
    roi: Optional[float] = None
    notes: Optional[str] = None


class PickResponse(CamelModel):
    pick: PickOut


class PickListResponse(CamelModel):
    picks: List[PickOut]
    stats: PickStats


class BankrollHistoryResponse(CamelModel):
    history: List[BankrollHistoryOut]
    current: float


def pick_filters(
    sport: Optional[str] = Query(None),
    league: Optional[str] = Query(None),
    bet_type: Optional[str] = Query(None, alias="betType"),
    result: Optional[str] = Query(None),
    date_from: Optional[str] = Query(None, alias="dateFrom"),
    date_to: Optional[str] = Query(None, alias="dateTo"),
) -> PickFilters:
    """Query-string filters shared by the list and export endpoints."""
    try:
        return PickFilters(
            sport=sport or None,
            league=league or None,
            bet_type=bet_type or None,
            result=result or None,
            date_from=parse_filter_date(date_from),
            date_to=parse_filter_date(date_to, end_of_day=True),
        )
    except ValueError:
        raise ValidationFailed("Invalid date filter")


@router.post("/log-pick", response_model=LogPickResponse)
async def log_pick(
    body: LogPickRequest,
    principal: Principal = Depends(get_principal),
    db: Session = Depends(get_db),
):
    """Record a Pending pick and a Bet_Placed bankroll history row."""
    pick = PickLedgerService(db).log_pick(principal, body.model_dump())
    return {"success": True, "pick": pick}


@router.get("/picks", response_model=PickListResponse)
async def list_picks(
    filters: PickFilters = Depends(pick_filters),
    principal: Principal = Depends(get_principal),
    db: Session = Depends(get_db),
):
    """Filtered picks, newest first, with statistics over the filtered set."""
    return PickLedgerService(db).list_with_stats(principal, filters)


@router.get("/picks/export")
async def export_picks(
    filters: PickFilters = Depends(pick_filters),
    principal: Principal = Depends(get_principal),
    db: Session = Depends(get_db),
):
    csv_text = PickLedgerService(db).export_csv(principal, filters)
    return Response(
        content=csv_text,
        media_type="text/csv",
        headers={"Content-Disposition": 'attachment; filename="picks.csv"'},
    )


@router.get("/picks/{pick_id}", response_model=PickResponse)
async def get_pick(
    pick_id: str,
    principal: Principal = Depends(get_principal),
    db: Session = Depends(get_db),
):
    return {"pick": PickLedgerService(db).get(principal, pick_id)}


@router.put("/picks/{pick_id}", response_model=PickResponse)
async def settle_pick(
    pick_id: str,
    body: SettlePickRequest,
    principal: Principal = Depends(get_principal),
    db: Session = Depends(get_db),
):
    """
    Settle or annotate a pick.

    `runningBankroll` becomes the user's current bankroll. A changed,
    non-Pending result appends a history row.
    """
    pick = PickLedgerService(db).settle(principal, pick_id, body.model_dump(exclude_unset=True))
    return {"pick": pick}


@router.delete("/picks/{pick_id}", response_model=MessageResponse)
async def delete_pick(
    pick_id: str,
    principal: Principal = Depends(get_principal),
    db: Session = Depends(get_db),
):
    PickLedgerService(db).delete(principal, pick_id)
    return MessageResponse(message="Pick deleted successfully")


@router.get("/bankroll/history", response_model=BankrollHistoryResponse)
async def bankroll_history(
    limit: Optional[int] = Query(None, ge=1),
    principal: Principal = Depends(get_principal),
    db: Session = Depends(get_db),
):
    ledger = PickLedgerService(db)
    return {
        "history": ledger.bankroll_history(principal, limit),
        "current": ledger.current_bankroll(principal),
    }
