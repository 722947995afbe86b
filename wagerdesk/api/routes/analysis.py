"""
Analysis routes: injury heuristic, CIS generation and betting-script execution.

The two model-backed endpoints are limited to 10/minute per client.
"""
import logging
from datetime import datetime
from typing import Any, List, Optional

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from wagerdesk.api.schemas import CamelModel, InjuryCheckOut, RecommendationOut, SectionOut
from wagerdesk.core.auth import Principal, get_principal
from wagerdesk.core.database import get_db
from wagerdesk.core.rate_limit import rate_limit_ai
from wagerdesk.services.analysis.cis_sections import split_cis_sections
from wagerdesk.services.analysis.cis_service import CisService, resolve_matches
from wagerdesk.services.analysis.injury_check import InjuryCheck, check_injury_mentions
from wagerdesk.services.analysis.prompts import MatchContext, ScriptContext
from wagerdesk.services.analysis.script_executor import ScriptExecutor
from wagerdesk.services.llm.chat_client import ChatCompletionClient, get_chat_client
from wagerdesk.utils.odds import format_parsed_odds, parse_odds_text

logger = logging.getLogger(__name__)

router = APIRouter(tags=["analysis"])


# Request/Response models
class SelectedMatch(CamelModel):
    """A match as the dashboard holds it; only the matchup is required."""
    matchup: str
    league: Optional[str] = None
    sport: Optional[str] = None
    date: Optional[str] = None
    time: Optional[str] = None
    venue: Optional[str] = None
    home_form: Optional[str] = None
    away_form: Optional[str] = None
    home_injuries: Optional[str] = None
    away_injuries: Optional[str] = None
    trends: Optional[str] = None
    script_rules: Optional[List[Any]] = None
    fixture_data: Any = None
    stats_data: Any = None

    def to_context(self) -> MatchContext:
        return MatchContext(
            matchup=self.matchup,
            league=self.league or "",
            sport=self.sport or "",
            date=self.date or "",
            time=self.time,
            venue=self.venue,
            home_form=self.home_form,
            away_form=self.away_form,
            home_injuries=self.home_injuries,
            away_injuries=self.away_injuries,
            trends=self.trends,
            script_rules=self.script_rules or [],
            fixture_data=self.fixture_data,
            stats_data=self.stats_data,
        )


class InjuryContext(CamelModel):
    detected: bool = False
    keywords: List[str] = []
    confidence: int = 0
    suggestions: List[str] = []

    def to_check(self) -> InjuryCheck:
        return InjuryCheck(
            detected=self.detected,
            keywords=list(self.keywords),
            confidence=self.confidence,
            suggestions=list(self.suggestions),
        )


class BettingScriptIn(CamelModel):
    league: str
    content: str
    version: Optional[str] = None
    stake_logic: Optional[str] = None
    risk_management: Optional[str] = None
    guidelines: Optional[str] = None

    def to_context(self) -> ScriptContext:
        return ScriptContext(
            league=self.league,
            content=self.content,
            version=self.version,
            stake_logic=self.stake_logic,
            risk_management=self.risk_management,
            guidelines=self.guidelines,
        )


class PreviewData(CamelModel):
    preview: Optional[str] = None
    odds: Optional[str] = None


class InjuryCheckRequest(CamelModel):
    text: Optional[str] = None


class GenerateCisRequest(CamelModel):
    schedule_id: Optional[str] = None
    selected_match: Optional[SelectedMatch] = None
    selected_matches: List[SelectedMatch] = []
    preview_analysis: Optional[str] = None
    odds_data: Optional[str] = None
    manual_stats: Optional[str] = None
    injury_context: Optional[InjuryContext] = None


class GenerateCisResponse(CamelModel):
    success: bool
    cis: str
    sections: List[SectionOut]
    analysis_date: datetime


class SectionsRequest(CamelModel):
    cis: Optional[str] = None


class SectionsResponse(CamelModel):
    sections: List[SectionOut]


class ExecuteScriptRequest(CamelModel):
    schedule_id: Optional[str] = None
    selected_match: Optional[SelectedMatch] = None
    selected_matches: List[SelectedMatch] = []
    script_id: Optional[str] = None
    betting_script: Optional[BettingScriptIn] = None
    cis_analysis: Optional[str] = None
    bankroll: Optional[float] = None
    preview_data: Optional[PreviewData] = None
    manual_stats: Optional[str] = None
    injury_context: Optional[InjuryContext] = None


class ExecuteScriptResponse(CamelModel):
    success: bool
    recommendations: List[RecommendationOut]
    fallback: bool
    execution_date: datetime


class OddsParseRequest(CamelModel):
    text: Optional[str] = None


class OddsParseResponse(CamelModel):
    lines: List[str]
    formatted: Optional[str] = None


def _matches(db: Session, principal: Principal, body) -> List[MatchContext]:
    return resolve_matches(
        db,
        principal,
        schedule_id=body.schedule_id,
        selected_match=body.selected_match.to_context() if body.selected_match else None,
        selected_matches=[m.to_context() for m in body.selected_matches],
    )


@router.post("/injury-check", response_model=InjuryCheckOut)
async def injury_check(body: InjuryCheckRequest, principal: Principal = Depends(get_principal)):
    """Keyword scan of pasted preview text for injury mentions."""
    return check_injury_mentions(body.text).to_dict()


@router.post("/generate-cis", response_model=GenerateCisResponse)
@rate_limit_ai
async def generate_cis(
    request: Request,
    body: GenerateCisRequest,
    principal: Principal = Depends(get_principal),
    db: Session = Depends(get_db),
    client: ChatCompletionClient = Depends(get_chat_client),
):
    """
    Generate a Comprehensive Intelligence Summary.

    Needs at least one of: a match, preview text, odds text.
    """
    matches = _matches(db, principal, body)
    return await CisService(db, client).generate(
        principal,
        matches,
        preview=body.preview_analysis,
        odds=body.odds_data,
        manual_stats=body.manual_stats,
        injury=body.injury_context.to_check() if body.injury_context else None,
    )


@router.post("/cis/sections", response_model=SectionsResponse)
async def cis_sections(body: SectionsRequest, principal: Principal = Depends(get_principal)):
    return {"sections": split_cis_sections(body.cis or "")}


@router.post("/execute-betting-script", response_model=ExecuteScriptResponse)
@rate_limit_ai
async def execute_betting_script(
    request: Request,
    body: ExecuteScriptRequest,
    principal: Principal = Depends(get_principal),
    db: Session = Depends(get_db),
    client: ChatCompletionClient = Depends(get_chat_client),
):
    """
    Turn a CIS plus the league script into 1-3 recommendations.

    A stored script (`scriptId`) has its usage recorded once the model call
    succeeds. Model output that
    cannot be read as recommendations yields a single placeholder and
    `fallback: true`.
    """
    matches = _matches(db, principal, body)
    executor = ScriptExecutor(db, client)
    script = executor.resolve_script(
        principal,
        body.script_id,
        body.betting_script.to_context() if body.betting_script else None,
    )
    preview = body.preview_data or PreviewData()
    result = await executor.execute(
        principal,
        matches,
        body.cis_analysis,
        script=script,
        bankroll=body.bankroll,
        preview=preview.preview,
        odds=preview.odds,
        manual_stats=body.manual_stats,
        injury=body.injury_context.to_check() if body.injury_context else None,
    )
    result["recommendations"] = [r.to_dict() for r in result["recommendations"]]
    return result


@router.post("/odds/parse", response_model=OddsParseResponse)
async def parse_odds(body: OddsParseRequest, principal: Principal = Depends(get_principal)):
    """Annotate pasted odds text with the decimal prices found on each line."""
    lines = parse_odds_text(body.text)
    formatted = format_parsed_odds(body.text, lines) if lines else None
    return {"lines": lines, "formatted": formatted}
