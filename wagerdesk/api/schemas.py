"""
Shared API response models.

Bodies use camelCase on the wire (`homeTeam`, `oddsAmerican`) and snake_case
in Python. Request models live next to the routes that use them.
"""
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base model: camelCase aliases, populated by either name, ORM-readable."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


class ScheduleOut(CamelModel):
    id: str
    date: datetime
    home_team: str
    away_team: str
    league: str
    sport: str
    time: Optional[str] = None
    venue: Optional[str] = None
    status: str
    home_score: Optional[int] = None
    away_score: Optional[int] = None
    season: Optional[str] = None
    round: Optional[str] = None
    notes: Optional[str] = None
    matchup: str
    created_at: datetime
    updated_at: datetime


class ScheduleStats(CamelModel):
    total_schedules: int
    todays_games: int
    leagues_with_schedules: int


class ScriptOut(CamelModel):
    id: str
    league: str
    sport: str
    file_name: str
    content: str
    description: Optional[str] = None
    version: str
    is_active: bool
    rules: Optional[str] = None
    guidelines: Optional[str] = None
    stake_logic: Optional[str] = None
    risk_management: Optional[str] = None
    last_used: Optional[datetime] = None
    times_used: int
    success_rate: Optional[float] = None
    avg_roi: Optional[float] = None
    created_at: datetime
    updated_at: datetime


class ScriptStats(CamelModel):
    total_scripts: int
    active_scripts: int
    leagues_covered: int
    avg_success_rate: float


class PickOut(CamelModel):
    id: str
    entry_id: str
    match_id: Optional[str] = None
    date: datetime
    sport: str
    league: str
    event: str
    bet_type: str
    selection: str
    line: Optional[str] = None
    odds_american: str
    odds_decimal: Optional[float] = None
    stake: float
    potential_win: Optional[float] = None
    result: str
    actual_result: Optional[str] = None
    profit_loss: Optional[float] = None
    running_bankroll: Optional[float] = None
    bankroll_change: Optional[float] = None
    roi: Optional[float] = None
    cis_generated: Optional[str] = None
    script_summary: Optional[str] = None
    justification: Optional[str] = None
    confidence: Optional[int] = None
    tags: Optional[str] = None
    notes: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class PickStats(CamelModel):
    current: float
    total_wagered: float
    total_won: float
    total_loss: float
    net_profit: float
    roi: float
    win_rate: float
    total_picks: int
    settled_picks: int
    pending_picks: int


class BankrollHistoryOut(CamelModel):
    id: str
    date: datetime
    amount: float
    change: Optional[float] = None
    change_type: str
    description: Optional[str] = None
    related_pick_id: Optional[str] = None


class InjuryCheckOut(CamelModel):
    detected: bool
    keywords: List[str]
    confidence: int
    suggestions: List[str]


class SectionOut(CamelModel):
    title: str
    content: str


class RecommendationOut(CamelModel):
    matchup: str
    bet_type: str
    selection: str
    line: Optional[str] = None
    odds_american: str
    odds_decimal: float
    stake: float
    script_summary: str
    justification: str
    confidence: int
    potential_win: float


class MessageResponse(CamelModel):
    success: bool = True
    message: Optional[str] = None
