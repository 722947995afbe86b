"""
Database models for the Wager Desk API.

Every row except `User` is owned by exactly one user through `user_id`.
Business dates (`LeagueSchedule.date`, `Pick.date`, `BankrollHistory.date`)
are naive server-local datetimes; audit timestamps (`created_at`,
`updated_at`) are naive UTC.
"""
import uuid
from datetime import datetime
from sqlalchemy import Column, String, Float, Integer, DateTime, ForeignKey, Boolean, Text, Index, UniqueConstraint
from sqlalchemy.orm import relationship, declarative_base

from wagerdesk.utils.timezone import utcnow

Base = declarative_base()


def _uuid() -> str:
    return str(uuid.uuid4())


PICK_RESULTS = ("Pending", "Win", "Loss", "Push", "Void")
SETTLED_RESULTS = ("Win", "Loss", "Push")
SCHEDULE_STATUSES = ("Scheduled", "InProgress", "Completed", "Postponed")
BANKROLL_CHANGE_TYPES = ("Deposit", "Withdrawal", "Bet_Placed", "Bet_Win", "Bet_Loss", "Adjustment")


class User(Base):
    """Account that owns schedules, scripts, picks and the bankroll."""
    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=_uuid)
    email = Column(String(255), unique=True, nullable=False, index=True)
    name = Column(String(255), nullable=True)
    password_hash = Column(String(255), nullable=True)
    current_bankroll = Column(Float, nullable=True, default=1000.0)
    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    sessions = relationship("UserSession", back_populates="user", cascade="all, delete-orphan")


class UserSession(Base):
    """Opaque login session; only the SHA-256 digest of the token is stored."""
    __tablename__ = "user_sessions"

    id = Column(String(36), primary_key=True, default=_uuid)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    token_hash = Column(String(64), unique=True, nullable=False, index=True)
    created_at = Column(DateTime, nullable=False, default=utcnow)
    expires_at = Column(DateTime, nullable=False)
    revoked_at = Column(DateTime, nullable=True)

    user = relationship("User", back_populates="sessions")


class LeagueSchedule(Base):
    """A single fixture on a user's schedule."""
    __tablename__ = "league_schedules"

    id = Column(String(36), primary_key=True, default=_uuid)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    date = Column(DateTime, nullable=False, index=True)
    home_team = Column(String(255), nullable=False)
    away_team = Column(String(255), nullable=False)
    league = Column(String(100), nullable=False, index=True)
    sport = Column(String(100), nullable=False, default="Unknown")
    time = Column(String(20), nullable=True)  # free text, e.g. "19:30"
    venue = Column(String(255), nullable=True)
    status = Column(String(20), nullable=False, default="Scheduled")
    home_score = Column(Integer, nullable=True)
    away_score = Column(Integer, nullable=True)
    season = Column(String(20), nullable=True)
    round = Column(String(50), nullable=True)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    __table_args__ = (
        Index("ix_league_schedules_user_date", "user_id", "date"),
    )

    @property
    def matchup(self) -> str:
        return f"{self.home_team} vs {self.away_team}"


class BettingScript(Base):
    """League-specific staking and selection rules, one per (user, league)."""
    __tablename__ = "betting_scripts"

    id = Column(String(36), primary_key=True, default=_uuid)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    league = Column(String(100), nullable=False)
    sport = Column(String(100), nullable=False, default="Unknown")
    file_name = Column(String(255), nullable=False)
    content = Column(Text, nullable=False)
    description = Column(Text, nullable=True)
    version = Column(String(32), nullable=False, default="1.0")
    is_active = Column(Boolean, nullable=False, default=True)
    rules = Column(Text, nullable=True)
    guidelines = Column(Text, nullable=True)
    stake_logic = Column(Text, nullable=True)
    risk_management = Column(Text, nullable=True)
    last_used = Column(DateTime, nullable=True)
    times_used = Column(Integer, nullable=False, default=0)
    success_rate = Column(Float, nullable=True)
    avg_roi = Column(Float, nullable=True)
    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    __table_args__ = (
        UniqueConstraint("user_id", "league", name="uq_betting_scripts_user_league"),
    )


class Pick(Base):
    """A logged bet with its settlement outcome."""
    __tablename__ = "picks"

    id = Column(String(36), primary_key=True, default=_uuid)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    match_id = Column(String(36), ForeignKey("league_schedules.id", ondelete="SET NULL"), nullable=True)
    entry_id = Column(String(32), nullable=False, unique=True)
    date = Column(DateTime, nullable=False, default=datetime.now, index=True)
    sport = Column(String(100), nullable=False)
    league = Column(String(100), nullable=False)
    event = Column(String(255), nullable=False)
    bet_type = Column(String(100), nullable=False)
    selection = Column(String(255), nullable=False)
    line = Column(String(50), nullable=True)
    odds_american = Column(String(20), nullable=False)
    odds_decimal = Column(Float, nullable=True)
    stake = Column(Float, nullable=False)
    potential_win = Column(Float, nullable=True)
    result = Column(String(10), nullable=False, default="Pending", index=True)
    actual_result = Column(Text, nullable=True)
    profit_loss = Column(Float, nullable=True)
    running_bankroll = Column(Float, nullable=True)
    bankroll_change = Column(Float, nullable=True)
    roi = Column(Float, nullable=True)
    cis_generated = Column(Text, nullable=True)
    script_summary = Column(Text, nullable=True)
    justification = Column(Text, nullable=True)
    confidence = Column(Integer, nullable=True)
    tags = Column(String(255), nullable=True)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    __table_args__ = (
        Index("ix_picks_user_date", "user_id", "date"),
    )


class BankrollHistory(Base):
    """Append-only bankroll audit row."""
    __tablename__ = "bankroll_history"

    id = Column(String(36), primary_key=True, default=_uuid)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    date = Column(DateTime, nullable=False, default=datetime.now)
    amount = Column(Float, nullable=False)
    change = Column(Float, nullable=True)
    change_type = Column(String(20), nullable=False)
    description = Column(Text, nullable=True)
    # Plain column: history outlives deleted picks
    related_pick_id = Column(String(36), nullable=True, index=True)
    created_at = Column(DateTime, nullable=False, default=utcnow)


class UploadedData(Base):
    """Raw workbook payload (script, fixtures and stats sheets) as JSON text."""
    __tablename__ = "uploaded_data"

    id = Column(String(36), primary_key=True, default=_uuid)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    file_name = Column(String(255), nullable=False)
    sport = Column(String(100), nullable=False)
    league = Column(String(100), nullable=False)
    upload_date = Column(DateTime, nullable=False, default=utcnow, index=True)
    betting_script = Column(Text, nullable=True)
    fixtures = Column(Text, nullable=True)
    stats = Column(Text, nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    __table_args__ = (
        Index("ix_uploaded_data_scope", "user_id", "sport", "league", "is_active"),
    )
