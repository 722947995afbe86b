"""
Betting script management.

A user has at most one script per league. Manual creation rejects a
duplicate league, while uploads merge into the existing row and bump its
version.

Versions are stored as text and bumped by adding 0.1 to their float value,
so a long-lived script shows float drift ("1.2000000000000002"). Clients
display the string as-is.
"""
import logging
import math
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy.orm import Session

from wagerdesk.core.auth import Principal
from wagerdesk.core.errors import ValidationFailed
from wagerdesk.models import BettingScript
from wagerdesk.repositories import ScriptRepository
from wagerdesk.utils.odds import parse_leading_float
from wagerdesk.utils.timezone import utcnow

logger = logging.getLogger(__name__)

DEFAULT_VERSION = "1.0"
UNKNOWN_SPORT = "Unknown"

# Lower-case keyword -> sport/competition label. WNBA precedes NBA so that
# "wnba" is not swallowed by the shorter keyword.
SPORT_KEYWORDS: Tuple[Tuple[str, str], ...] = (
    ("wnba", "WNBA"),
    ("nba", "NBA"),
    ("mls", "MLS"),
    ("ufc", "UFC"),
    ("nhl", "NHL"),
    ("nfl", "NFL"),
    ("mlb", "MLB"),
    ("premier", "Premier League"),
    ("champions", "Champions League"),
    ("la liga", "La Liga"),
    ("serie a", "Serie A"),
    ("bundesliga", "Bundesliga"),
    ("tennis", "Tennis"),
)

NON_NULLABLE_FIELDS = {"league", "sport", "content", "file_name", "version", "is_active"}


def detect_sport(text: Optional[str]) -> Optional[str]:
    """
    Sport label for the first keyword contained in `text`, case-insensitive.

    Examples:
        >>> detect_sport("NBA_Playoffs_v2.txt")
        'NBA'
        >>> detect_sport("wnba rules")
        'WNBA'
        >>> detect_sport("darts.txt") is None
        True
    """
    if not text:
        return None
    lowered = text.lower()
    for keyword, label in SPORT_KEYWORDS:
        if keyword in lowered:
            return label
    return None


def format_version(value: float) -> str:
    """Render a version number the way a JS number-to-string conversion would."""
    if math.isnan(value):
        return "NaN"
    if value.is_integer():
        return str(int(value))
    return repr(value)


def bump_version(version: Optional[str]) -> str:
    """
    Next version: float value of `version` plus 0.1.

    Examples:
        >>> bump_version("1.0")
        '1.1'
        >>> bump_version("1.1")
        '1.2000000000000002'
    """
    return format_version(parse_leading_float(version or DEFAULT_VERSION) + 0.1)


class ScriptService:
    """CRUD, upload and usage tracking for betting scripts."""

    def __init__(self, db: Session):
        self.db = db
        self.scripts = ScriptRepository(db)

    # ========================================================================
    # Queries
    # ========================================================================

    def overview(self, principal: Principal) -> Dict[str, Any]:
        scripts = self.scripts.list_recently_updated(principal.user_id)
        total = len(scripts)
        return {
            "scripts": scripts,
            "stats": {
                "total_scripts": total,
                "active_scripts": sum(1 for s in scripts if s.is_active),
                "leagues_covered": len({s.league for s in scripts}),
                "avg_success_rate": (
                    sum(s.success_rate or 0 for s in scripts) / total if total else 0
                ),
            },
        }

    def get(self, principal: Principal, script_id: str) -> BettingScript:
        return self.scripts.get_owned(script_id, principal.user_id)

    def find_for_league(self, principal: Principal, league: Optional[str]) -> Optional[BettingScript]:
        if not league:
            return None
        return self.scripts.find_by_league(principal.user_id, league)

    def list_all(self, principal: Principal) -> List[BettingScript]:
        return self.scripts.list_for_user(principal.user_id)

    # ========================================================================
    # Mutations
    # ========================================================================

    def create(self, principal: Principal, data: Dict[str, Any]) -> BettingScript:
        """
        Create a script for a league that has none yet.

        Raises:
            ValidationFailed: missing league/content, or the league already has a script
        """
        league = (data.get("league") or "").strip()
        content = (data.get("content") or "").strip()
        if not league or not content:
            raise ValidationFailed()

        if self.scripts.find_by_league(principal.user_id, league):
            raise ValidationFailed("Script for this league already exists")

        script = self.scripts.create(
            user_id=principal.user_id,
            league=league,
            sport=(data.get("sport") or "").strip() or UNKNOWN_SPORT,
            content=content,
            description=(data.get("description") or "").strip() or None,
            file_name=(data.get("file_name") or "").strip() or f"{league}.txt",
            version=DEFAULT_VERSION,
        )
        self.scripts.save()
        self.scripts.refresh(script)
        logger.info(f"Created script {script.id} for league {league}")
        return script

    def update(self, principal: Principal, script_id: str, changes: Dict[str, Any]) -> BettingScript:
        """
        Apply a patch and bump the version unless one is supplied.

        Raises:
            NotFound / Forbidden: ownership check
            ValidationFailed: the new league already has another script
        """
        script = self.scripts.get_owned(script_id, principal.user_id)

        patch: Dict[str, Any] = {}
        for key, value in changes.items():
            if isinstance(value, str):
                value = value.strip()
            if value is None and key in NON_NULLABLE_FIELDS:
                continue
            patch[key] = value

        new_league = patch.get("league")
        if new_league and new_league != script.league:
            clash = self.scripts.find_by_league(principal.user_id, new_league)
            if clash is not None and clash.id != script.id:
                raise ValidationFailed("Script for this league already exists")

        if not patch.get("version"):
            patch["version"] = bump_version(script.version)

        self.scripts.apply(script, patch)
        self.scripts.save()
        self.scripts.refresh(script)
        logger.info(f"Updated script {script.id} to version {script.version}")
        return script

    def delete(self, principal: Principal, script_id: str) -> None:
        script = self.scripts.get_owned(script_id, principal.user_id)
        self.scripts.delete_instance(script)
        self.scripts.save()
        logger.info(f"Deleted script {script_id}")

    def upload(
        self,
        principal: Principal,
        file_name: Optional[str],
        content: Optional[str],
        league: Optional[str] = None,
        sport: Optional[str] = None,
    ) -> Dict[str, Any]:
        """
        Store an uploaded script file, merging into the league's existing script.

        The league comes from the payload or is detected from the file name.
        The sport is detected from the league, then the file name, when it is
        absent or "Unknown". Re-uploading bumps the version and clears
        `last_used`.

        Raises:
            ValidationFailed: missing file name or content, or no league could be determined
        """
        file_name = (file_name or "").strip()
        content = (content or "").strip()
        league = (league or "").strip() or detect_sport(file_name)
        if not file_name or not content or not league:
            raise ValidationFailed()

        detected_sport = (sport or "").strip() or UNKNOWN_SPORT
        if detected_sport == UNKNOWN_SPORT:
            detected_sport = detect_sport(league) or detect_sport(file_name) or UNKNOWN_SPORT

        existing = self.scripts.find_by_league(principal.user_id, league)
        if existing is not None:
            self.scripts.apply(existing, {
                "file_name": file_name,
                "content": content,
                "sport": detected_sport,
                "version": bump_version(existing.version),
                "last_used": None,
            })
            script = existing
            updated = True
        else:
            script = self.scripts.create(
                user_id=principal.user_id,
                league=league,
                sport=detected_sport,
                file_name=file_name,
                content=content,
                version=DEFAULT_VERSION,
            )
            updated = False

        self.scripts.save()
        self.scripts.refresh(script)
        logger.info(
            f"{'Updated' if updated else 'Created'} script for {league} from upload {file_name}",
            extra={"script_id": script.id, "version": script.version},
        )
        return {
            "success": True,
            "file_name": file_name,
            "league": league,
            "content": content,
            "script": script,
            "updated": updated,
        }

    def record_usage(self, script: BettingScript) -> BettingScript:
        """Count one execution of `script`."""
        script.times_used = (script.times_used or 0) + 1
        script.last_used = utcnow()
        self.scripts.save()
        return script
