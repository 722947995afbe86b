"""
Dashboard composition: one summary payload for all tabs, plus readiness of
the match -> preview -> CIS -> script -> pick workflow.
"""
import logging
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from wagerdesk.core.auth import Principal
from wagerdesk.services.analysis.injury_check import check_injury_mentions
from wagerdesk.services.pick_ledger_service import PickLedgerService
from wagerdesk.services.schedule_service import ScheduleService
from wagerdesk.services.script_service import ScriptService
from wagerdesk.services.upload_service import UploadService

logger = logging.getLogger(__name__)

DASHBOARD_TABS = (
    "match-selection",
    "preview-odds",
    "cis-generator",
    "betting-script",
    "pick-logger",
    "manage-schedules",
    "manage-scripts",
)


class DashboardService:
    def __init__(self, db: Session):
        self.db = db
        self.schedules = ScheduleService(db)
        self.scripts = ScriptService(db)
        self.ledger = PickLedgerService(db)
        self.uploads = UploadService(db)

    def summary(self, principal: Principal) -> Dict[str, Any]:
        schedules = self.schedules.overview(principal)
        scripts = self.scripts.overview(principal)
        picks = self.ledger.list_with_stats(principal)
        return {
            "bankroll": picks["stats"]["current"],
            "schedule_stats": schedules["stats"],
            "todays_matches": schedules["todays_matches"],
            "script_stats": scripts["stats"],
            "pick_stats": picks["stats"],
            "active_uploads": self.uploads.count_active(principal),
            "tabs": list(DASHBOARD_TABS),
        }

    def workflow(
        self,
        principal: Principal,
        schedule_id: Optional[str] = None,
        script_id: Optional[str] = None,
        preview: Optional[str] = None,
        odds: Optional[str] = None,
        stats: Optional[str] = None,
        cis: Optional[str] = None,
    ) -> Dict[str, Any]:
        """
        Readiness flags for the transient state passed between tabs.

        Without an explicit `script_id`, the script for the selected match's
        league is picked automatically.

        Raises:
            NotFound / Forbidden: schedule or script not owned by the user
        """
        schedule = self.schedules.get(principal, schedule_id) if schedule_id else None
        if script_id:
            script = self.scripts.get(principal, script_id)
        else:
            script = self.scripts.find_for_league(principal, schedule.league if schedule else None)

        has_match = schedule is not None
        has_script = script is not None
        has_cis = bool(cis)
        can_execute = has_match and has_script and has_cis

        missing: List[str] = []
        if not has_match:
            missing.append("match selection")
        if not has_script:
            missing.append("betting script")
        if not has_cis:
            missing.append("CIS analysis")

        warnings: List[str] = []
        injury = check_injury_mentions(preview) if preview else None
        if injury is not None and not injury.detected:
            warnings.append("No injury data detected in preview. Consider adding injury context.")
        if can_execute and not (preview and stats):
            warnings.append("Ready for execution - Add preview and stats for optimal results")

        return {
            "selected_schedule_id": schedule.id if schedule else None,
            "selected_script_id": script.id if script else None,
            "can_generate_cis": has_match and bool(preview or odds or stats),
            "can_execute_script": can_execute,
            "has_optimal_data": can_execute and bool(preview) and bool(stats),
            "missing": missing,
            "script_available": has_script,
            "injury_validation": injury.to_dict() if injury else None,
            "warnings": warnings,
        }
