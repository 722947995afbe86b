"""
Betting-script execution: CIS + league script -> stake/selection recommendations.
"""
import logging
from datetime import datetime
from typing import Any, Dict, Optional, Sequence

from sqlalchemy.orm import Session

from wagerdesk.core.auth import Principal
from wagerdesk.core.config import settings
from wagerdesk.core.errors import UpstreamFailure, ValidationFailed
from wagerdesk.services.analysis.injury_check import InjuryCheck, check_injury_mentions
from wagerdesk.services.analysis.prompts import (
    SCRIPT_SYSTEM_PROMPT,
    MatchContext,
    ScriptContext,
    build_script_prompt,
)
from wagerdesk.services.analysis.recommendation_parser import parse_recommendations
from wagerdesk.services.llm.chat_client import ChatCompletionClient
from wagerdesk.services.script_service import ScriptService

logger = logging.getLogger(__name__)

SCRIPT_MAX_TOKENS = 1500
SCRIPT_TEMPERATURE = 0.3


class ScriptExecutor:
    """Runs a league betting script against a CIS through the model."""

    def __init__(self, db: Session, client: ChatCompletionClient):
        self.db = db
        self.client = client
        self.scripts = ScriptService(db)

    def resolve_script(
        self, principal: Principal, script_id: Optional[str], script: Optional[ScriptContext]
    ) -> Optional[ScriptContext]:
        """
        Script for the prompt. A stored script (by id) is loaded with an
        ownership check; its usage is only counted once execution succeeds.
        """
        if script_id:
            return ScriptContext.from_model(self.scripts.get(principal, script_id))
        return script

    async def execute(
        self,
        principal: Principal,
        matches: Sequence[MatchContext],
        cis_analysis: Optional[str],
        script: Optional[ScriptContext] = None,
        bankroll: Optional[float] = None,
        preview: Optional[str] = None,
        odds: Optional[str] = None,
        manual_stats: Optional[str] = None,
        injury: Optional[InjuryCheck] = None,
    ) -> Dict[str, Any]:
        """
        Ask the model for 1-3 recommendations and normalise them.

        Unusable model output yields one placeholder recommendation with
        `fallback=True`; a failed model call is an error.

        Raises:
            ValidationFailed: no match or no CIS
            UpstreamFailure: the model call failed
        """
        if not matches or not cis_analysis:
            raise ValidationFailed("Selected matches and CIS analysis are required")

        if injury is None and preview:
            injury = check_injury_mentions(preview)

        prompt = build_script_prompt(
            matches,
            cis_analysis,
            bankroll or settings.DEFAULT_BANKROLL,
            script=script,
            preview=preview,
            odds=odds,
            manual_stats=manual_stats,
            injury=injury,
        )
        try:
            content = await self.client.complete(
                SCRIPT_SYSTEM_PROMPT,
                prompt,
                max_tokens=SCRIPT_MAX_TOKENS,
                temperature=SCRIPT_TEMPERATURE,
                json_mode=True,
                operation="execute_script",
            )
        except UpstreamFailure as e:
            logger.error(
                f"Betting script execution failed for user {principal.user_id}",
                extra={"league": script.league if script else None},
            )
            raise UpstreamFailure("Failed to execute betting script") from e

        if script is not None and script.script_id:
            self.scripts.record_usage(self.scripts.get(principal, script.script_id))

        recommendations, fallback = parse_recommendations(content, fallback_matchup=matches[0].matchup)
        logger.info(
            f"Script execution produced {len(recommendations)} recommendation(s)",
            extra={"fallback": fallback},
        )
        return {
            "success": True,
            "recommendations": recommendations,
            "fallback": fallback,
            "execution_date": datetime.now(),
        }
