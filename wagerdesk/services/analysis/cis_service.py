"""
Comprehensive Intelligence Summary (CIS) generation.
"""
import logging
from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence

from sqlalchemy.orm import Session

from wagerdesk.core.auth import Principal
from wagerdesk.core.errors import UpstreamFailure, ValidationFailed
from wagerdesk.repositories import ScheduleRepository
from wagerdesk.services.analysis.cis_sections import split_cis_sections
from wagerdesk.services.analysis.injury_check import InjuryCheck, check_injury_mentions
from wagerdesk.services.analysis.prompts import CIS_SYSTEM_PROMPT, MatchContext, build_cis_prompt
from wagerdesk.services.llm.chat_client import ChatCompletionClient

logger = logging.getLogger(__name__)

CIS_MAX_TOKENS = 2000
CIS_TEMPERATURE = 0.7
EMPTY_CIS_TEXT = "Failed to generate CIS analysis."


def resolve_matches(
    db: Session,
    principal: Principal,
    schedule_id: Optional[str] = None,
    selected_match: Optional[MatchContext] = None,
    selected_matches: Sequence[MatchContext] = (),
) -> List[MatchContext]:
    """
    Matches for a prompt: the owned schedule row (if any) first, then the
    client-supplied match, then any additional matches.

    Raises:
        NotFound / Forbidden: `schedule_id` is not one of the user's schedules
    """
    matches: List[MatchContext] = []
    if schedule_id:
        schedule = ScheduleRepository(db).get_owned(schedule_id, principal.user_id)
        matches.append(MatchContext.from_schedule(schedule))
    if selected_match is not None:
        matches.append(selected_match)
    matches.extend(selected_matches)
    return matches


class CisService:
    """Builds the CIS prompt, calls the model and splits the answer."""

    def __init__(self, db: Session, client: ChatCompletionClient):
        self.db = db
        self.client = client

    async def generate(
        self,
        principal: Principal,
        matches: Sequence[MatchContext],
        preview: Optional[str] = None,
        odds: Optional[str] = None,
        manual_stats: Optional[str] = None,
        injury: Optional[InjuryCheck] = None,
    ) -> Dict[str, Any]:
        """
        Generate a CIS for the selected matches and pasted context.

        The injury context is derived from the preview when not supplied.

        Raises:
            ValidationFailed: no match, no preview and no odds
            UpstreamFailure: the model call failed
        """
        if not matches and not preview and not odds:
            raise ValidationFailed("Insufficient data for CIS generation")

        if injury is None and preview:
            injury = check_injury_mentions(preview)

        prompt = build_cis_prompt(matches, preview, odds, manual_stats, injury)
        try:
            content = await self.client.complete(
                CIS_SYSTEM_PROMPT,
                prompt,
                max_tokens=CIS_MAX_TOKENS,
                temperature=CIS_TEMPERATURE,
                operation="generate_cis",
            )
        except UpstreamFailure as e:
            logger.error(
                f"CIS generation failed for user {principal.user_id}",
                extra={"matches": [m.matchup for m in matches]},
            )
            raise UpstreamFailure("Failed to generate CIS analysis") from e

        cis = content or EMPTY_CIS_TEXT
        logger.info(f"Generated CIS ({len(cis)} chars) for {len(matches)} match(es)")
        return {
            "success": True,
            "cis": cis,
            "sections": split_cis_sections(cis),
            "analysis_date": datetime.now(),
        }
