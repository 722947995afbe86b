"""
Prompt construction for CIS generation and betting-script execution.
"""
import json
from dataclasses import dataclass, field
from typing import Any, List, Optional, Sequence

from wagerdesk.services.analysis.injury_check import InjuryCheck

CIS_SYSTEM_PROMPT = (
    "You are an expert sports betting analyst with deep knowledge of statistics, team performance, "
    "and market dynamics. Provide comprehensive, actionable betting intelligence."
)

SCRIPT_SYSTEM_PROMPT = (
    "You are a professional betting script executor. Generate specific, actionable betting "
    "recommendations based on the provided data and rules. Always respond with valid JSON format."
)

CIS_INSTRUCTIONS = """Generate a comprehensive intelligence summary (CIS) for betting analysis. Structure your response with the following sections:

KEY STATS:
Provide statistical analysis and key performance metrics.

FORM & PATTERN:
Analyze recent form, patterns, and trends.

INJURY INSIGHTS:
Detail any injury concerns and team news impact.

OPPORTUNITIES & RISKS:
Identify betting opportunities and potential risks.

MARKET EVALUATION:
Evaluate the betting markets and identify value.

Data available for analysis:"""

CIS_CLOSING = (
    "Please provide a detailed, professional analysis following The Wager's established tone - "
    "analytical, confident, and focused on value identification. Include specific recommendations "
    "where possible."
)

SCRIPT_INSTRUCTIONS = """Execute betting script analysis and generate specific betting recommendations. You must respond with a JSON array of betting recommendations.

Each recommendation should have this exact structure:
{
  "matchup": "Team A vs Team B",
  "betType": "Moneyline|Point Spread|Total Points|Player Props|etc",
  "selection": "Specific selection (team, over/under, player)",
  "line": "Point spread or total line if applicable",
  "oddsAmerican": "American odds format (e.g., -110, +150)",
  "oddsDecimal": 1.91,
  "stake": 25,
  "scriptSummary": "Brief summary of script rules applied",
  "justification": "Detailed explanation for this bet",
  "confidence": 8,
  "potentialWin": 47.75
}

BETTING SCRIPT RULES AND DATA:"""

STAKING_GUIDELINES = """STAKING GUIDELINES:
- Use 1-5% of bankroll for stakes based on confidence
- Never bet more than $100 per bet regardless of bankroll
- Avoid bets with odds worse than -300 unless exceptional confidence
- Confidence scale: 1-5 (avoid), 6-7 (small stake), 8-9 (medium stake), 10 (large stake)

Generate 1-3 betting recommendations based on the strongest opportunities from the data provided. Respond with raw JSON only."""

# Embedded fixture/stats JSON is clipped to keep prompts bounded
EMBEDDED_JSON_LIMIT = 500


@dataclass
class MatchContext:
    """Facts about one selected match, from a schedule row or a client payload."""
    matchup: str
    league: str = ""
    sport: str = ""
    date: str = ""
    time: Optional[str] = None
    venue: Optional[str] = None
    home_form: Optional[str] = None
    away_form: Optional[str] = None
    home_injuries: Optional[str] = None
    away_injuries: Optional[str] = None
    trends: Optional[str] = None
    script_rules: List[Any] = field(default_factory=list)
    fixture_data: Any = None
    stats_data: Any = None

    @classmethod
    def from_schedule(cls, schedule) -> "MatchContext":
        return cls(
            matchup=schedule.matchup,
            league=schedule.league,
            sport=schedule.sport,
            date=schedule.date.isoformat() if schedule.date else "",
            time=schedule.time,
            venue=schedule.venue,
        )


@dataclass
class ScriptContext:
    """The league script applied during execution."""
    league: str
    content: str
    version: Optional[str] = None
    stake_logic: Optional[str] = None
    risk_management: Optional[str] = None
    guidelines: Optional[str] = None
    # Set for stored scripts, whose usage is counted after a successful run
    script_id: Optional[str] = None

    @classmethod
    def from_model(cls, script) -> "ScriptContext":
        return cls(
            league=script.league,
            content=script.content,
            version=script.version,
            stake_logic=script.stake_logic,
            risk_management=script.risk_management,
            guidelines=script.guidelines,
            script_id=script.id,
        )


def _clip_json(value: Any) -> str:
    return json.dumps(value, default=str)[:EMBEDDED_JSON_LIMIT]


def _rule_text(rule: Any) -> str:
    if isinstance(rule, dict):
        return rule.get("rule") or rule.get("description") or json.dumps(rule, default=str)
    return str(rule)


def _injury_block(injury: Optional[InjuryCheck]) -> str:
    if injury is None:
        return ""
    if injury.detected:
        return (
            f"\n\nINJURY VALIDATION:\nInjury information detected in preview "
            f"({injury.confidence}% confidence). Keywords: {', '.join(injury.keywords)}"
        )
    return (
        "\n\nINJURY VALIDATION:\nNo injury information detected in preview. "
        "Flag team news and availability as an unverified risk."
    )


def build_cis_prompt(
    matches: Sequence[MatchContext],
    preview: Optional[str] = None,
    odds: Optional[str] = None,
    manual_stats: Optional[str] = None,
    injury: Optional[InjuryCheck] = None,
) -> str:
    """User prompt asking for the five-section CIS."""
    prompt = CIS_INSTRUCTIONS

    if matches:
        prompt += "\n\nSELECTED MATCHES:"
        for index, match in enumerate(matches, start=1):
            prompt += f"\n{index}. {match.matchup} ({match.league})"
            prompt += f"\n   Date: {match.date}"
            if match.venue:
                prompt += f"\n   Venue: {match.venue}"
            if match.home_form or match.away_form:
                prompt += f"\n   Form: Home {match.home_form or 'N/A'} | Away {match.away_form or 'N/A'}"
            if match.home_injuries or match.away_injuries:
                prompt += (
                    f"\n   Injuries: Home {match.home_injuries or 'None'} "
                    f"| Away {match.away_injuries or 'None'}"
                )
            if match.trends:
                prompt += f"\n   Trends: {match.trends}"
            if match.stats_data:
                prompt += "\n   Stats Data Available: Yes"
            if match.script_rules:
                prompt += "\n   Betting Script Available: Yes"

    if preview:
        prompt += f"\n\nPREVIEW ANALYSIS:\n{preview}"
    if odds:
        prompt += f"\n\nODDS DATA:\n{odds}"
    if manual_stats:
        prompt += f"\n\nSTATISTICS:\n{manual_stats}"

    prompt += _injury_block(injury)
    prompt += f"\n\n{CIS_CLOSING}"
    return prompt


def build_script_prompt(
    matches: Sequence[MatchContext],
    cis_analysis: str,
    bankroll: float,
    script: Optional[ScriptContext] = None,
    preview: Optional[str] = None,
    odds: Optional[str] = None,
    manual_stats: Optional[str] = None,
    injury: Optional[InjuryCheck] = None,
) -> str:
    """User prompt asking for 1-3 JSON recommendations."""
    prompt = SCRIPT_INSTRUCTIONS

    for index, match in enumerate(matches, start=1):
        prompt += f"\n\nMATCH {index}: {match.matchup}"
        prompt += f"\nLeague: {match.league}"
        prompt += f"\nSport: {match.sport}"
        prompt += f"\nDate: {match.date}"
        if match.time:
            prompt += f"\nTime: {match.time}"

        rules = list(match.script_rules)
        if not rules and script is not None and script.league == match.league:
            rules = [line.strip() for line in script.content.splitlines() if line.strip()]
        if rules:
            prompt += "\nBetting Script Rules:"
            for rule_index, rule in enumerate(rules, start=1):
                prompt += f"\n  {rule_index}. {_rule_text(rule)}"

        if match.fixture_data:
            prompt += f"\nFixture Data: {_clip_json(match.fixture_data)}"
        if match.stats_data:
            prompt += f"\nStats Data: {_clip_json(match.stats_data)}"

    if script is not None:
        prompt += f"\n\nACTIVE SCRIPT: {script.league}"
        if script.version:
            prompt += f" v{script.version}"
        if script.stake_logic:
            prompt += f"\nStake Logic: {script.stake_logic}"
        if script.risk_management:
            prompt += f"\nRisk Management: {script.risk_management}"
        if script.guidelines:
            prompt += f"\nGuidelines: {script.guidelines}"

    prompt += "\n\nPREVIEW DATA:"
    if preview:
        prompt += f"\nAnalysis: {preview}"
    if odds:
        prompt += f"\nOdds: {odds}"
    if manual_stats:
        prompt += f"\nStats: {manual_stats}"

    prompt += _injury_block(injury)
    prompt += f"\n\nCIS ANALYSIS:\n{cis_analysis}"
    prompt += f"\n\nCURRENT BANKROLL: ${bankroll:g}"
    prompt += f"\n\n{STAKING_GUIDELINES}"
    return prompt
