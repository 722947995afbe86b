"""
Parsing of model output into betting recommendations.

Models answer in several JSON envelopes. Each accepted envelope is a shape
matcher; matchers are tried in order and the first one that returns a list
wins:

    1. a bare array                 [...]
    2. {"recommendations": [...]}
    3. {"bets": [...]}
    4. the first array-valued key   {"anything": [...]}, in key order

Anything else (invalid JSON, no array, an empty array) becomes a single
placeholder recommendation so the caller always gets at least one entry.
"""
import json
import math
import logging
import re
from dataclasses import asdict, dataclass
from typing import Any, Callable, List, Optional, Sequence, Tuple

from wagerdesk.core.errors import ParseFailure
from wagerdesk.core.metrics import recommendation_fallbacks_total
from wagerdesk.utils.odds import DEFAULT_AMERICAN_ODDS, american_to_decimal, coerce_float, potential_win

logger = logging.getLogger(__name__)

DEFAULT_STAKE = 25.0
DEFAULT_CONFIDENCE = 7
UNKNOWN_MATCH = "Unknown Match"

_CODE_FENCE = re.compile(r"^\s*```(?:json)?\s*(.*?)\s*```\s*$", re.DOTALL | re.IGNORECASE)


@dataclass
class Recommendation:
    matchup: str
    bet_type: str
    selection: str
    line: Optional[str]
    odds_american: str
    odds_decimal: float
    stake: float
    script_summary: str
    justification: str
    confidence: int
    potential_win: float

    def to_dict(self) -> dict:
        return asdict(self)


# ============================================================================
# Shape matchers
# ============================================================================

ShapeMatcher = Callable[[Any], Optional[list]]


def match_bare_array(parsed: Any) -> Optional[list]:
    return parsed if isinstance(parsed, list) else None


def _match_key(key: str) -> ShapeMatcher:
    def matcher(parsed: Any) -> Optional[list]:
        if isinstance(parsed, dict) and isinstance(parsed.get(key), list):
            return parsed[key]
        return None
    matcher.__name__ = f"match_{key}_key"
    return matcher


def match_first_array_value(parsed: Any) -> Optional[list]:
    if isinstance(parsed, dict):
        for value in parsed.values():
            if isinstance(value, list):
                return value
    return None


SHAPE_MATCHERS: Tuple[ShapeMatcher, ...] = (
    match_bare_array,
    _match_key("recommendations"),
    _match_key("bets"),
    match_first_array_value,
)


def extract_recommendation_items(content: Optional[str], matchers: Sequence[ShapeMatcher] = SHAPE_MATCHERS) -> list:
    """
    Decode model output and return the recommendation objects it carries.

    Raises:
        ParseFailure: not JSON, no matcher applies, or no object entries
    """
    text = (content or "").strip() or "{}"
    fenced = _CODE_FENCE.match(text)
    if fenced:
        text = fenced.group(1)

    try:
        parsed = json.loads(text)
    except ValueError as e:
        raise ParseFailure("Model response is not valid JSON") from e

    for matcher in matchers:
        items = matcher(parsed)
        if items is not None:
            break
    else:
        raise ParseFailure("No recommendation array in model response")

    objects = [item for item in items if isinstance(item, dict)]
    if not objects:
        raise ParseFailure("Model response contained no recommendations")
    return objects


# ============================================================================
# Normalisation
# ============================================================================

def _text(value: Any, default: Optional[str]) -> Optional[str]:
    """Model-supplied text field; numbers are stringified, containers and blanks are missing."""
    if isinstance(value, bool) or value is None or isinstance(value, (dict, list)):
        return default
    if isinstance(value, (int, float)):
        return str(value)
    text = str(value).strip()
    return text or default


def _confidence(value: Any) -> int:
    number = coerce_float(value)
    if not number:
        return DEFAULT_CONFIDENCE
    return int(round(number))


def normalize_recommendation(raw: dict) -> Recommendation:
    """
    Fill defaults on one model-provided recommendation.

    `potential_win` is always recomputed from stake and decimal odds; any
    value the model supplied is ignored. Non-finite numbers count as missing.
    """
    stake = coerce_float(raw.get("stake")) or DEFAULT_STAKE
    odds_american = _text(raw.get("oddsAmerican"), DEFAULT_AMERICAN_ODDS)
    odds_decimal = coerce_float(raw.get("oddsDecimal")) or american_to_decimal(odds_american)
    if not math.isfinite(potential_win(stake, odds_decimal)):
        stake = DEFAULT_STAKE
        odds_decimal = american_to_decimal(odds_american)

    return Recommendation(
        matchup=_text(raw.get("matchup"), UNKNOWN_MATCH),
        bet_type=_text(raw.get("betType"), "Moneyline"),
        selection=_text(raw.get("selection"), "TBD"),
        line=_text(raw.get("line"), None),
        odds_american=odds_american,
        odds_decimal=odds_decimal,
        stake=stake,
        script_summary=_text(raw.get("scriptSummary"), "Standard betting script applied"),
        justification=_text(raw.get("justification"), "Based on comprehensive analysis"),
        confidence=_confidence(raw.get("confidence")),
        potential_win=potential_win(stake, odds_decimal),
    )


def fallback_recommendation(matchup: Optional[str] = None) -> Recommendation:
    """Placeholder returned when the model output could not be used."""
    return Recommendation(
        matchup=matchup or UNKNOWN_MATCH,
        bet_type="Moneyline",
        selection="TBD",
        line=None,
        odds_american=DEFAULT_AMERICAN_ODDS,
        odds_decimal=1.91,
        stake=DEFAULT_STAKE,
        script_summary="Analysis completed but formatting error occurred",
        justification="Recommendation generated based on available data",
        confidence=6,
        potential_win=22.75,
    )


def parse_recommendations(content: Optional[str], fallback_matchup: Optional[str] = None) -> Tuple[List[Recommendation], bool]:
    """
    Turn raw model output into normalised recommendations.

    Returns:
        (recommendations, used_fallback). The list is never empty.
    """
    try:
        items = extract_recommendation_items(content)
    except ParseFailure as e:
        logger.warning(f"Using fallback recommendation: {e.message}", extra={"content": (content or "")[:500]})
        recommendation_fallbacks_total.labels(reason="invalid_json" if e.__cause__ else "shape").inc()
        return [fallback_recommendation(fallback_matchup)], True

    return [normalize_recommendation(item) for item in items], False
