"""
Odds notation helpers.

American odds arrive from model output and user input as loosely formatted
text ("+150", "-110", "150 (DK)"), so parsing reads the longest numeric
prefix the way a lenient float parser does and ignores the rest.
"""
import math
import re
from typing import Any, List, Optional

DEFAULT_DECIMAL_ODDS = 1.91
DEFAULT_AMERICAN_ODDS = "-110"

_NUMERIC_PREFIX = re.compile(r"^\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")


def parse_leading_float(value: Any) -> float:
    """
    Parse the leading number of `value`, returning NaN when there is none.

    Examples:
        >>> parse_leading_float("+150")
        150.0
        >>> parse_leading_float("-110 at FanDuel")
        -110.0
        >>> parse_leading_float("even")
        nan
    """
    if isinstance(value, bool) or value is None:
        return math.nan
    if isinstance(value, (int, float)):
        return float(value)
    match = _NUMERIC_PREFIX.match(str(value))
    if not match:
        return math.nan
    return float(match.group(1))


def american_to_decimal(odds: Any) -> float:
    """
    Convert American odds to decimal odds.

    Positive odds: odds / 100 + 1. Zero or negative odds: 100 / |odds| + 1.
    Unparseable input (and zero, which has no finite decimal price) returns
    the standard -110 price of 1.91.

    Examples:
        >>> american_to_decimal("+150")
        2.5
        >>> american_to_decimal("-110")
        1.9090909090909092
        >>> american_to_decimal("n/a")
        1.91
    """
    value = parse_leading_float(odds)
    if not math.isfinite(value) or value == 0:
        return DEFAULT_DECIMAL_ODDS
    decimal = (value / 100) + 1 if value > 0 else (100 / abs(value)) + 1
    return decimal if math.isfinite(decimal) else DEFAULT_DECIMAL_ODDS


def potential_win(stake: float, odds_decimal: float) -> float:
    """Profit (excluding returned stake) on a winning bet."""
    return stake * (odds_decimal - 1)


def coerce_float(value: Any) -> Optional[float]:
    """Best-effort float from a JSON value; None when absent, unparseable or infinite."""
    if value is None or value == "":
        return None
    parsed = parse_leading_float(value)
    if not math.isfinite(parsed):
        return None
    return parsed


_ODDS_NUMBER = re.compile(r"\d+\.?\d*")


def parse_odds_text(text: Optional[str]) -> List[str]:
    """
    Annotate pasted odds lines (e.g. "Lakers 1.85 | Celtics 2.05") with the
    numbers found on each.

    Examples:
        >>> parse_odds_text("Over 2.5 1.91\\n\\nno numbers here")
        ['Over 2.5 1.91 → Decimal odds detected: 2.5, 1.91']
    """
    parsed = []
    for line in (text or "").split("\n"):
        if not line.strip():
            continue
        numbers = _ODDS_NUMBER.findall(line)
        if numbers:
            parsed.append(f"{line} → Decimal odds detected: {', '.join(numbers)}")
    return parsed


def format_parsed_odds(text: str, parsed_lines: List[str]) -> str:
    return "PARSED ODDS DATA:\n" + "\n".join(parsed_lines) + f"\n\nORIGINAL:\n{text}"
