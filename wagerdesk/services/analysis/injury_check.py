"""
Injury-mention heuristic for preview text.
"""
import re
from dataclasses import dataclass, field
from typing import List, Optional

INJURY_KEYWORDS = (
    "injury", "injured", "doubt", "doubtful", "out", "ruled out",
    "questionable", "probable", "day-to-day", "sidelined", "unavailable",
    "fitness", "knock", "strain", "sprain", "tear", "surgery",
    "rehabilitation", "recovery", "medical", "treatment",
)

NO_INJURY_SUGGESTIONS = (
    "Consider mentioning injury status of key players",
    "Check team news for last-minute changes",
    "Verify lineup confirmations before betting",
)

# Whole-word matches only: "doubt" must not fire inside "doubtful", nor "out" inside "about"
_KEYWORD_PATTERNS = tuple(
    (keyword, re.compile(rf"(?<![a-z]){re.escape(keyword)}(?![a-z])", re.IGNORECASE))
    for keyword in INJURY_KEYWORDS
)


@dataclass
class InjuryCheck:
    detected: bool
    keywords: List[str] = field(default_factory=list)
    confidence: int = 0
    suggestions: List[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "detected": self.detected,
            "keywords": list(self.keywords),
            "confidence": self.confidence,
            "suggestions": list(self.suggestions),
        }


def check_injury_mentions(text: Optional[str]) -> InjuryCheck:
    """
    Scan `text` for injury keywords.

    Keywords are reported in keyword-list order. Confidence is 20 per
    matched keyword, capped at 100. With no match, three generic
    suggestions are returned instead.

    Examples:
        >>> check_injury_mentions("Injury update: star forward doubtful").keywords
        ['injury', 'doubtful']
    """
    found = [keyword for keyword, pattern in _KEYWORD_PATTERNS if pattern.search(text or "")]
    detected = bool(found)
    return InjuryCheck(
        detected=detected,
        keywords=found,
        confidence=min(len(found) * 20, 100),
        suggestions=[] if detected else list(NO_INJURY_SUGGESTIONS),
    )
