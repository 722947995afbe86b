"""
Split free-text CIS output into titled display sections.
"""
import re
from typing import Dict, List

# Body runs until a blank line, a new upper-case heading, or the end of text
_BODY = r"[:\n](.*?)(?=\n\n|\n[A-Z]{2,}|\Z)"

SECTION_PATTERNS = (
    ("Key Stats", re.compile(r"(?:KEY STATS|STATISTICS|STATISTICAL ANALYSIS)" + _BODY, re.IGNORECASE | re.DOTALL)),
    ("Form & Pattern", re.compile(r"(?:FORM|PATTERNS?|RECENT FORM)" + _BODY, re.IGNORECASE | re.DOTALL)),
    ("Injury Insights", re.compile(r"(?:INJUR(?:Y|IES)|TEAM NEWS|AVAILABILITY)" + _BODY, re.IGNORECASE | re.DOTALL)),
    ("Opportunities & Risks", re.compile(r"(?:OPPORTUNIT(?:Y|IES)|RISKS?|THREATS?)" + _BODY, re.IGNORECASE | re.DOTALL)),
    ("Market Evaluation", re.compile(r"(?:MARKET|ODDS|BETTING|VALUE)" + _BODY, re.IGNORECASE | re.DOTALL)),
)

FALLBACK_TITLE = "Comprehensive Analysis"


def split_cis_sections(cis: str) -> List[Dict[str, str]]:
    """
    Best-effort split of a CIS into the five standard sections.

    Each pattern contributes at most one section (its first match, with an
    empty body skipped). When nothing matches, the whole text is returned as
    a single "Comprehensive Analysis" section.
    """
    cis = cis or ""
    sections = []
    for title, pattern in SECTION_PATTERNS:
        match = pattern.search(cis)
        if match and match.group(1):
            sections.append({"title": title, "content": match.group(1).strip()})

    if not sections:
        sections.append({"title": FALLBACK_TITLE, "content": cis})
    return sections
