"""
Spreadsheet helpers for schedule and script uploads.

Workbooks come from a mix of sources with inconsistent headers ("Home",
"HomeTeam", "Home Team", "home_team", ...). `normalize_schedule_row` folds
them onto the canonical field names used by the schedule service.
"""
import io
import math
import zipfile
from pathlib import Path
from typing import Any, Dict, List, Optional

import pandas as pd

SPREADSHEET_EXTENSIONS = (".xlsx", ".csv")

# Canonical field -> accepted headers, in lookup order
SCHEDULE_HEADER_ALIASES: Dict[str, tuple] = {
    "date": ("Date", "date", "MatchDate", "Match Date"),
    "home_team": ("Home", "HomeTeam", "home_team", "Home Team", "homeTeam"),
    "away_team": ("Away", "AwayTeam", "away_team", "Away Team", "awayTeam"),
    "league": ("League", "Competition", "league"),
    "sport": ("Sport", "sport"),
    "time": ("Time", "time", "KickOff", "Kick Off"),
    "venue": ("Venue", "venue", "Stadium"),
}


def _is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, float) and math.isnan(value):
        return True
    if isinstance(value, str) and not value.strip():
        return True
    return value is pd.NaT


def _clean(value: Any) -> Any:
    if _is_blank(value):
        return None
    if isinstance(value, pd.Timestamp):
        return value.to_pydatetime()
    if isinstance(value, str):
        return value.strip()
    return value


def normalize_schedule_row(row: Dict[str, Any]) -> Dict[str, Any]:
    """
    Map a raw spreadsheet row onto canonical schedule fields.

    Blank cells (None, NaN, whitespace) become None. Unrecognised columns are
    dropped.

    Examples:
        >>> normalize_schedule_row({"Home Team": " Lakers ", "Competition": "NBA"})["home_team"]
        'Lakers'
    """
    normalized: Dict[str, Any] = {}
    for field, aliases in SCHEDULE_HEADER_ALIASES.items():
        value = None
        for alias in aliases:
            candidate = _clean(row.get(alias))
            if candidate is not None:
                value = candidate
                break
        normalized[field] = value
    return normalized


def read_spreadsheet(content: bytes, filename: str, sheet_name: Optional[Any] = 0) -> List[Dict[str, Any]]:
    """
    Read the first sheet of an uploaded workbook (or a CSV) into row dicts.

    Raises:
        ValueError: unsupported extension or unreadable file
    """
    suffix = Path(filename or "").suffix.lower()
    if suffix not in SPREADSHEET_EXTENSIONS:
        raise ValueError(f"Unsupported file type: {suffix or 'none'}")

    buffer = io.BytesIO(content)
    try:
        if suffix == ".csv":
            frame = pd.read_csv(buffer)
        else:
            frame = pd.read_excel(buffer, sheet_name=sheet_name, engine="openpyxl")
    except (OSError, zipfile.BadZipFile) as e:
        raise ValueError(f"Unreadable spreadsheet: {e}") from e

    # Blank cells come back as NaN/NaT; callers expect None
    frame = frame.astype(object).where(pd.notna(frame), None)
    return frame.to_dict(orient="records")


def read_workbook_sheets(content: bytes, filename: str, count: int = 3) -> List[List[Dict[str, Any]]]:
    """
    Read the first `count` sheets of an Excel workbook, in workbook order.

    Raises:
        ValueError: not an Excel file, unreadable, or fewer than `count` sheets
    """
    suffix = Path(filename or "").suffix.lower()
    if suffix != ".xlsx":
        raise ValueError(f"Unsupported file type: {suffix or 'none'}")

    try:
        sheets = pd.read_excel(io.BytesIO(content), sheet_name=None, engine="openpyxl")
    except (OSError, zipfile.BadZipFile) as e:
        raise ValueError(f"Unreadable spreadsheet: {e}") from e

    if len(sheets) < count:
        raise ValueError(f"Workbook must contain {count} sheets, found {len(sheets)}")

    rows = []
    for frame in list(sheets.values())[:count]:
        frame = frame.astype(object).where(pd.notna(frame), None)
        rows.append(frame.to_dict(orient="records"))
    return rows
