"""
Clock-time and time-range parsing for hand-typed schedules.

Accepted shapes:
- single time: "9:00", "09:00", "9:00 PM"
- range: "9:00-10:30", "9:00 – 10:30", "9:00~17:00", "9:00 PM - 11:00 PM"

Failures are never raised: a parse result carries an error tag instead,
so one bad row never sinks a whole batch.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional, Tuple


ERROR_TIME_PARSE = "time_parse"
ERROR_START_INVALID = "start_invalid"
ERROR_END_INVALID = "end_invalid"

# Hyphen, en dash and tilde all separate start from end
_RANGE_SEPARATORS = ("–", "~")

_INT_RE = re.compile(r"[+-]?\d+", re.ASCII)


@dataclass(frozen=True)
class ParsedRange:
    """Outcome of parsing one time or time-range token."""
    start: str
    end: Optional[str] = None
    is_overnight: bool = False
    error: Optional[str] = None
    start_minutes: Optional[int] = None


def _to_int(text: str) -> int | None:
    if not _INT_RE.fullmatch(text):
        return None
    return int(text)


def parse_time(raw: str) -> Tuple[str, Optional[int]]:
    """
    Parse one time token like '9:05' or '09:00 PM' into ('HH:MM', minutes).

    On failure the trimmed input is returned unchanged with minutes=None.
    Hour and minute magnitudes are not range checked: '99:99' is accepted
    as 99 * 60 + 99.
    """
    trimmed = raw.strip()
    parts = trimmed.split()
    time_part = parts[0] if parts else ""
    marker = parts[1].upper() if len(parts) > 1 else None

    comps = time_part.split(":")
    if len(comps) != 2:
        return trimmed, None
    hour = _to_int(comps[0])
    minute = _to_int(comps[1])
    if hour is None or minute is None:
        return trimmed, None

    if marker == "PM" and hour < 12:
        hour += 12
    elif marker == "AM" and hour == 12:
        hour = 0

    return f"{hour:02d}:{minute:02d}", hour * 60 + minute


def _split_range(text: str) -> list[str]:
    for sep in _RANGE_SEPARATORS:
        text = text.replace(sep, "-")
    # Empty segments are dropped before trimming: "9:00-" is start-only
    return [piece.strip() for piece in text.split("-") if piece]


def parse_time_range(text: str) -> ParsedRange:
    """
    Parse a time or time range token into a ParsedRange.

    Only the first two pieces are consulted; anything after a second
    separator is ignored.
    """
    pieces = _split_range(text)
    if not pieces:
        return ParsedRange("", error=ERROR_TIME_PARSE)

    start, start_minutes = parse_time(pieces[0])
    if start_minutes is None:
        return ParsedRange(start, error=ERROR_START_INVALID)

    if len(pieces) == 1 or not pieces[1]:
        return ParsedRange(start, start_minutes=start_minutes)

    end, end_minutes = parse_time(pieces[1])
    if end_minutes is None:
        return ParsedRange(start, end, error=ERROR_END_INVALID, start_minutes=start_minutes)

    return ParsedRange(start, end, end_minutes < start_minutes, None, start_minutes)
