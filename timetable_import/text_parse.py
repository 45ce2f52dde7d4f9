"""
Turn pasted schedule text into Block rows.

Two input modes:
- table: markdown-style pipe table, e.g.

    | Time        | Task      | Duration |
    |-------------|-----------|----------|
    | 9:00-10:00  | 🏃 Run    | 1h       |

- lines: one entry per line, e.g. "9:00-10:00 🏃 Run 1h" or "14:30 Call mom"

Every recognised line becomes a Block; parse problems travel on the
block's ``error`` field and are never raised.
"""
from __future__ import annotations

import dataclasses
import logging
import re
from typing import Iterable, List, Optional, Tuple

import emoji

from .models import Block
from .time_parse import ERROR_TIME_PARSE, parse_time_range

logger = logging.getLogger(__name__)

MODE_TABLE = "table"
MODE_LINES = "lines"
MODES = (MODE_TABLE, MODE_LINES)


# ──────────────────────────────────────────────────────────────────
#  Patterns
# ──────────────────────────────────────────────────────────────────

_TIME = r"\d{1,2}:\d{2}(?:\s*[AP]M\b)?"

_RANGE_LINE_RE = re.compile(
    rf"^\s*({_TIME})\s*[-–~]\s*({_TIME})\s*(.*)$",
    re.IGNORECASE,
)
_SINGLE_TIME_RE = re.compile(rf"\b{_TIME}\b", re.IGNORECASE)
_CELL_TIME_RE = re.compile(r"\d{1,2}:\d{2}")
_DURATION_RE = re.compile(r"(\d+(?:\.\d+)?h|\d+m)", re.IGNORECASE)

_COLUMN_SEP = "|"
_HEADER_WORDS = ("time", "时间")
_RULER_CHARS = frozenset("|-: ")


# ──────────────────────────────────────────────────────────────────
#  Row building
# ──────────────────────────────────────────────────────────────────

def split_icon(text: str) -> Tuple[Optional[str], str]:
    """
    Split a leading emoji off a title: '🗓️ Meeting' -> ('🗓️', 'Meeting').

    Emoji sequences (variation selectors, ZWJ families, flags) count as
    one icon. Text-default symbols such as '©' or '™' without VS16 are
    not emoji and stay in the title.
    """
    found = emoji.emoji_list(text)
    if not found or found[0]["match_start"] != 0:
        return None, text.strip()
    icon = found[0]["emoji"]
    if emoji.EMOJI_DATA.get(icon, {}).get("status") != emoji.STATUS["fully_qualified"]:
        return None, text.strip()
    return icon, text[found[0]["match_end"]:].strip()


def extract_duration(text: str) -> Optional[str]:
    """First '<num>h' or '<num>m' token in text, e.g. '1.5h', '30m'."""
    m = _DURATION_RE.search(text)
    return m.group(1) if m else None


def _strip_duration(title: str, duration: str) -> str:
    # Only a standalone token is removed, so '5min' is not cut to 'in'
    pattern = rf"(?<!\S){re.escape(duration)}(?!\S)"
    stripped = re.sub(pattern, " ", title, count=1)
    stripped = " ".join(stripped.split())
    return stripped or title


def build_block(time_text: str, title_text: str, duration_text: Optional[str] = None) -> Block:
    """
    Build one Block from a time token, a free-text title and an optional
    duration token.

    When no duration is given, one is looked up in the title and removed
    from it.
    """
    parsed = parse_time_range(time_text)
    title = title_text.strip()
    icon, clean_title = split_icon(title)
    if not clean_title:
        clean_title = title

    if duration_text is None:
        duration_text = extract_duration(clean_title)
        if duration_text is not None:
            clean_title = _strip_duration(clean_title, duration_text)

    return Block(
        start=parsed.start,
        end=parsed.end,
        title=clean_title,
        duration_text=duration_text,
        note="",
        tag=None,
        icon=icon,
        is_overnight=parsed.is_overnight,
        error=parsed.error,
        start_minutes=parsed.start_minutes,
    )


# ──────────────────────────────────────────────────────────────────
#  Line mode
# ──────────────────────────────────────────────────────────────────

def parse_line(line: str) -> Block:
    """
    Parse one free-text line.

    A leading range ('9:00 - 10:00 ...') wins; otherwise the first single
    time anywhere in the line is used and removed from the title. A line
    with no time at all becomes an error row holding the line as title.
    """
    m = _RANGE_LINE_RE.match(line)
    if m:
        start, end, rest = m.groups()
        return build_block(f"{start}-{end}", rest)

    m = _SINGLE_TIME_RE.search(line)
    if m:
        single = m.group(0)
        remainder = line.replace(single, "").strip()
        return build_block(single, remainder)

    return Block(start="", title=line, error=ERROR_TIME_PARSE)


def parse_lines(lines: Iterable[str]) -> List[Block]:
    rows: List[Block] = []
    for line in lines:
        trimmed = line.strip()
        if not trimmed:
            continue
        rows.append(parse_line(trimmed))
    return rows


# ──────────────────────────────────────────────────────────────────
#  Table mode
# ──────────────────────────────────────────────────────────────────

def _is_header(line: str) -> bool:
    if _COLUMN_SEP not in line:
        return False
    lowered = line.lower()
    return any(word in lowered for word in _HEADER_WORDS)


def _is_ruler(line: str) -> bool:
    return all(ch in _RULER_CHARS for ch in line)


def parse_table(lines: List[str]) -> List[Block]:
    """
    Parse a pipe-delimited table.

    Everything up to and including the first header line ('| Time | ...')
    is dropped, as are ruler lines. Each row maps its first three
    non-empty cells to (time, title, duration). Rows whose time cell has
    no 'H:MM' are skipped, not reported.
    """
    data_lines = lines
    for idx, line in enumerate(lines):
        if _is_header(line):
            data_lines = lines[idx + 1:]
            break

    rows: List[Block] = []
    for line in data_lines:
        trimmed = line.strip()
        if not trimmed or _is_ruler(trimmed):
            continue

        cells = [c.strip() for c in trimmed.split(_COLUMN_SEP)]
        cells = [c for c in cells if c]
        if not cells:
            continue

        time_text = cells[0]
        title_text = cells[1] if len(cells) > 1 else ""
        duration_text = cells[2] if len(cells) > 2 else None

        if not _CELL_TIME_RE.search(time_text):
            logger.debug("Skipping table row without a time: %r", trimmed)
            continue
        rows.append(build_block(time_text, title_text, duration_text))

    return rows


# ──────────────────────────────────────────────────────────────────
#  Post-processing and public entry points
# ──────────────────────────────────────────────────────────────────

def fill_end_times(blocks: List[Block]) -> List[Block]:
    """
    Give each open-ended block the start of the block right after it.

    Single forward pass; the last block stays open-ended. Returns a new
    list, the input blocks are not modified.
    """
    result = list(blocks)
    for idx in range(len(result) - 1):
        current = result[idx]
        nxt = result[idx + 1]
        if current.end is not None or nxt.start_minutes is None:
            continue
        result[idx] = dataclasses.replace(
            current,
            end=nxt.start,
            is_overnight=nxt.start_minutes < (current.start_minutes or 0),
        )
    return result


def parse(text: str, mode: str = MODE_TABLE) -> List[Block]:
    """
    Parse pasted text into ordered blocks.

    :param text: Raw text, table or one entry per line.
    :param mode: 'table' or 'lines'.

    Input order is kept; malformed lines come back as blocks with
    ``error`` set. Raises ValueError only for an unknown mode.
    """
    lines = text.splitlines()
    if mode == MODE_TABLE:
        rows = parse_table(lines)
    elif mode == MODE_LINES:
        rows = parse_lines(lines)
    else:
        raise ValueError(f"Unsupported mode: {mode}. Use table or lines.")

    rows = fill_end_times(rows)
    errors = sum(1 for r in rows if r.error)
    logger.debug("Parsed %d block(s) in %s mode, %d with errors", len(rows), mode, errors)
    return rows


def normalize(block: Block) -> Block:
    """
    Re-derive the time fields of an edited block.

    Only start, end, is_overnight, error and start_minutes change; the
    block is copied, never modified in place.
    """
    time_text = block.start if block.end is None else f"{block.start}-{block.end}"
    parsed = parse_time_range(time_text)
    return dataclasses.replace(
        block,
        start=parsed.start,
        end=parsed.end,
        is_overnight=parsed.is_overnight,
        error=parsed.error,
        start_minutes=parsed.start_minutes,
    )
