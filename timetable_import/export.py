"""
Export schedule blocks to ICS, CSV, and JSON.
"""
from __future__ import annotations

import csv
import hashlib
import json
from datetime import date, datetime, timedelta, timezone
from pathlib import Path
from typing import Iterable, List

import icalendar
import pytz

from .models import Block

CSV_FIELDS = [
    "id", "start", "end", "title", "durationText", "note",
    "tag", "icon", "isOvernight", "error", "startMinutes",
]


def _clock(day: date, hhmm: str) -> datetime:
    """Combine a day with an 'HH:MM' string; ValueError if it is not a real clock time."""
    return datetime.strptime(f"{day.isoformat()} {hhmm}", "%Y-%m-%d %H:%M")


def export_ics(blocks: Iterable[Block], out_path: str | Path, day: date | None = None, tz_name: str = "UTC") -> None:
    """
    Export one day's blocks to iCalendar (.ics).

    Blocks with an error or no end are skipped. Overnight blocks end on
    the following day.
    """
    day = day or date.today()
    tz = pytz.timezone(tz_name)

    cal = icalendar.Calendar()
    cal.add("prodid", "-//Timetable Import//EN")
    cal.add("version", "2.0")
    cal.add("calscale", "GREGORIAN")
    cal.add("x-wr-calname", f"Timetable {day.isoformat()}")
    cal.add("x-wr-timezone", tz_name)

    for b in blocks:
        if b.error or not b.end:
            continue
        try:
            start = _clock(day, b.start)
            end = _clock(day + timedelta(days=1) if b.is_overnight else day, b.end)
        except ValueError:
            continue

        summary = f"{b.icon} {b.title}" if b.icon else b.title
        desc_lines = []
        if b.duration_text:
            desc_lines.append(f"Duration: {b.duration_text}")
        if b.note:
            desc_lines.append(b.note)

        event = icalendar.Event()
        uid_hash = hashlib.md5(f"{b.id}-{day.isoformat()}".encode("utf-8")).hexdigest()
        event.add("uid", f"{uid_hash}@timetable-import")
        event.add("summary", summary)
        if desc_lines:
            event.add("description", "\n".join(desc_lines))
        if b.tag:
            event.add("categories", [b.tag])
        event.add("dtstart", tz.localize(start))
        event.add("dtend", tz.localize(end))
        event.add("dtstamp", datetime.now(timezone.utc))
        cal.add_component(event)

    Path(out_path).write_text(cal.to_ical().decode("utf-8"), encoding="utf-8")


def export_csv(blocks: Iterable[Block], out_path: str | Path) -> None:
    """Export blocks to CSV, one row per block."""
    with open(out_path, "w", newline="", encoding="utf-8") as f:
        w = csv.DictWriter(f, fieldnames=CSV_FIELDS, extrasaction="ignore")
        w.writeheader()
        w.writerows(b.to_dict() for b in blocks)


def export_json(blocks: Iterable[Block], out_path: str | Path) -> None:
    """Export blocks to JSON in the stored block shape."""
    data: List[dict] = [b.to_dict() for b in blocks]
    Path(out_path).write_text(
        json.dumps(data, indent=2, ensure_ascii=False), encoding="utf-8"
    )


def export(
    blocks: Iterable[Block],
    out_path: str | Path,
    fmt: str,
    day: date | None = None,
    tz_name: str = "UTC",
) -> None:
    """Export to the given format: ics, csv, or json."""
    fmt = fmt.lower()
    if fmt == "ics":
        export_ics(blocks, out_path, day=day, tz_name=tz_name)
    elif fmt == "csv":
        export_csv(blocks, out_path)
    elif fmt == "json":
        export_json(blocks, out_path)
    else:
        raise ValueError(f"Unsupported format: {fmt}. Use ics, csv, or json.")
