"""Data models for schedule blocks and templates."""
from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


NEXT_DAY_LABEL = "next day"
NEW_BLOCK_TITLE = "New block"


def _new_id() -> str:
    return str(uuid.uuid4())


@dataclass
class Block:
    """One time-tagged entry of a day schedule."""
    start: str
    end: Optional[str] = None
    title: str = ""
    duration_text: Optional[str] = None
    note: str = ""
    tag: Optional[str] = None
    icon: Optional[str] = None
    is_overnight: bool = False
    error: Optional[str] = None
    start_minutes: Optional[int] = None
    id: str = field(default_factory=_new_id)

    @classmethod
    def blank(cls) -> "Block":
        """Default block offered when the user adds a row by hand."""
        return cls(start="09:00", start_minutes=540)

    @property
    def is_valid(self) -> bool:
        return self.error is None

    @property
    def time_range(self) -> str:
        if self.end is None:
            return self.start
        if self.is_overnight:
            return f"{self.start} → {NEXT_DAY_LABEL} {self.end}"
        return f"{self.start} - {self.end}"

    def to_dict(self) -> Dict[str, Any]:
        """Persisted shape; absent optionals are left out."""
        data: Dict[str, Any] = {
            "id": self.id,
            "start": self.start,
            "end": self.end,
            "title": self.title,
            "durationText": self.duration_text,
            "note": self.note,
            "tag": self.tag,
            "icon": self.icon,
            "isOvernight": self.is_overnight,
            "error": self.error,
            "startMinutes": self.start_minutes,
        }
        return {k: v for k, v in data.items() if v is not None}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Block":
        if not isinstance(data, dict):
            raise ValueError(f"Block must be an object, got {type(data).__name__}")
        start = data.get("start")
        if not isinstance(start, str):
            raise ValueError("Block is missing 'start'")
        minutes = data.get("startMinutes")
        return cls(
            id=str(data.get("id") or _new_id()),
            start=start,
            end=data.get("end"),
            title=data.get("title") or "",
            duration_text=data.get("durationText"),
            note=data.get("note") or "",
            tag=data.get("tag"),
            icon=data.get("icon"),
            is_overnight=bool(data.get("isOvernight", False)),
            error=data.get("error"),
            start_minutes=int(minutes) if minutes is not None else None,
        )


@dataclass
class Template:
    """A named, reusable list of blocks."""
    title: str
    blocks: List[Block] = field(default_factory=list)
    id: str = field(default_factory=_new_id)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "blocks": [b.to_dict() for b in self.blocks],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Template":
        if not isinstance(data, dict):
            raise ValueError(f"Template must be an object, got {type(data).__name__}")
        blocks = data.get("blocks") or []
        if not isinstance(blocks, list):
            raise ValueError("Template 'blocks' must be a list")
        return cls(
            id=str(data.get("id") or _new_id()),
            title=str(data.get("title") or ""),
            blocks=[Block.from_dict(b) for b in blocks],
        )


# ──────────────────────────────────────────────────────────────────
#  Seed templates
# ──────────────────────────────────────────────────────────────────

_SEED = {
    "Workday": [
        ("08:00", "09:00", "Meeting", "Work", "🗓️"),
        ("10:00", "12:00", "Focus work", "Work", "💻"),
        ("13:00", "14:00", "Lunch", "Health", "🥗"),
    ],
    "Weekend": [
        ("09:00", "10:00", "Exercise", "Health", "🏃"),
        ("11:00", "12:00", "Chores", "Home", "🧹"),
        ("14:00", "15:00", "Relax", "Life", "🌿"),
    ],
    "Exam": [
        ("09:00", "10:00", "Study", "Study", "📚"),
        ("12:00", "13:00", "Practice", "Study", "📝"),
        ("15:00", "16:00", "Review", "Study", "✅"),
    ],
}


def seed_templates() -> List[Template]:
    """Fresh copies of the built-in templates (new ids each call)."""
    templates = []
    for name, rows in _SEED.items():
        blocks = []
        for start, end, title, tag, icon in rows:
            hour, minute = (int(x) for x in start.split(":"))
            blocks.append(Block(
                start=start,
                end=end,
                title=title,
                tag=tag,
                icon=icon,
                start_minutes=hour * 60 + minute,
            ))
        templates.append(Template(title=name, blocks=blocks))
    return templates
