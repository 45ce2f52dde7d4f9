"""
Local JSON store for today's blocks and saved templates.

Document layout (UTF-8 JSON):

    {"todayBlocks": [Block...], "templates": [{"id", "title", "blocks"}]}

Every mutation is written back immediately when the store has a path.
"""
from __future__ import annotations

import dataclasses
import json
import logging
import os
import tempfile
from datetime import datetime
from pathlib import Path
from typing import Iterable, List, Optional

from .models import NEW_BLOCK_TITLE, Block, Template, seed_templates
from .text_parse import normalize

logger = logging.getLogger(__name__)

IMPORTED_TEMPLATE_FORMAT = "Imported {stamp}"


class Store:
    """In-memory collection of blocks and templates, optionally backed by a file."""

    def __init__(
        self,
        path: str | Path | None = None,
        today_blocks: Optional[List[Block]] = None,
        templates: Optional[List[Template]] = None,
    ):
        self.path = Path(path) if path is not None else None
        self.today_blocks: List[Block] = list(today_blocks or [])
        self.templates: List[Template] = list(templates) if templates is not None else seed_templates()

    # ── persistence ───────────────────────────────────────────────

    @classmethod
    def load(cls, path: str | Path) -> "Store":
        """
        Load a store from path.

        A missing file gives a fresh store with the seed templates; so
        does a file that cannot be decoded, after logging a warning.
        """
        path = Path(path)
        if not path.exists():
            return cls(path)
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
            if not isinstance(data, dict):
                raise ValueError("store document must be an object")
            blocks = [Block.from_dict(b) for b in data.get("todayBlocks") or []]
            templates = [Template.from_dict(t) for t in data.get("templates") or []]
        except (OSError, ValueError, TypeError) as e:
            logger.warning("Ignoring unreadable store %s: %s", path, e)
            return cls(path)
        return cls(path, blocks, templates)

    def to_dict(self) -> dict:
        return {
            "todayBlocks": [b.to_dict() for b in self.today_blocks],
            "templates": [t.to_dict() for t in self.templates],
        }

    def save(self, path: str | Path | None = None) -> None:
        """Write the document atomically. OSError propagates to the caller."""
        target = Path(path) if path is not None else self.path
        if target is None:
            raise ValueError("Store has no path to save to.")
        target.parent.mkdir(parents=True, exist_ok=True)
        payload = json.dumps(self.to_dict(), indent=2, ensure_ascii=False)
        fd, tmp = tempfile.mkstemp(dir=target.parent, prefix=f".{target.name}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(payload)
            os.replace(tmp, target)
        except BaseException:
            Path(tmp).unlink(missing_ok=True)
            raise

    def _changed(self) -> None:
        if self.path is not None:
            self.save()

    # ── blocks ────────────────────────────────────────────────────

    def sorted_blocks(self) -> List[Block]:
        """Display order: by start minute, blocks without one first."""
        return sorted(self.today_blocks, key=lambda b: b.start_minutes or 0)

    def find_block(self, block_id: str) -> Optional[Block]:
        return next((b for b in self.today_blocks if b.id == block_id), None)

    def import_blocks(self, blocks: Iterable[Block]) -> None:
        self.today_blocks = list(blocks)
        self._changed()

    def confirm_import(
        self,
        preview: Iterable[Block],
        save_template: bool = False,
        now: datetime | None = None,
    ) -> List[Block]:
        """
        Replace today's blocks with the valid rows of a parse preview.

        Rows carrying an error are left out. When nothing is valid the
        store is untouched. Returns the imported rows.
        """
        valid = [b for b in preview if b.is_valid]
        if not valid:
            return []
        self.today_blocks = valid
        if save_template:
            stamp = (now or datetime.now()).strftime("%m-%d %H:%M")
            self.templates.insert(0, Template(
                title=IMPORTED_TEMPLATE_FORMAT.format(stamp=stamp),
                blocks=[dataclasses.replace(b) for b in valid],
            ))
        self._changed()
        return valid

    def add_block(self, block: Block) -> Block:
        block = _with_title(normalize(block))
        self.today_blocks.append(block)
        self._changed()
        return block

    def update_block(self, block: Block) -> Optional[Block]:
        """Replace the block with the same id; None when it is not stored."""
        for idx, existing in enumerate(self.today_blocks):
            if existing.id == block.id:
                updated = _with_title(normalize(block))
                self.today_blocks[idx] = updated
                self._changed()
                return updated
        return None

    def delete_block(self, block_id: str) -> None:
        self.today_blocks = [b for b in self.today_blocks if b.id != block_id]
        self._changed()

    # ── templates ─────────────────────────────────────────────────

    def find_template(self, key: str) -> Optional[Template]:
        """Look a template up by id, then by title (case-insensitive)."""
        for t in self.templates:
            if t.id == key:
                return t
        lowered = key.strip().lower()
        return next((t for t in self.templates if t.title.lower() == lowered), None)

    def apply_template(self, template: Template) -> None:
        self.today_blocks = [dataclasses.replace(b) for b in template.blocks]
        self._changed()

    def add_template(self, title: str, blocks: Iterable[Block]) -> Template:
        template = Template(title=title, blocks=list(blocks))
        self.templates.insert(0, template)
        self._changed()
        return template

    def update_template(self, template: Template) -> None:
        for idx, existing in enumerate(self.templates):
            if existing.id == template.id:
                self.templates[idx] = template
                self._changed()
                return

    def delete_template(self, template_id: str) -> None:
        self.templates = [t for t in self.templates if t.id != template_id]
        self._changed()


def _with_title(block: Block) -> Block:
    if block.title.strip():
        return block
    block.title = NEW_BLOCK_TITLE
    return block
