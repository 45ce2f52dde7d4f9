"""
Command-line interface: parse pasted schedule text, preview it, export
it, or import it into the local store.
"""
from __future__ import annotations

import argparse
import logging
import sys
from datetime import date
from pathlib import Path
from typing import List

from . import __version__
from .config import get_settings
from .export import export
from .models import Block
from .store import Store
from .text_parse import MODES, parse


def _read_input(source: str | None) -> str:
    if source is None or source == "-":
        return sys.stdin.read()
    p = Path(source)
    if not p.exists():
        raise FileNotFoundError(f"input file not found: {p}")
    return p.read_text(encoding="utf-8")


def _print_blocks(blocks: List[Block]) -> None:
    for b in blocks:
        icon = f"{b.icon} " if b.icon else ""
        duration = f"  ({b.duration_text})" if b.duration_text else ""
        marker = f"  [!] {b.error}" if b.error else ""
        print(f"{b.time_range:<24} {icon}{b.title}{duration}{marker}")


def main(argv: List[str] | None = None) -> int:
    settings = get_settings()
    parser = argparse.ArgumentParser(
        prog="timetable-import",
        description=(
            "Turn a pasted timetable (markdown table or one 'time title' per line) into schedule blocks.\n"
            "- Preview by default, export with -o, or import into the local store with --confirm."
        ),
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "input",
        nargs="?",
        help="Text file to parse. Omit or use '-' to read stdin.",
    )
    parser.add_argument(
        "-m",
        "--mode",
        choices=list(MODES),
        default=settings.mode,
        help=f"How the text is laid out. Default: {settings.mode}",
    )
    parser.add_argument(
        "-o",
        "--output",
        help="Export path (without extension). If omitted, the parsed blocks are printed.",
    )
    parser.add_argument(
        "-f",
        "--format",
        choices=["ics", "csv", "json"],
        default="json",
        help="Export format. Default: json",
    )
    parser.add_argument(
        "--date",
        metavar="YYYY-MM-DD",
        help="(ics) Day the blocks belong to. Default: today.",
    )
    parser.add_argument(
        "--timezone",
        default=settings.timezone,
        help=f"(ics) Timezone name for events. Default: {settings.timezone}",
    )
    parser.add_argument(
        "--store",
        default=settings.store_path,
        metavar="PATH",
        help=f"Local store file. Default: {settings.store_path}",
    )
    parser.add_argument(
        "--confirm",
        action="store_true",
        help="Import the valid parsed blocks as today's schedule (rows with errors are left out).",
    )
    parser.add_argument(
        "--save-template",
        action="store_true",
        help="With --confirm, also save the imported blocks as a new template.",
    )
    parser.add_argument(
        "--strict",
        action="store_true",
        help="Exit with status 2 when any parsed row has an error.",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Log debug details.")

    commands = parser.add_mutually_exclusive_group()
    commands.add_argument(
        "--list-templates",
        action="store_true",
        help="List saved templates then exit.",
    )
    commands.add_argument(
        "--apply-template",
        metavar="NAME",
        help="Replace today's schedule with a saved template (by title or id) then exit.",
    )
    commands.add_argument(
        "--show",
        action="store_true",
        help="Print today's schedule in time order then exit.",
    )
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if args.list_templates or args.apply_template or args.show:
        try:
            store = Store.load(args.store)
            if args.list_templates:
                for t in store.templates:
                    print(f"{t.title:<24} {len(t.blocks)} block(s)  {t.id}")
                return 0
            if args.show:
                blocks = store.sorted_blocks()
                if not blocks:
                    print("No blocks scheduled.")
                _print_blocks(blocks)
                return 0
            template = store.find_template(args.apply_template)
            if template is None:
                print(f"Error: no template named {args.apply_template!r}", file=sys.stderr)
                return 1
            store.apply_template(template)
        except OSError as e:
            print(f"Error updating store: {e}", file=sys.stderr)
            return 1
        print(f"Applied template {template.title!r} ({len(template.blocks)} block(s))")
        return 0

    try:
        text = _read_input(args.input)
    except (OSError, UnicodeDecodeError) as e:
        print(f"Error reading input: {e}", file=sys.stderr)
        return 1

    blocks = parse(text, args.mode)
    errors = [b for b in blocks if b.error]

    if args.output:
        ext = "." + args.format
        out_path = Path(args.output) if Path(args.output).suffix else Path(args.output + ext)
        try:
            day = date.fromisoformat(args.date) if args.date else None
            export(blocks, out_path, args.format, day=day, tz_name=args.timezone)
        except (OSError, ValueError) as e:
            print(f"Error exporting: {e}", file=sys.stderr)
            return 1
        print(f"Exported {len(blocks)} block(s) to {out_path}")
    else:
        _print_blocks(blocks)

    if errors:
        print(f"{len(errors)} row(s) could not be fully parsed", file=sys.stderr)

    if args.confirm:
        try:
            store = Store.load(args.store)
            imported = store.confirm_import(blocks, save_template=args.save_template)
        except OSError as e:
            print(f"Error updating store: {e}", file=sys.stderr)
            return 1
        if imported:
            print(f"Imported {len(imported)} block(s) into {args.store}")
        else:
            print("Nothing to import: no valid rows.", file=sys.stderr)

    if args.strict and errors:
        return 2
    return 0


if __name__ == "__main__":
    sys.exit(main())
