from __future__ import annotations

import logging
import os
from dataclasses import dataclass

import pytz
from dotenv import load_dotenv

load_dotenv()

DEFAULT_STORE = "timetable-store.json"
DEFAULT_TIMEZONE = "UTC"
DEFAULT_MODE = "table"


@dataclass
class Settings:
    store_path: str
    timezone: str
    mode: str


def get_timezone() -> str:
    tz_name = os.getenv("TIMETABLE_TIMEZONE", DEFAULT_TIMEZONE)
    try:
        pytz.timezone(tz_name)
    except pytz.UnknownTimeZoneError:
        logging.warning("Invalid TIMETABLE_TIMEZONE %s, falling back to %s", tz_name, DEFAULT_TIMEZONE)
        return DEFAULT_TIMEZONE
    return tz_name


def get_mode() -> str:
    mode = os.getenv("TIMETABLE_MODE", DEFAULT_MODE).strip().lower()
    if mode not in ("table", "lines"):
        logging.warning("Invalid TIMETABLE_MODE %s, falling back to %s", mode, DEFAULT_MODE)
        return DEFAULT_MODE
    return mode


def get_settings() -> Settings:
    return Settings(
        store_path=os.getenv("TIMETABLE_STORE", DEFAULT_STORE),
        timezone=get_timezone(),
        mode=get_mode(),
    )
