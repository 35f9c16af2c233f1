"""Repository for persisted preferences: display settings and recent searches."""

import json
import logging
import sqlite3
from typing import Any

from pydantic import ValidationError

from weatherdash.config.defaults import DEFAULT_SETTINGS, RECENT_SEARCHES_KEY, SETTINGS_KEY
from weatherdash.config.schema import DisplaySettings

logger = logging.getLogger(__name__)

RECENT_SEARCHES_LIMIT = 5


# --- Raw key/value ---

def get_preference(conn: sqlite3.Connection, key: str) -> str | None:
    row = conn.execute(
        "SELECT value FROM preferences WHERE key = ?", (key,)
    ).fetchone()
    if row is None:
        return None
    return row[0]


def set_preference(conn: sqlite3.Connection, key: str, value: str) -> None:
    conn.execute(
        "INSERT INTO preferences (key, value, updated_at) VALUES (?, ?, CURRENT_TIMESTAMP) "
        "ON CONFLICT(key) DO UPDATE SET value = excluded.value, updated_at = CURRENT_TIMESTAMP",
        (key, value),
    )
    conn.commit()


def _load_json(conn: sqlite3.Connection, key: str) -> Any:
    raw = get_preference(conn, key)
    if raw is None:
        return None
    try:
        return json.loads(raw)
    except json.JSONDecodeError:
        logger.warning("Ignoring corrupt preference %s", key)
        return None


# --- Settings ---

def load_settings(
    conn: sqlite3.Connection, defaults: DisplaySettings | None = None
) -> DisplaySettings:
    """Stored settings merged over defaults.

    Unknown keys are dropped and any key whose stored value no longer
    validates falls back to its default.
    """
    defaults = defaults or DEFAULT_SETTINGS
    stored = _load_json(conn, SETTINGS_KEY)
    if not isinstance(stored, dict):
        return defaults

    merged = defaults.model_dump()
    for key, value in stored.items():
        if key not in DisplaySettings.model_fields:
            logger.debug("Dropping unknown setting %s", key)
            continue
        candidate = {**merged, key: value}
        try:
            DisplaySettings(**candidate)
        except ValidationError:
            logger.warning("Invalid stored value for %s=%r, using default", key, value)
            continue
        merged = candidate

    return DisplaySettings(**merged)


def save_settings(conn: sqlite3.Connection, settings: DisplaySettings) -> None:
    set_preference(conn, SETTINGS_KEY, settings.model_dump_json())


# --- Recent searches ---

def load_recent_searches(conn: sqlite3.Connection) -> list[str]:
    stored = _load_json(conn, RECENT_SEARCHES_KEY)
    if not isinstance(stored, list):
        return []
    return [s for s in stored if isinstance(s, str)]


def save_recent_search(
    conn: sqlite3.Connection,
    label: str,
    limit: int = RECENT_SEARCHES_LIMIT,
) -> list[str]:
    """Move `label` to the front of the list, dedupe, cap. Returns the new list."""
    searches = [s for s in load_recent_searches(conn) if s != label]
    searches.insert(0, label)
    searches = searches[:limit]
    set_preference(conn, RECENT_SEARCHES_KEY, json.dumps(searches))
    return searches
