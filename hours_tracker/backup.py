"""
Canonical JSON backup of the application state.
"""

import json
from typing import Any

from .logging_utils import get_logger
from .models import (
    Activity,
    AppState,
    Meta,
    NewsItem,
    Objective,
    PartialState,
    Settings,
    hours_from_dict,
)


def export_json(state: AppState) -> str:
    """Full state as pretty-printed JSON (2-space indent, UTF-8 text kept as is)."""
    return json.dumps(state.to_dict(), indent=2, ensure_ascii=False)


def parse_backup(data: Any) -> PartialState:
    """
    Turn a decoded JSON backup into a PartialState.

    Only top-level keys that are present with the expected container type
    are supplied; everything inside them is coerced to the canonical types.
    A top level that is not an object yields an empty PartialState.

    Args:
        data: Result of json.loads()

    Returns:
        PartialState
    """
    logger = get_logger('backup')
    partial = PartialState()
    if not isinstance(data, dict):
        logger.debug("Backup top level is not an object")
        return partial

    for key in ('meta', 'settings', 'hours'):
        value = data.get(key)
        if value is None:
            continue
        if not isinstance(value, dict):
            logger.warning(f"Backup field '{key}' is not an object, ignored")
            continue
        if key == 'meta':
            partial.meta = Meta.from_dict(value)
        elif key == 'settings':
            partial.settings = Settings.from_dict(value)
        else:
            partial.hours = hours_from_dict(value)

    record_types = {'activities': Activity, 'objectives': Objective, 'news': NewsItem}
    for key, record_type in record_types.items():
        value = data.get(key)
        if value is None:
            continue
        if not isinstance(value, list):
            logger.warning(f"Backup field '{key}' is not a list, ignored")
            continue
        records = [record_type.from_dict(item) for item in value if isinstance(item, dict)]
        setattr(partial, key, records)

    return partial


def state_from_json(text: str) -> AppState:
    """
    Rebuild a full AppState from JSON text.

    Fields missing from the text keep their defaults.

    Raises:
        json.JSONDecodeError: If the text is not valid JSON
    """
    return parse_backup(json.loads(text)).merge_into(AppState(), touch=False)
