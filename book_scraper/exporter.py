"""JSON export of single records and whole collections."""

import json
import os
import re
from datetime import date
from typing import Optional, Union

from .models import is_sentinel

_UNSAFE_RE = re.compile(r"[^a-z0-9]", re.IGNORECASE)

# Keys that never hold a sentinel and are kept as-is by filter_sentinels.
_KEEP_KEYS = ("id", "sourceUrl")


def record_filename(title: str) -> str:
    return f"{_UNSAFE_RE.sub('_', title or '').lower()}_scraped.json"


def collection_filename(day: Optional[date] = None) -> str:
    day = day or date.today()
    return f"web_scraper_collection_{day.isoformat()}.json"


def filter_sentinels(record: dict) -> dict:
    """Blank out "not found" values so consumers see empty strings instead."""
    return {
        k: ("" if k not in _KEEP_KEYS and isinstance(v, str) and is_sentinel(v) else v)
        for k, v in record.items()
    }


def to_json(payload: Union[dict, list]) -> str:
    return json.dumps(payload, indent=2, ensure_ascii=False)


def write_json(payload: Union[dict, list], directory: str, filename: str) -> str:
    os.makedirs(directory, exist_ok=True)
    path = os.path.join(directory, filename)
    with open(path, "w", encoding="utf-8") as f:
        f.write(to_json(payload))
        f.write("\n")
    return path
