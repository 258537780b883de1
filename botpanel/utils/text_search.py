"""Substring search over stringified rows.

A row matches when the lowercase JSON serialization of the row contains the
lowercase search term. Used by the API search endpoints and by the client
stores for local filtering.
"""
import json
from typing import Any, Iterable, List, Mapping, Optional, Sequence

# Vectors are long float lists; they would make almost any digit match.
DEFAULT_EXCLUDED_FIELDS = ("embedding",)


def stringify_row(row: Mapping[str, Any], exclude: Sequence[str] = DEFAULT_EXCLUDED_FIELDS) -> str:
    payload = {k: v for k, v in row.items() if k not in exclude}
    return json.dumps(payload, default=str, ensure_ascii=False, sort_keys=True).lower()


def row_matches(row: Mapping[str, Any], term: Optional[str], exclude: Sequence[str] = DEFAULT_EXCLUDED_FIELDS) -> bool:
    if not term:
        return True
    return term.lower() in stringify_row(row, exclude)


def filter_rows(rows: Iterable[Mapping[str, Any]], term: Optional[str]) -> List[Mapping[str, Any]]:
    return [row for row in rows if row_matches(row, term)]
