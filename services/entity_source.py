"""
Entity source -- raw entity dicts from JSON, JSON-lines or CSV files.

CSV is read with pandas as plain strings; list columns stay ';'-separated
and are split by the entity models. Cells holding JSON arrays or objects
(e.g. an exported experience column) are decoded.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path

import pandas as pd

from domain.errors import EntitySourceError

logger = logging.getLogger(__name__)

# wrapper keys used by provider exports around the record list
_LIST_KEYS = ("items", "data", "results", "people", "companies", "signals")


def _unwrap(payload) -> list[dict]:
    if isinstance(payload, list):
        return [item for item in payload if isinstance(item, dict)]
    if isinstance(payload, dict):
        for key in _LIST_KEYS:
            if isinstance(payload.get(key), list):
                return _unwrap(payload[key])
        return [payload]
    return []


def _decode_cell(value: str):
    text = value.strip()
    if text[:1] in ("[", "{"):
        try:
            return json.loads(text)
        except json.JSONDecodeError:
            return value
    return value


def read_json(path: Path) -> list[dict]:
    with open(path, "r", encoding="utf-8") as f:
        return _unwrap(json.load(f))


def read_jsonl(path: Path) -> list[dict]:
    records = []
    with open(path, "r", encoding="utf-8") as f:
        for lineno, line in enumerate(f, 1):
            if not line.strip():
                continue
            try:
                records.extend(_unwrap(json.loads(line)))
            except json.JSONDecodeError as e:
                logger.warning("%s:%d is not valid JSON, skipped (%s)", path, lineno, e)
    return records


def read_csv(path: Path) -> list[dict]:
    df = pd.read_csv(path, encoding="utf-8", dtype=str).fillna("")
    records = []
    for row in df.to_dict(orient="records"):
        records.append({k: _decode_cell(v) for k, v in row.items() if v != ""})
    return records


_READERS = {
    ".json": read_json,
    ".jsonl": read_jsonl,
    ".ndjson": read_jsonl,
    ".csv": read_csv,
}


def load_entities(path) -> list[dict]:
    """Read every raw entity record from a file; the suffix picks the format."""
    path = Path(path)
    reader = _READERS.get(path.suffix.lower())
    if reader is None:
        raise EntitySourceError(f"Unsupported entity file type: {path.suffix or path.name}")
    if not path.exists():
        raise EntitySourceError(f"Entity file not found: {path}")
    try:
        records = reader(path)
    except (OSError, ValueError, pd.errors.ParserError) as e:
        raise EntitySourceError(f"Cannot read {path}: {e}") from e
    logger.info("Loaded %d entities from %s", len(records), path)
    return records
