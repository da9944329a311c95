"""CSV table loading with per-row schema validation.

Each table is a header row followed by one row per entry; the first column is
the entry name. Rows are validated against ``schema/<kind>.schema.json``.
"""
from __future__ import annotations
import csv
import json
import re
from functools import lru_cache
from pathlib import Path
from typing import Dict, List

import jsonschema

from battlemon.core.errors import DataLoadError, ValidationError
from battlemon.core.logging import logger
from battlemon.core.paths import SCHEMA

Record = Dict[str, str]

_NUMERIC_RE = re.compile(r"-?\d+(\.\d+)?")
MOVE_SET_FIELD = "MoveSet"

def is_numeric(value: str) -> bool:
    """Optional sign, digits, optional decimal part."""
    return bool(_NUMERIC_RE.fullmatch(value.strip()))

def to_int(value: str) -> int:
    return int(float(value)) if "." in value else int(value)

def split_move_set(raw: str) -> List[str]:
    return [m.strip() for m in raw.split(";") if m.strip()]

@lru_cache(maxsize=None)
def _validator(schema_path: Path) -> jsonschema.Draft7Validator:
    try:
        schema = json.loads(schema_path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        raise DataLoadError(str(schema_path), str(e)) from e
    return jsonschema.Draft7Validator(schema)

def load_table(path: Path, kind: str, schema_dir: Path = SCHEMA) -> Dict[str, Record]:
    """Read a CSV table into ``{name: record}``.

    Empty cells are dropped so optional columns are simply absent from the record.
    Raises DataLoadError for unreadable files and ValidationError for rows that
    fail their schema or repeat a name.
    """
    validator = _validator(schema_dir / f"{kind}.schema.json")
    try:
        with path.open(newline="", encoding="utf-8") as fh:
            rows = list(csv.DictReader(fh))
    except OSError as e:
        raise DataLoadError(str(path), str(e)) from e
    table: Dict[str, Record] = {}
    for line_no, row in enumerate(rows, start=2):
        if None in row:
            raise ValidationError(f"{path.name}:{line_no}: more cells than header columns")
        record = {k.strip(): v.strip() for k, v in row.items() if v is not None and v.strip()}
        errors = sorted(validator.iter_errors(record), key=lambda e: list(e.path))
        if errors:
            raise ValidationError(f"{path.name}:{line_no}: {errors[0].message}")
        name = record["Name"]
        if name in table:
            raise ValidationError(f"{path.name}:{line_no}: duplicate entry '{name}'")
        table[name] = record
    logger.debug("TableLoaded", table=path.name, rows=len(table))
    return table

__all__ = ["Record", "is_numeric", "to_int", "split_move_set", "load_table", "MOVE_SET_FIELD"]
