# suture/normalize.py
from __future__ import annotations

import json
import math
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional, Tuple

from .model import IntervalRecord, Number
from .util.console import obs
from .util.duration import parse_duration_value
from .util.timestamps import parse_tw_utc_to_epoch_ms


@dataclass(frozen=True)
class FieldMap:
    start_field: str
    end_field: str
    group_fields: Tuple[str, ...] = ()
    duration_field: Optional[str] = None
    id_field: str = "id"


def parse_instant_ms(v: Any) -> Optional[Number]:
    """Epoch ms from a raw field value; None for missing/zero/unparseable."""
    if v is None or isinstance(v, bool):
        return None
    if isinstance(v, (int, float)):
        if not math.isfinite(v) or not v:
            return None
        return v
    s = str(v).strip()
    if not s:
        return None
    if s.lstrip("-").isdigit():
        n = int(s)
        return n or None
    return parse_tw_utc_to_epoch_ms(s) or None


def group_value(v: Any) -> str:
    """Canonical text for a grouping field so equality is well-defined."""
    if v is None:
        return ""
    if isinstance(v, str):
        return v
    if isinstance(v, bool):
        return "true" if v else "false"
    if isinstance(v, (int, float)):
        return str(v)
    try:
        return json.dumps(v, sort_keys=True, separators=(",", ":"), ensure_ascii=False)
    except (TypeError, ValueError):
        return str(v)


def normalize_row(row: Dict[str, Any], fields: FieldMap) -> Optional[IntervalRecord]:
    rid = row.get(fields.id_field)
    if rid is None or not str(rid).strip():
        return None

    start = parse_instant_ms(row.get(fields.start_field))
    end = parse_instant_ms(row.get(fields.end_field))
    if start is None or end is None:
        return None

    duration = None
    if fields.duration_field:
        duration = parse_duration_value(row.get(fields.duration_field))

    return IntervalRecord(
        id=str(rid),
        start=start,
        end=end,
        group_keys=tuple(group_value(row.get(f)) for f in fields.group_fields),
        duration=duration,
    )


def normalize_rows(rows: Iterable[Dict[str, Any]], fields: FieldMap) -> Tuple[List[IntervalRecord], int]:
    """Return (records, dropped) where dropped counts rows without id/start/end."""
    out: List[IntervalRecord] = []
    dropped = 0
    for row in rows:
        rec = normalize_row(row, fields) if isinstance(row, dict) else None
        if rec is None:
            dropped += 1
            rid = row.get(fields.id_field) if isinstance(row, dict) else None
            obs("normalize", f"WARN: skipping row id={rid!r} (missing id, start or end)")
            continue
        out.append(rec)
    return out, dropped
