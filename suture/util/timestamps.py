# suture/util/timestamps.py
from __future__ import annotations

import datetime as dt
import re
from typing import Any, Optional

TW_UTC_RE = re.compile(r"^(\d{8})T(\d{6})Z$")  # e.g. 20251217T083000Z


def parse_tw_utc_to_epoch_ms(s: str) -> Optional[int]:
    """Epoch ms from compact Taskwarrior UTC or ISO-8601.

    ISO strings without an offset are taken as UTC.
    """
    if not s:
        return None

    m = TW_UTC_RE.match(s)
    if not m:
        try:
            d = dt.datetime.fromisoformat(s.replace("Z", "+00:00"))
        except ValueError:
            return None
        if d.tzinfo is None:
            d = d.replace(tzinfo=dt.timezone.utc)
        return int(d.timestamp() * 1000)

    try:
        aware = dt.datetime.strptime(m.group(1) + m.group(2), "%Y%m%d%H%M%S").replace(tzinfo=dt.timezone.utc)
    except ValueError:
        return None
    return int(aware.timestamp() * 1000)


def _utc(ms: float) -> dt.datetime:
    return dt.datetime.fromtimestamp(float(ms) / 1000.0, tz=dt.timezone.utc)


def format_tw_utc(ms: float) -> str:
    return _utc(ms).strftime("%Y%m%dT%H%M%SZ")


def format_iso_utc(ms: float) -> str:
    # 2020-01-01T11:00:00Z, or 2020-01-01T11:00:00.500Z with sub-second ms
    spec = "milliseconds" if int(round(ms)) % 1000 else "seconds"
    return _utc(round(ms)).replace(tzinfo=None).isoformat(timespec=spec) + "Z"


def format_like(existing: Any, ms: float) -> Any:
    """Render epoch ms in the same shape as an existing field value.

    Strings stay strings (compact TW UTC, epoch digits, or ISO-8601 UTC);
    anything else gets the bare number.
    """
    if not isinstance(existing, str) or isinstance(ms, bool):
        return ms
    s = existing.strip()
    if TW_UTC_RE.match(s):
        return format_tw_utc(ms)
    if s.lstrip("-").isdigit():
        return str(int(round(ms)))
    return format_iso_utc(ms)
