# suture/util/tz.py
from __future__ import annotations

import datetime as dt
import re
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

_OFFSET_RE = re.compile(r"^([+-])(\d{2}):?(\d{2})$")


def normalize_tz_name(name: Optional[str]) -> str:
    """Normalize a timezone identifier.

    Supported forms:
      - None/"" -> "local"
      - "local" / "system" -> "local" (the machine's local timezone)
      - "UTC" / "Z" / "GMT" -> "UTC"
      - IANA names, e.g. "Europe/Bucharest"
      - Fixed offsets: "+02:00", "+0200", "-05:00"
    """
    if name is None:
        return "local"
    s = str(name).strip()
    if not s:
        return "local"

    low = s.lower()
    if low in {"local", "system", "native"}:
        return "local"
    if low in {"utc", "z", "gmt", "utc0", "utc+0"}:
        return "UTC"
    return s


def resolve_tz(name: Optional[str]) -> dt.tzinfo:
    """Resolve a timezone name into a tzinfo.

    For "local", resolves to the machine's current local offset.
    For "UTC", resolves to dt.timezone.utc.
    Raises ValueError for invalid timezone identifiers.
    """
    tz_name = normalize_tz_name(name)

    if tz_name == "UTC":
        return dt.timezone.utc

    if tz_name == "local":
        tz = dt.datetime.now().astimezone().tzinfo
        return tz or dt.timezone.utc

    m = _OFFSET_RE.match(tz_name)
    if m:
        sign_s, hh_s, mm_s = m.groups()
        hh = int(hh_s)
        mm = int(mm_s)
        if hh > 23 or mm > 59:
            raise ValueError(f"Invalid timezone offset: {tz_name!r}")
        sign = 1 if sign_s == "+" else -1
        return dt.timezone(dt.timedelta(minutes=sign * (hh * 60 + mm)))

    try:
        return ZoneInfo(tz_name)
    except (ZoneInfoNotFoundError, ValueError, OSError) as ex:
        raise ValueError(f"Invalid timezone identifier: {tz_name!r}") from ex


def local_date(ms: float, tz: Optional[dt.tzinfo]) -> dt.date:
    # tz=None means the process-local zone, resolved per instant so DST is honoured.
    if tz is None:
        return dt.datetime.fromtimestamp(float(ms) / 1000.0).date()
    return dt.datetime.fromtimestamp(float(ms) / 1000.0, tz=tz).date()


def same_local_day(a_ms: float, b_ms: float, tz: Optional[dt.tzinfo]) -> bool:
    return local_date(a_ms, tz) == local_date(b_ms, tz)


def tzinfo_for(name: Optional[str]) -> Optional[dt.tzinfo]:
    """Like resolve_tz, but "local" maps to None (per-instant local offset)."""
    if normalize_tz_name(name) == "local":
        return None
    return resolve_tz(name)


def fmt_ms(ms: float, tz: Optional[dt.tzinfo]) -> str:
    if tz is None:
        t = dt.datetime.fromtimestamp(float(ms) / 1000.0)
    else:
        t = dt.datetime.fromtimestamp(float(ms) / 1000.0, tz=tz)
    return t.strftime("%Y-%m-%d %H:%M:%S")
