from __future__ import annotations

import math
import re
from typing import Any, Optional

# Taskwarrior duration UDA typically stores ISO-8601: PT10M, PT1H30M, etc.
_ISO_RE = re.compile(r"^P(?:(\d+)D)?(?:T(?:(\d+)H)?(?:(\d+)M)?(?:(\d+)S)?)?$", re.IGNORECASE)


def parse_iso_duration_to_minutes(s: str | None) -> Optional[float]:
    if not s:
        return None
    ss = str(s).strip()
    if not ss or ss.upper() in {"P", "PT"}:
        return None

    m = _ISO_RE.match(ss)
    if not m:
        return None

    d = int(m.group(1) or 0)
    h = int(m.group(2) or 0)
    mn = int(m.group(3) or 0)
    sec = int(m.group(4) or 0)

    return float(d * 1440 + h * 60 + mn) + sec / 60.0


def parse_duration_value(v: Any) -> Optional[float]:
    """Coerce a raw duration field value into a number (caller units).

    Numbers pass through, numeric strings are parsed, ISO-8601 durations are
    converted to minutes. Anything else is treated as missing.
    """
    if v is None or isinstance(v, bool):
        return None
    if isinstance(v, (int, float)):
        return v if math.isfinite(v) else None
    s = str(v).strip()
    if not s:
        return None
    try:
        f = float(s)
    except ValueError:
        return parse_iso_duration_to_minutes(s)
    return f if math.isfinite(f) else None
