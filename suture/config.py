# suture/config.py
from __future__ import annotations

import json
import os
from typing import Any, Dict, Optional

from .model import MergeConfig
from .util.tz import normalize_tz_name

_FIELD_KEYS = ("start_field", "end_field", "group_fields", "duration_field", "id_field")


def load_config_file(path: Optional[str]) -> Dict[str, Any]:
    """Load a JSON config file.

    Recognized keys:
      tolerance_ms (int > 0)
      same_day (bool)
      tz (timezone name, see util.tz)
      duration_unit_ms (number > 0)
      start_field / end_field / duration_field / id_field (str)
      group_fields (list of str)

    Unknown keys are ignored. Raises ValueError on malformed values.
    """
    if not path:
        return {}
    with open(path, "r", encoding="utf-8") as f:
        raw = json.load(f)
    if not isinstance(raw, dict):
        raise ValueError(f"config must be a JSON object; got {type(raw).__name__}")

    out: Dict[str, Any] = {}
    if "tolerance_ms" in raw:
        v = raw["tolerance_ms"]
        if isinstance(v, bool) or not isinstance(v, int) or v <= 0:
            raise ValueError("tolerance_ms must be a positive integer")
        out["tolerance_ms"] = v
    if "same_day" in raw:
        if not isinstance(raw["same_day"], bool):
            raise ValueError("same_day must be true or false")
        out["same_day"] = raw["same_day"]
    if "tz" in raw:
        out["tz"] = normalize_tz_name(raw["tz"])
    if raw.get("duration_unit_ms") is not None:
        v = raw["duration_unit_ms"]
        if isinstance(v, bool) or not isinstance(v, (int, float)) or v <= 0:
            raise ValueError("duration_unit_ms must be a positive number")
        out["duration_unit_ms"] = float(v)

    for k in _FIELD_KEYS:
        if k not in raw or raw[k] is None:
            continue
        v = raw[k]
        if k == "group_fields":
            if not isinstance(v, list) or not all(isinstance(x, str) for x in v):
                raise ValueError("group_fields must be a list of strings")
            out[k] = tuple(v)
        else:
            if not isinstance(v, str) or not v.strip():
                raise ValueError(f"{k} must be a non-empty string")
            out[k] = v.strip()
    return out


def default_tz() -> str:
    return normalize_tz_name(os.getenv("SUTURE_TZ", "local"))


def merge_config_from(file_cfg: Dict[str, Any], **overrides: Any) -> MergeConfig:
    """Build a MergeConfig: overrides (non-None) beat file values beat defaults."""
    vals: Dict[str, Any] = {"tz": default_tz()}
    for k in ("tolerance_ms", "same_day", "tz", "duration_unit_ms"):
        if k in file_cfg:
            vals[k] = file_cfg[k]
        if overrides.get(k) is not None:
            vals[k] = overrides[k]
    vals["tz"] = normalize_tz_name(vals.get("tz"))
    return MergeConfig(**vals)
