from __future__ import annotations
import os
import sys
from typing import Any

def eprint(*args: Any) -> None:
    print(*args, file=sys.stderr)


def obs_enabled() -> bool:
    v = (os.getenv("SUTURE_OBS_LOG", "") or "").strip().lower()
    return v in {"1", "true", "yes", "on"}


def obs(component: str, msg: str) -> None:
    # e.g. [suture.merge] proposals=3 groups=2
    if obs_enabled():
        eprint(f"[suture.{component}] {msg}")
