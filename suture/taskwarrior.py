# suture/taskwarrior.py
from __future__ import annotations

import json
import os
import shlex
import subprocess
import time
from typing import Any, Dict, Iterable, List, Sequence

from .errors import StoreError
from .store import RecordStore
from .util.console import eprint, obs
from .util.timestamps import format_tw_utc, parse_tw_utc_to_epoch_ms  # noqa: F401


def _task_timeout_s() -> float:
    raw = (os.getenv("SUTURE_TASK_TIMEOUT_S", "30") or "").strip()
    try:
        v = float(raw)
        if v > 0:
            return v
    except ValueError:
        pass
    return 30.0


def _run_task(args: Sequence[str], *, what: str) -> bytes:
    cmd = ["task", *args]
    timeout_s = _task_timeout_s()
    t0 = time.monotonic()
    try:
        proc = subprocess.run(
            cmd,
            stdin=subprocess.DEVNULL,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            check=False,
            timeout=timeout_s,
        )
    except FileNotFoundError as ex:
        raise StoreError("Taskwarrior binary 'task' not found on PATH.") from ex
    except subprocess.TimeoutExpired as ex:
        raise StoreError(f"Taskwarrior {what} timed out after {timeout_s:.1f}s.") from ex

    elapsed_ms = int((time.monotonic() - t0) * 1000)
    if proc.returncode != 0:
        out_err = b"\n".join(x for x in (proc.stdout, proc.stderr) if x)
        if out_err:
            eprint(out_err.decode("utf-8", errors="replace"))
        raise StoreError(f"Taskwarrior {what} failed (exit {proc.returncode}, {elapsed_ms}ms).")

    obs("taskwarrior", f"{what}.ok ms={elapsed_ms}")
    return proc.stdout or b""


def split_filter(filter_str: str) -> List[str]:
    if not filter_str.strip():
        return []
    try:
        return shlex.split(filter_str.strip(), posix=True)
    except ValueError as ex:
        raise StoreError(f"Invalid Taskwarrior filter expression: {ex}") from ex


def run_task_export(filter_str: str) -> List[Dict[str, Any]]:
    out = _run_task([*split_filter(filter_str), "export"], what="export")
    text = out.decode("utf-8", errors="replace").strip()
    if not text:
        return []
    try:
        data = json.loads(text)
    except ValueError as ex:
        raise StoreError(f"Failed to parse `task export` JSON: {ex}") from ex
    if not isinstance(data, list):
        raise StoreError("task export did not return a JSON list")
    obs("taskwarrior", f"export tasks={len(data)}")
    return [t for t in data if isinstance(t, dict)]


def _tw_value(v: Any) -> str:
    # Epoch-ms numbers become Taskwarrior's compact UTC form; the rest is passed verbatim.
    if isinstance(v, (int, float)) and not isinstance(v, bool):
        return format_tw_utc(v)
    return str(v)


class TaskwarriorStore(RecordStore):
    """Tasks from `task <filter> export`, keyed by uuid.

    Date attributes (scheduled, due, start, end, date UDAs) come back as
    compact UTC strings; normalize_row parses them into epoch ms.
    """

    id_field = "uuid"

    def __init__(self, filter_str: str = "") -> None:
        self.filter_str = filter_str
        split_filter(filter_str)

    def read_rows(self) -> List[Dict[str, Any]]:
        return run_task_export(self.filter_str)

    def update_record(self, record_id: str, values: Dict[str, Any]) -> None:
        if not values:
            return
        mods = [f"{k}:{_tw_value(v)}" for k, v in values.items()]
        _run_task(["rc.confirmation=off", str(record_id), "modify", *mods], what="modify")

    def delete_records(self, record_ids: Iterable[str]) -> None:
        ids = [str(x) for x in record_ids]
        if not ids:
            return
        _run_task(["rc.confirmation=off", *ids, "delete"], what="delete")
