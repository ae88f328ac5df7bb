#!/usr/bin/env python3
from __future__ import annotations

import argparse
import json
import sys
from typing import Any, Dict, List, Optional

from .apply import ApplyJournal, apply_proposals, summarize_outcomes
from .config import load_config_file, merge_config_from
from .errors import InvalidRecordError, StoreError
from .merge import compute_proposals
from .normalize import FieldMap, normalize_rows
from .render import proposals_to_json, render_proposals_text
from .store import JsonTableStore, RecordStore
from .taskwarrior import TaskwarriorStore
from .util.console import eprint
from .util.tz import tzinfo_for


def _die(msg: str, rc: int = 2) -> int:
    print(f"[suture] ERROR: {msg}", file=sys.stderr)
    return rc


def _build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        prog="suture",
        description="Merge back-to-back time records of the same activity into single records.",
    )
    src = ap.add_mutually_exclusive_group(required=True)
    src.add_argument("--json", dest="json_path", default=None, help="JSON table file (list of rows or {\"records\": [...]})")
    src.add_argument("--taskwarrior", dest="tw_filter", default=None, help="Taskwarrior filter; rows come from `task <filter> export`")

    ap.add_argument("--config", default=None, help="JSON config file with defaults for the options below")
    ap.add_argument(
        "--start-field",
        default=None,
        help="Field holding the interval start: epoch ms, compact Taskwarrior UTC, or ISO-8601 "
        "(ISO values without an offset are read as UTC, not --tz)",
    )
    ap.add_argument("--end-field", default=None, help="Field holding the interval end (updated on apply)")
    ap.add_argument(
        "--group-field",
        dest="group_fields",
        action="append",
        default=None,
        help="Field whose value must match for records to merge (repeatable; default: none, all records form one group)",
    )
    ap.add_argument("--duration-field", default=None, help="Numeric duration field for the consistency check")
    ap.add_argument("--id-field", default=None, help="Row identifier field (default: id, or uuid for Taskwarrior)")

    ap.add_argument("--tolerance-ms", type=int, default=None, help="Max gap in ms still counted as continuous (default: 1000)")
    ap.add_argument(
        "--no-same-day",
        dest="same_day",
        action="store_const",
        const=False,
        default=None,
        help="Merge across midnight; continuity is purely numeric",
    )
    ap.add_argument("--tz", default=None, help="Timezone for the same-day check and display (default: env SUTURE_TZ or 'local')")
    ap.add_argument("--duration-unit-ms", type=float, default=None, help="Milliseconds per duration-field unit (e.g. 60000 for minutes)")

    ap.add_argument("--format", choices=("text", "json"), default="text", help="Preview output format (default: text)")
    ap.add_argument("--apply", action="store_true", help="Write the merges back to the store")
    ap.add_argument("--yes", action="store_true", help="Do not ask for confirmation before applying")
    ap.add_argument("--journal", default=None, help="Apply journal path; already applied merges are skipped on re-run")
    return ap


def _confirm(n_merges: int, n_delete: int) -> bool:
    if not sys.stdin.isatty():
        return False
    ans = input(f"Merge {n_merges} group(s) and permanently delete {n_delete} record(s)? [y/N] ")
    return ans.strip().lower() in {"y", "yes"}


def main(argv: List[str] | None = None) -> int:
    ns = _build_parser().parse_args(argv)

    try:
        file_cfg = load_config_file(ns.config)
    except (OSError, ValueError) as e:
        return _die(f"Failed to load config: {e}")

    store: RecordStore
    try:
        if ns.json_path:
            store = JsonTableStore(ns.json_path, id_field=ns.id_field or file_cfg.get("id_field") or "id")
        else:
            store = TaskwarriorStore(ns.tw_filter or "")
            store.id_field = ns.id_field or file_cfg.get("id_field") or "uuid"
    except StoreError as e:
        return _die(str(e))

    start_field = ns.start_field or file_cfg.get("start_field")
    end_field = ns.end_field or file_cfg.get("end_field")
    if not start_field or not end_field:
        return _die("--start-field and --end-field are required (or set them in --config)")
    group_fields = tuple(ns.group_fields) if ns.group_fields is not None else tuple(file_cfg.get("group_fields") or ())

    fields = FieldMap(
        start_field=start_field,
        end_field=end_field,
        group_fields=group_fields,
        duration_field=ns.duration_field or file_cfg.get("duration_field"),
        id_field=store.id_field,
    )

    try:
        cfg = merge_config_from(
            file_cfg,
            tolerance_ms=ns.tolerance_ms,
            same_day=ns.same_day,
            tz=ns.tz,
            duration_unit_ms=ns.duration_unit_ms,
        )
        tzinfo = tzinfo_for(cfg.tz)
    except ValueError as e:
        return _die(f"Invalid --tz value: {e}")
    if cfg.tolerance_ms <= 0:
        return _die("--tolerance-ms must be positive")

    try:
        rows = store.read_rows()
    except StoreError as e:
        return _die(f"Failed to read records: {e}")

    records, dropped = normalize_rows(rows, fields)
    if dropped:
        eprint(f"[suture] WARN: skipped {dropped} row(s) without id, {start_field} or {end_field}")

    try:
        proposals = compute_proposals(records, cfg)
    except InvalidRecordError as e:
        return _die(str(e))

    report: Dict[str, Any] = {"proposals": proposals_to_json(proposals), "dropped": dropped}
    if ns.format == "text":
        sys.stdout.write(render_proposals_text(proposals, tzinfo))

    if not ns.apply or not proposals:
        if ns.format == "json":
            print(json.dumps(report, indent=2, sort_keys=True))
        return 0

    n_delete = sum(len(p.records_to_delete) for p in proposals)
    if not ns.yes and not _confirm(len(proposals), n_delete):
        eprint("[suture] Aborted; nothing was changed (pass --yes to apply non-interactively).")
        if ns.format == "json":
            print(json.dumps(report, indent=2, sort_keys=True))
        return 0

    journal: Optional[ApplyJournal] = None
    if ns.journal:
        try:
            journal = ApplyJournal(ns.journal)
        except StoreError as e:
            return _die(str(e))

    outcomes = apply_proposals(store, proposals, end_field=end_field, journal=journal)
    counts = summarize_outcomes(outcomes)

    if ns.format == "json":
        report["outcomes"] = [
            {"key": o.proposal_key, "base_record_id": o.base_record_id, "status": o.status, "error": o.error}
            for o in outcomes
        ]
        report["summary"] = counts
        print(json.dumps(report, indent=2, sort_keys=True))
    else:
        for o in outcomes:
            if o.status == "failed":
                eprint(f"[suture] FAILED merge into {o.base_record_id!r}: {o.error}")
        print(f"applied={counts['applied']} skipped={counts['skipped']} failed={counts['failed']}")

    return 1 if counts["failed"] else 0


if __name__ == "__main__":
    raise SystemExit(main())
