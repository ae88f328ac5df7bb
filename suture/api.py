"""suture.api

Stable *library* entrypoint for suture.

Policy:
  - Only names listed in __all__ are considered public API.
  - Everything else is internal and may change without notice.
"""

from __future__ import annotations

from typing import Any, Dict, Iterable, List, Optional, Tuple

from suture.apply import ApplyJournal, apply_proposals, summarize_outcomes
from suture.errors import InvalidRecordError, StoreError, SutureError
from suture.merge import compute_proposals, group_records
from suture.model import ApplyOutcome, IntervalRecord, MergeConfig, MergeProposal, Validation
from suture.normalize import FieldMap, normalize_row, normalize_rows
from suture.render import proposals_to_json, render_proposals_text
from suture.store import JsonTableStore, RecordStore
from suture.taskwarrior import TaskwarriorStore


def plan_from_rows(
    rows: Iterable[Dict[str, Any]],
    fields: FieldMap,
    config: Optional[MergeConfig] = None,
) -> Tuple[List[MergeProposal], int]:
    """Normalize raw rows and compute proposals. Returns (proposals, dropped_rows)."""
    records, dropped = normalize_rows(rows, fields)
    return compute_proposals(records, config), dropped


def plan_from_store(
    store: RecordStore,
    fields: FieldMap,
    config: Optional[MergeConfig] = None,
) -> Tuple[List[MergeProposal], int]:
    return plan_from_rows(store.read_rows(), fields, config)


# --- Public API exports -------------------------------------------------------
_PUBLIC_EXPORTS = [
    "IntervalRecord",
    "MergeProposal",
    "Validation",
    "MergeConfig",
    "ApplyOutcome",
    "FieldMap",
    "compute_proposals",
    "group_records",
    "normalize_row",
    "normalize_rows",
    "plan_from_rows",
    "plan_from_store",
    "RecordStore",
    "JsonTableStore",
    "TaskwarriorStore",
    "ApplyJournal",
    "apply_proposals",
    "summarize_outcomes",
    "render_proposals_text",
    "proposals_to_json",
    "SutureError",
    "InvalidRecordError",
    "StoreError",
]

__all__ = [n for n in _PUBLIC_EXPORTS if n in globals()]
# --- /Public API exports ------------------------------------------------------
