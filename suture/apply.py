# suture/apply.py
"""Write merge proposals back to a record store, one proposal at a time."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Set, Union

from .errors import StoreError
from .model import ApplyOutcome, MergeProposal
from .store import RecordStore
from .util.console import obs


class ApplyJournal:
    """JSON file of proposal keys that were applied successfully.

    Written after every success so an interrupted or partially failed run can
    be repeated and will only touch what is left.
    """

    def __init__(self, path: Union[str, Path]) -> None:
        self.path = Path(path)
        self._done: Set[str] = set()
        if self.path.exists():
            try:
                obj = json.loads(self.path.read_text(encoding="utf-8"))
            except ValueError as ex:
                raise StoreError(f"Corrupt apply journal: {self.path} ({ex})") from ex
            applied = obj.get("applied") if isinstance(obj, dict) else None
            if not isinstance(applied, list):
                raise StoreError(f"Corrupt apply journal: {self.path} (missing 'applied' list)")
            self._done = {str(k) for k in applied}

    def __contains__(self, key: object) -> bool:
        return key in self._done

    def record(self, key: str) -> None:
        self._done.add(key)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_name(self.path.name + ".tmp")
        tmp.write_text(json.dumps({"applied": sorted(self._done)}, indent=2) + "\n", encoding="utf-8")
        tmp.replace(self.path)


def apply_proposal(store: RecordStore, p: MergeProposal, *, end_field: str) -> None:
    store.update_record(p.base_record_id, {end_field: p.new_end})
    if p.records_to_delete:
        store.delete_records(list(p.records_to_delete))


def apply_proposals(
    store: RecordStore,
    proposals: Sequence[MergeProposal],
    *,
    end_field: str,
    journal: Optional[ApplyJournal] = None,
) -> List[ApplyOutcome]:
    """Apply each proposal independently and report per-proposal outcomes.

    A StoreError fails only the proposal it happened in; the loop continues.
    Proposals already listed in the journal are skipped.
    """
    outcomes: List[ApplyOutcome] = []
    for p in proposals:
        key = p.proposal_key()
        if journal is not None and key in journal:
            outcomes.append(ApplyOutcome(proposal_key=key, base_record_id=p.base_record_id, status="skipped"))
            continue
        try:
            apply_proposal(store, p, end_field=end_field)
        except StoreError as ex:
            obs("apply", f"WARN: proposal {key} base={p.base_record_id!r} failed: {ex}")
            outcomes.append(
                ApplyOutcome(proposal_key=key, base_record_id=p.base_record_id, status="failed", error=str(ex))
            )
            continue
        if journal is not None:
            journal.record(key)
        outcomes.append(ApplyOutcome(proposal_key=key, base_record_id=p.base_record_id, status="applied"))

    obs("apply", " ".join(f"{k}={v}" for k, v in summarize_outcomes(outcomes).items()))
    return outcomes


def summarize_outcomes(outcomes: Sequence[ApplyOutcome]) -> Dict[str, int]:
    counts = {"applied": 0, "skipped": 0, "failed": 0}
    for o in outcomes:
        counts[o.status] = counts.get(o.status, 0) + 1
    return counts
