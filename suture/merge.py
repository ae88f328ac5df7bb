# suture/merge.py
"""Merge planner: collapse back-to-back interval records into proposals.

Pipeline per call:
  1) bucket records by their group_keys tuple (structural key, no joining)
  2) stable-sort each bucket by start
  3) walk the bucket once, growing a run while records stay continuous
  4) emit runs of >= 2 records, with a duration check when every member has one
"""

from __future__ import annotations

import datetime as dt
import math
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from .errors import InvalidRecordError
from .model import IntervalRecord, MergeConfig, MergeProposal, Number, Validation
from .util.console import obs
from .util.tz import same_local_day, tzinfo_for

GroupKey = Tuple[str, ...]


def _check_instant(rec: IntervalRecord, name: str, v: object) -> None:
    if v is None or isinstance(v, bool) or not isinstance(v, (int, float)):
        raise InvalidRecordError(rec.id, f"{name} must be a number, got {v!r}")
    if not v or not math.isfinite(v):
        raise InvalidRecordError(rec.id, f"{name} must be a non-zero finite instant, got {v!r}")


def check_record(rec: IntervalRecord) -> None:
    """Raise InvalidRecordError unless start/end are usable instants."""
    _check_instant(rec, "start", rec.start)
    _check_instant(rec, "end", rec.end)


def group_records(records: Iterable[IntervalRecord]) -> Dict[GroupKey, List[IntervalRecord]]:
    """Bucket records by exact group_keys equality, in first-seen order."""
    groups: Dict[GroupKey, List[IntervalRecord]] = {}
    for r in records:
        groups.setdefault(tuple(r.group_keys), []).append(r)
    return groups


def is_continuous(
    run_start: Number,
    run_end: Number,
    candidate: IntervalRecord,
    config: MergeConfig,
    tzinfo: Optional[dt.tzinfo] = None,
) -> bool:
    # Overlaps (candidate.start <= run_end) are always sequential.
    if candidate.start - run_end >= config.tolerance_ms:
        return False
    if config.same_day and not same_local_day(run_start, candidate.start, tzinfo):
        return False
    return True


@dataclass
class _Run:
    """Accumulator for one run of continuous records."""

    base: IntervalRecord
    new_end: Number
    members: List[IntervalRecord] = field(default_factory=list)

    @classmethod
    def seed(cls, rec: IntervalRecord) -> "_Run":
        return cls(base=rec, new_end=rec.end, members=[rec])

    @property
    def new_start(self) -> Number:
        return self.base.start

    def absorb(self, rec: IntervalRecord) -> None:
        self.new_end = max(self.new_end, rec.end)
        self.members.append(rec)

    def finalize(self, config: MergeConfig) -> Optional[MergeProposal]:
        if len(self.members) < 2:
            return None
        return MergeProposal(
            base_record_id=self.base.id,
            new_start=self.new_start,
            new_end=self.new_end,
            records_to_delete=tuple(r.id for r in self.members[1:]),
            original_records=tuple(self.members),
            validation=_validation(self.members, self.new_end - self.new_start, config),
        )


def _validation(members: Sequence[IntervalRecord], new_duration: Number, config: MergeConfig) -> Optional[Validation]:
    if any(r.duration is None for r in members):
        return None
    return Validation(
        original_sum=sum(r.duration for r in members),  # type: ignore[misc]
        new_duration=new_duration,
        unit_ms=config.duration_unit_ms,
    )


def _runs_for_bucket(
    bucket: Sequence[IntervalRecord],
    config: MergeConfig,
    tzinfo: Optional[dt.tzinfo],
) -> List[MergeProposal]:
    out: List[MergeProposal] = []
    run: Optional[_Run] = None

    for rec in sorted(bucket, key=lambda r: r.start):
        if run is None:
            run = _Run.seed(rec)
            continue
        if is_continuous(run.new_start, run.new_end, rec, config, tzinfo):
            run.absorb(rec)
            continue
        p = run.finalize(config)
        if p is not None:
            out.append(p)
        run = _Run.seed(rec)

    if run is not None:
        p = run.finalize(config)
        if p is not None:
            out.append(p)
    return out


def compute_proposals(
    records: Sequence[IntervalRecord],
    config: Optional[MergeConfig] = None,
) -> List[MergeProposal]:
    """Return merge proposals for every run of >= 2 continuous records.

    Raises InvalidRecordError if any record lacks a usable start/end, and
    ValueError if the same-day check is on and config.tz does not resolve.
    Output order: groups in first-seen input order, runs ascending by start.
    """
    cfg = config or MergeConfig()
    for r in records:
        check_record(r)

    tzinfo = tzinfo_for(cfg.tz) if cfg.same_day else None

    groups = group_records(records)
    proposals: List[MergeProposal] = []
    for bucket in groups.values():
        proposals.extend(_runs_for_bucket(bucket, cfg, tzinfo))

    obs(
        "merge",
        f"records={len(records)} groups={len(groups)} proposals={len(proposals)} "
        f"tolerance_ms={cfg.tolerance_ms} same_day={cfg.same_day}",
    )
    return proposals
