# suture/model.py
from __future__ import annotations

import hashlib
import json
from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple, Union

Number = Union[int, float]


@dataclass(frozen=True)
class IntervalRecord:
    id: str
    start: Number          # epoch ms
    end: Number            # epoch ms
    group_keys: Tuple[str, ...] = ()
    duration: Optional[Number] = None   # caller units, only used for validation

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "start": self.start,
            "end": self.end,
            "group_keys": list(self.group_keys),
            "duration": self.duration,
        }


@dataclass(frozen=True)
class Validation:
    original_sum: Number      # caller units
    new_duration: Number      # timestamp units (ms)
    unit_ms: Optional[float] = None

    def original_sum_ms(self) -> Optional[float]:
        if self.unit_ms is None:
            return None
        return float(self.original_sum) * float(self.unit_ms)

    def delta_ms(self) -> Optional[float]:
        """new_duration minus the rescaled original sum; None without a unit factor."""
        s = self.original_sum_ms()
        if s is None:
            return None
        return float(self.new_duration) - s

    def to_dict(self) -> Dict[str, Any]:
        return {
            "original_sum": self.original_sum,
            "new_duration": self.new_duration,
            "unit_ms": self.unit_ms,
            "original_sum_ms": self.original_sum_ms(),
            "delta_ms": self.delta_ms(),
        }


@dataclass(frozen=True)
class MergeProposal:
    base_record_id: str
    new_start: Number
    new_end: Number
    records_to_delete: Tuple[str, ...]
    original_records: Tuple[IntervalRecord, ...]
    validation: Optional[Validation] = None

    @property
    def group_keys(self) -> Tuple[str, ...]:
        if not self.original_records:
            return ()
        return self.original_records[0].group_keys

    def proposal_key(self) -> str:
        # Content hash; identical proposals recomputed later map to the same key.
        blob = json.dumps(
            [self.base_record_id, list(self.records_to_delete), self.new_start, self.new_end],
            separators=(",", ":"),
        )
        return hashlib.sha1(blob.encode("utf-8")).hexdigest()[:16]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "key": self.proposal_key(),
            "base_record_id": self.base_record_id,
            "new_start": self.new_start,
            "new_end": self.new_end,
            "records_to_delete": list(self.records_to_delete),
            "group_keys": list(self.group_keys),
            "original_records": [r.to_dict() for r in self.original_records],
            "validation": self.validation.to_dict() if self.validation else None,
        }


@dataclass(frozen=True)
class MergeConfig:
    tolerance_ms: int = 1000
    same_day: bool = True
    tz: str = "local"
    duration_unit_ms: Optional[float] = None


@dataclass(frozen=True)
class ApplyOutcome:
    proposal_key: str
    base_record_id: str
    status: str                 # "applied" | "skipped" | "failed"
    error: Optional[str] = None


__all__ = [
    "Number",
    "IntervalRecord",
    "Validation",
    "MergeProposal",
    "MergeConfig",
    "ApplyOutcome",
]
