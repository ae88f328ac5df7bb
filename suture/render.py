# suture/render.py
from __future__ import annotations

import datetime as dt
from typing import Any, Dict, List, Optional, Sequence

from .model import MergeProposal, Validation
from .util.tz import fmt_ms


def _fmt_num(v: Any) -> str:
    if isinstance(v, float) and v.is_integer():
        return str(int(v))
    if isinstance(v, float):
        return f"{v:.2f}"
    return str(v)


def _validation_cell(v: Optional[Validation]) -> str:
    if v is None:
        return "-"
    s = f"sum={_fmt_num(v.original_sum)} span_ms={_fmt_num(v.new_duration)}"
    delta = v.delta_ms()
    if delta is not None:
        s += f" delta_ms={_fmt_num(delta)}"
    return s


def proposal_row(p: MergeProposal, tz: Optional[dt.tzinfo]) -> List[str]:
    group = ", ".join(p.group_keys) if p.group_keys else "(all)"
    rng = f"{fmt_ms(p.new_start, tz)} -> {fmt_ms(p.new_end, tz)}"
    return [group, str(len(p.original_records)), rng, _validation_cell(p.validation)]


def render_proposals_text(proposals: Sequence[MergeProposal], tz: Optional[dt.tzinfo]) -> str:
    """Plain-text preview table (one line per proposal)."""
    if not proposals:
        return "No continuous time records found to merge.\n"

    header = ["Group", "Records", "New range", "Validation"]
    rows = [proposal_row(p, tz) for p in proposals]
    widths = [max(len(r[i]) for r in [header, *rows]) for i in range(len(header))]

    def line(cells: List[str]) -> str:
        return "  ".join(c.ljust(w) for c, w in zip(cells, widths)).rstrip()

    out = [line(header), line(["-" * w for w in widths])]
    out.extend(line(r) for r in rows)
    n_del = sum(len(p.records_to_delete) for p in proposals)
    out.append("")
    out.append(f"{len(proposals)} merge(s); {n_del} record(s) would be permanently deleted.")
    return "\n".join(out) + "\n"


def proposals_to_json(proposals: Sequence[MergeProposal]) -> List[Dict[str, Any]]:
    return [p.to_dict() for p in proposals]
