from __future__ import annotations

import datetime as dt
import json
import unittest

from suture.merge import compute_proposals
from suture.model import IntervalRecord, MergeConfig
from suture.render import proposals_to_json, render_proposals_text

BASE = 1577836800000
H = 60 * 60000


class TestRenderContract(unittest.TestCase):
    def test_empty_preview(self) -> None:
        self.assertIn("No continuous time records", render_proposals_text([], dt.timezone.utc))

    def test_text_table(self) -> None:
        recs = [
            IntervalRecord("a", BASE + 9 * H, BASE + 10 * H, ("Reading", "Books"), 60),
            IntervalRecord("b", BASE + 10 * H, BASE + 11 * H, ("Reading", "Books"), 50),
        ]
        props = compute_proposals(recs, MergeConfig(tz="UTC", duration_unit_ms=60000))
        text = render_proposals_text(props, dt.timezone.utc)
        lines = text.splitlines()
        self.assertTrue(lines[0].startswith("Group"))
        self.assertIn("Reading, Books", lines[2])
        self.assertIn("2020-01-01 09:00:00 -> 2020-01-01 11:00:00", lines[2])
        self.assertIn("sum=110", lines[2])
        self.assertIn("delta_ms=600000", lines[2])
        self.assertEqual(lines[-1], "1 merge(s); 1 record(s) would be permanently deleted.")

    def test_json_is_serializable(self) -> None:
        recs = [IntervalRecord("a", BASE, BASE + H), IntervalRecord("b", BASE + H, BASE + 2 * H)]
        out = proposals_to_json(compute_proposals(recs, MergeConfig(tz="UTC")))
        text = json.dumps(out)
        self.assertEqual(json.loads(text)[0]["records_to_delete"], ["b"])
        self.assertIsNone(out[0]["validation"])
        self.assertEqual(out[0]["group_keys"], [])


if __name__ == "__main__":
    unittest.main(verbosity=2)
