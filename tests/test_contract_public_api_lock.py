from __future__ import annotations

import unittest


class TestPublicApiLockContract(unittest.TestCase):
    def test_api_module_exports_are_present(self) -> None:
        import suture.api as api

        self.assertTrue(hasattr(api, "__all__"))
        self.assertIsInstance(api.__all__, (list, tuple))
        self.assertGreaterEqual(len(api.__all__), 3)

        for name in api.__all__:
            self.assertIsInstance(name, str)
            self.assertTrue(hasattr(api, name), f"suture.api missing public name: {name}")
            self.assertIsNotNone(getattr(api, name), f"suture.api {name} is None")

    def test_package_reexports_match_api_all(self) -> None:
        import suture
        import suture.api as api

        for name in api.__all__:
            self.assertTrue(hasattr(suture, name), f"suture package does not re-export: {name}")
            self.assertIs(getattr(suture, name), getattr(api, name), f"suture.{name} must be same object as suture.api.{name}")

    def test_plan_from_rows_entrypoint(self) -> None:
        import suture

        rows = [
            {"id": "A", "s": 600000, "e": 900000, "g": "X"},
            {"id": "B", "s": 900500, "e": 1200000, "g": "X"},
            {"id": "C", "s": 5000000, "e": 5300000, "g": "X"},
            {"id": "D", "s": 0, "e": 5300000, "g": "X"},
        ]
        fields = suture.FieldMap(start_field="s", end_field="e", group_fields=("g",))
        props, dropped = suture.plan_from_rows(rows, fields, suture.MergeConfig(same_day=False))
        self.assertEqual(dropped, 1)
        self.assertEqual([(p.base_record_id, p.records_to_delete) for p in props], [("A", ("B",))])


if __name__ == "__main__":
    unittest.main(verbosity=2)
