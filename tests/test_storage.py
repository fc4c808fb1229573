"""
Unit tests for the key-value stores.

Storage contract:
- missing slot -> None
- set_item writes the full value, get_item returns it unchanged
- remove_item on a missing slot is a no-op
"""

import tempfile
import unittest
from pathlib import Path

from unidirectory.storage import JsonFileStore, MemoryStore


class TestJsonFileStore(unittest.TestCase):
    def test_missing_slot_returns_none(self) -> None:
        with tempfile.TemporaryDirectory() as d:
            self.assertIsNone(JsonFileStore(d).get_item("missing"))

    def test_set_and_get_roundtrip(self) -> None:
        with tempfile.TemporaryDirectory() as d:
            store = JsonFileStore(Path(d) / "nested")
            store.set_item("slot", '[{"id": "a"}]')

            self.assertTrue((Path(d) / "nested" / "slot.json").exists())
            self.assertEqual(store.get_item("slot"), '[{"id": "a"}]')
            # a new instance on the same directory sees the same data
            self.assertEqual(JsonFileStore(Path(d) / "nested").get_item("slot"), '[{"id": "a"}]')

    def test_remove_item(self) -> None:
        with tempfile.TemporaryDirectory() as d:
            store = JsonFileStore(d)
            store.set_item("slot", "[]")
            store.remove_item("slot")
            self.assertIsNone(store.get_item("slot"))
            store.remove_item("slot")

    def test_invalid_utf8_reads_as_garbage(self) -> None:
        with tempfile.TemporaryDirectory() as d:
            store = JsonFileStore(d)
            store.path_for("slot").write_bytes(b"\xff\xfe\x00garbage")
            self.assertEqual(store.get_item("slot"), "")


class TestMemoryStore(unittest.TestCase):
    def test_instances_are_independent(self) -> None:
        a = MemoryStore()
        b = MemoryStore()
        a.set_item("slot", "x")
        self.assertEqual(a.get_item("slot"), "x")
        self.assertIsNone(b.get_item("slot"))
        a.remove_item("slot")
        self.assertIsNone(a.get_item("slot"))


if __name__ == "__main__":
    unittest.main()
