"""
Tests for CLI entry points.

These tests focus on:
- argument validation (unknown degree level, missing required fields)
- commands working against an in-memory service
  (so the real data directory is never touched)
- service errors being turned into a message and exit code 1
"""

import asyncio
import io
import unittest
from unittest.mock import patch

from rich.console import Console

import unidirectory.cli as cli
from unidirectory.cli import main
from unidirectory.service import LocalUniversityService
from unidirectory.storage import MemoryStore

SEED = [
    {
        "id": "stanford",
        "name": "Stanford University",
        "portalUrl": "https://stanford.edu",
        "location": "United States",
        "fees": {"application": 90, "averageTuition": {"bachelor": 62000}},
        "programs": {"bachelor": [{"name": "CS", "duration": "4y", "delivery": "On-campus"}]},
    },
    {
        "id": "oxford",
        "name": "University of Oxford",
        "portalUrl": "https://ox.ac.uk",
        "location": "United Kingdom",
        "programs": {"phd": [{"name": "DPhil Engineering", "duration": "4y", "delivery": "On-campus"}]},
    },
]


class TestCLI(unittest.TestCase):
    def setUp(self) -> None:
        self.service = LocalUniversityService(MemoryStore(), seed=SEED)
        self.out = io.StringIO()
        patcher = patch.object(cli, "console", Console(file=self.out, width=200, color_system=None))
        patcher.start()
        self.addCleanup(patcher.stop)

    def run_cli(self, *argv: str) -> int:
        with self.assertRaises(SystemExit) as ctx:
            main(list(argv), service=self.service)
        return ctx.exception.code

    def test_list_with_search(self) -> None:
        self.assertEqual(self.run_cli("list", "--search", "stan"), 0)
        text = self.out.getvalue()
        self.assertIn("Stanford University", text)
        self.assertNotIn("Oxford", text)

    def test_list_no_results(self) -> None:
        self.assertEqual(self.run_cli("list", "--location", "Mars"), 0)
        self.assertIn("No universities match the current filters.", self.out.getvalue())

    def test_list_rejects_unknown_degree(self) -> None:
        with self.assertRaises(SystemExit) as ctx:
            with patch("sys.stderr", io.StringIO()):
                main(["list", "--degree", "diploma"], service=self.service)
        self.assertEqual(ctx.exception.code, 2)

    def test_show_unknown_id_prints_error(self) -> None:
        self.assertEqual(self.run_cli("show", "nope"), 1)
        self.assertIn("University not found", self.out.getvalue())

    def test_show(self) -> None:
        self.assertEqual(self.run_cli("show", "stanford"), 0)
        text = self.out.getvalue()
        self.assertIn("Stanford University", text)
        self.assertIn("$62,000", text)
        self.assertIn("CS", text)

    def test_locations(self) -> None:
        self.assertEqual(self.run_cli("locations"), 0)
        lines = [line.strip() for line in self.out.getvalue().splitlines() if line.strip()]
        self.assertEqual(lines, ["United Kingdom", "United States"])

    def test_add_requires_fields(self) -> None:
        self.assertEqual(self.run_cli("add", "--name", "X", "--location", "Y"), 1)
        self.assertIn("required", self.out.getvalue())
        self.assertEqual(len(asyncio.run(self.service.list())), 2)

    def test_add_sanitizes_input(self) -> None:
        code = self.run_cli(
            "add",
            "--name", "  ETH Zurich ",
            "--portal-url", "https://ethz.ch",
            "--location", "Switzerland",
            "--application-fee", "abc",
            "--tuition", "masters=1460",
            "--program", "masters:MSc Data Science|2 years|On-campus",
            "--program", "phd:   ",
            "--restrict", "USA",
            "--restrict", " USA ",
        )
        self.assertEqual(code, 0)

        found = asyncio.run(self.service.list({"search": "eth"}))
        self.assertEqual(len(found), 1)
        eth = found[0]
        self.assertEqual(eth.name, "ETH Zurich")
        self.assertEqual(eth.fees.application, 0)
        self.assertEqual(eth.fees.average_tuition, {"masters": 1460})
        self.assertEqual([p.name for p in eth.programs["masters"]], ["MSc Data Science"])
        self.assertEqual(eth.programs["phd"], [])
        self.assertEqual(eth.restricted_countries, ["USA"])

    def test_update_keeps_existing_data(self) -> None:
        self.assertEqual(self.run_cli("update", "stanford", "--overview", "new text"), 0)
        u = asyncio.run(self.service.get("stanford"))
        self.assertEqual(u.overview, "new text")
        self.assertEqual(u.name, "Stanford University")
        self.assertEqual([p.name for p in u.programs["bachelor"]], ["CS"])
        self.assertEqual(u.fees.average_tuition, {"bachelor": 62000})

    def test_update_clear_programs(self) -> None:
        code = self.run_cli("update", "stanford", "--clear-programs", "--program", "phd:Bioengineering|5y|On-campus")
        self.assertEqual(code, 0)
        u = asyncio.run(self.service.get("stanford"))
        self.assertEqual(u.programs["bachelor"], [])
        self.assertEqual([p.name for p in u.programs["phd"]], ["Bioengineering"])

    def test_delete_with_yes(self) -> None:
        self.assertEqual(self.run_cli("delete", "oxford", "--yes"), 0)
        self.assertEqual([u.id for u in asyncio.run(self.service.list())], ["stanford"])

    def test_delete_cancelled(self) -> None:
        with patch.object(cli.Confirm, "ask", return_value=False):
            self.assertEqual(self.run_cli("delete", "oxford"), 0)
        self.assertEqual(len(asyncio.run(self.service.list())), 2)


if __name__ == "__main__":
    unittest.main()
