"""
Tests for the "still relevant" load guard.
"""

import asyncio
import unittest

from unidirectory.loading import LatestLoad, LoadGuard, guarded


class TestLoadGuard(unittest.IsolatedAsyncioTestCase):
    async def test_active_guard_returns_result(self) -> None:
        async def load() -> str:
            return "data"

        self.assertEqual(await guarded(LoadGuard(), load()), "data")

    async def test_cancelled_while_loading_discards_result(self) -> None:
        guard = LoadGuard()
        started = asyncio.Event()

        async def load() -> str:
            started.set()
            await asyncio.sleep(0.01)
            return "stale"

        task = asyncio.create_task(guarded(guard, load()))
        await started.wait()
        guard.cancel()
        self.assertIsNone(await task)

    async def test_errors_of_stale_load_are_discarded(self) -> None:
        guard = LoadGuard()

        async def load() -> str:
            guard.cancel()
            raise RuntimeError("boom")

        self.assertIsNone(await guarded(guard, load()))

    async def test_errors_of_active_load_propagate(self) -> None:
        async def load() -> str:
            raise RuntimeError("boom")

        with self.assertRaises(RuntimeError):
            await guarded(LoadGuard(), load())

    async def test_latest_load_cancels_previous(self) -> None:
        loads = LatestLoad()
        first = loads.start()
        second = loads.start()
        self.assertFalse(first.active)
        self.assertTrue(second.active)
        loads.close()
        self.assertFalse(second.active)


if __name__ == "__main__":
    unittest.main()
