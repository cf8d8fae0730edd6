"""Tests for the periodic refresh timer."""

import asyncio
import unittest
import sys
from pathlib import Path

# Add src to path so we can import metronow
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from metronow.refresh_timer import RefreshTimer, TimerState


class TestRefreshTimer(unittest.IsolatedAsyncioTestCase):
    """Test the tri-state timer lifecycle."""

    async def asyncSetUp(self):
        self.ticks = 0

        async def tick():
            self.ticks += 1

        self.timer = RefreshTimer(tick, interval=0.01)

    async def asyncTearDown(self):
        self.timer.stop()

    async def test_initial_state(self):
        self.assertIs(self.timer.state, TimerState.NOT_STARTED)
        self.assertFalse(self.timer.is_running)

    async def test_ticks_while_running(self):
        self.assertTrue(self.timer.start())
        await asyncio.sleep(0.1)
        self.assertGreaterEqual(self.ticks, 2)

    async def test_second_start_is_refused(self):
        self.assertTrue(self.timer.start())
        task = self.timer._task

        self.assertFalse(self.timer.start())
        self.assertIs(self.timer._task, task)

    async def test_stop_cancels_and_clears(self):
        self.timer.start()
        task = self.timer._task

        self.timer.stop()
        await asyncio.sleep(0.01)

        self.assertIs(self.timer.state, TimerState.STOPPED)
        self.assertIsNone(self.timer._task)
        self.assertTrue(task.cancelled())

        ticks = self.ticks
        await asyncio.sleep(0.05)
        self.assertEqual(self.ticks, ticks)

    async def test_restart_creates_fresh_task(self):
        self.timer.start()
        old_task = self.timer._task
        self.timer.stop()

        self.assertTrue(self.timer.start())
        self.assertIsNot(self.timer._task, old_task)
        self.assertIs(self.timer.state, TimerState.RUNNING)

    async def test_stop_without_start(self):
        self.timer.stop()
        self.assertIs(self.timer.state, TimerState.NOT_STARTED)

    async def test_tick_errors_do_not_stop_timer(self):
        calls = []

        async def failing_tick():
            calls.append(1)
            raise RuntimeError("upstream down")

        timer = RefreshTimer(failing_tick, interval=0.01)
        with self.assertLogs("metronow.refresh_timer", level="ERROR"):
            timer.start()
            await asyncio.sleep(0.1)
        timer.stop()

        self.assertGreaterEqual(len(calls), 2)


if __name__ == "__main__":
    unittest.main()
