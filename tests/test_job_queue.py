import asyncio
import unittest

from termplex.core.errors import JobCancelledError
from termplex.core.job_queue import PriorityJobQueue
from termplex.core.priority import JobPriority


class PriorityJobQueueTests(unittest.IsolatedAsyncioTestCase):
    async def test_highest_priority_runs_first_once_worker_is_free(self) -> None:
        queue = PriorityJobQueue()
        release = asyncio.Event()
        order: list[object] = []

        async def blocker() -> None:
            await release.wait()
            order.append("blocker")

        queue.add(blocker, priority=0)
        for priority in (1, 3, 2):
            queue.add(lambda priority=priority: order.append(priority), priority=priority)
        self.assertEqual(queue.size, 3)
        self.assertEqual(queue.pending, 1)

        release.set()
        await queue.on_idle()
        self.assertEqual(order, ["blocker", 3, 2, 1])

    async def test_equal_priorities_keep_submission_order(self) -> None:
        queue = PriorityJobQueue()
        release = asyncio.Event()
        order: list[str] = []
        queue.add(release.wait, priority=JobPriority(1000, 10))
        for name in ("a", "b", "c"):
            queue.add(lambda name=name: order.append(name), priority=JobPriority(1000, 10))
        release.set()
        await queue.on_idle()
        self.assertEqual(order, ["a", "b", "c"])

    async def test_level_dominates_rank(self) -> None:
        queue = PriorityJobQueue()
        release = asyncio.Event()
        order: list[str] = []
        queue.add(release.wait, priority=JobPriority(1000, 10))
        queue.add(lambda: order.append("child-log"), priority=JobPriority(999, 20))
        queue.add(lambda: order.append("parent-blocking"), priority=JobPriority(1000, 10))
        release.set()
        await queue.on_idle()
        self.assertEqual(order, ["parent-blocking", "child-log"])

    async def test_only_one_job_runs_at_a_time(self) -> None:
        queue = PriorityJobQueue()
        active = 0
        peak = 0

        async def job() -> None:
            nonlocal active, peak
            active += 1
            peak = max(peak, active)
            await asyncio.sleep(0.001)
            active -= 1

        futures = [queue.add(job, priority=index % 3) for index in range(12)]
        await asyncio.gather(*futures)
        self.assertEqual(peak, 1)

    async def test_on_idle_waits_for_every_job_exactly_once(self) -> None:
        queue = PriorityJobQueue()
        runs: list[int] = []

        async def job(index: int) -> None:
            await asyncio.sleep(0)
            runs.append(index)

        for index in range(8):
            queue.add(lambda index=index: job(index), priority=0)
        await queue.on_idle()
        self.assertEqual(sorted(runs), list(range(8)))
        self.assertTrue(queue.is_idle)

    async def test_on_idle_returns_immediately_when_empty(self) -> None:
        queue = PriorityJobQueue()
        await asyncio.wait_for(queue.on_idle(), timeout=1)

    async def test_results_and_errors_reach_the_caller(self) -> None:
        queue = PriorityJobQueue()

        def boom() -> None:
            raise ValueError("boom")

        ok = queue.add(lambda: 42, priority=0)
        failed = queue.add(boom, priority=0)
        self.assertEqual(await ok, 42)
        with self.assertRaises(ValueError):
            await failed

    async def test_clear_rejects_queued_jobs_but_finishes_running_one(self) -> None:
        queue = PriorityJobQueue()
        release = asyncio.Event()
        ran: list[str] = []

        async def running() -> str:
            await release.wait()
            ran.append("running")
            return "done"

        running_future = queue.add(running, priority=0)
        await asyncio.sleep(0)
        queued = [queue.add(lambda: ran.append("queued"), priority=5) for _ in range(3)]

        self.assertEqual(queue.clear(), 3)
        self.assertEqual(queue.size, 0)
        for future in queued:
            with self.assertRaises(JobCancelledError):
                await future

        release.set()
        self.assertEqual(await running_future, "done")
        await queue.on_idle()
        self.assertEqual(ran, ["running"])

    async def test_cancelled_caller_job_is_skipped(self) -> None:
        queue = PriorityJobQueue()
        release = asyncio.Event()
        ran: list[str] = []
        queue.add(release.wait, priority=0)
        skipped = queue.add(lambda: ran.append("skipped"), priority=0)
        queue.add(lambda: ran.append("kept"), priority=0)
        skipped.cancel()
        release.set()
        await queue.on_idle()
        self.assertEqual(ran, ["kept"])

    def test_concurrency_must_be_positive(self) -> None:
        with self.assertRaises(ValueError):
            PriorityJobQueue(concurrency=0)


class JobPriorityTests(unittest.TestCase):
    def test_flattened_value_matches_band_arithmetic(self) -> None:
        self.assertEqual(JobPriority(1000, 20).value, 100020)
        self.assertGreater(JobPriority(1000, 10), JobPriority(999, 20))

    def test_rank_must_fit_inside_a_band(self) -> None:
        with self.assertRaises(ValueError):
            JobPriority(1000, 100)


if __name__ == "__main__":
    unittest.main()
