from __future__ import annotations

import asyncio
import json
import unittest

from affinity.personalization.persistence import SerializedWriter
from affinity.personalization.store import RedisKeyValueStore
from affinity.personalization.tracker import AffinityTracker
from tests.fake_redis import FakeRedis, FakeRedisClient

_KEY = "breitling_liked_products:u1"


class AffinityTrackerTestCase(unittest.TestCase):
    def setUp(self) -> None:
        self._redis = FakeRedis()
        self._store = RedisKeyValueStore(FakeRedisClient(self._redis))  # type: ignore[arg-type]

    def _tracker(self, *, retries: int = 1) -> AffinityTracker:
        return AffinityTracker(self._store, _KEY, write_retries=retries)

    def _stored(self) -> list[str] | None:
        raw = asyncio.run(self._redis.get(_KEY))
        return None if raw is None else json.loads(raw)

    def test_like_is_idempotent(self) -> None:
        async def run() -> list[str]:
            tracker = self._tracker()
            await tracker.load()
            await tracker.like("nav-1")
            await tracker.like("nav-1")
            await tracker.flush()
            return tracker.liked_ids()

        self.assertEqual(asyncio.run(run()), ["nav-1"])
        self.assertEqual(self._stored(), ["nav-1"])

    def test_unlike_restores_previous_state(self) -> None:
        async def run() -> tuple[list[str], list[str]]:
            tracker = self._tracker()
            await tracker.load()
            await tracker.like("nav-1")
            before = tracker.liked_ids()
            await tracker.like("nav-2")
            await tracker.unlike("nav-2")
            await tracker.unlike("missing")
            await tracker.flush()
            return before, tracker.liked_ids()

        before, after = asyncio.run(run())
        self.assertEqual(before, after)
        self.assertEqual(self._stored(), ["nav-1"])

    def test_liked_ids_returns_copy(self) -> None:
        async def run() -> AffinityTracker:
            tracker = self._tracker()
            await tracker.like("nav-1")
            await tracker.flush()
            return tracker

        tracker = asyncio.run(run())
        snapshot = tracker.liked_ids()
        snapshot.append("injected")
        self.assertEqual(tracker.liked_ids(), ["nav-1"])
        self.assertFalse(tracker.contains("injected"))

    def test_load_restores_persisted_set(self) -> None:
        asyncio.run(self._redis.set(_KEY, json.dumps(["chr-1", "nav-2", "chr-1"])))

        async def run() -> list[str]:
            tracker = self._tracker()
            await tracker.load()
            return tracker.liked_ids()

        self.assertEqual(asyncio.run(run()), ["chr-1", "nav-2"])

    def test_corrupt_payload_starts_empty(self) -> None:
        for payload in ("not json", json.dumps({"a": 1}), json.dumps(["a", 1])):
            asyncio.run(self._redis.set(_KEY, payload))

            async def run() -> list[str]:
                tracker = self._tracker()
                await tracker.load()
                return tracker.liked_ids()

            self.assertEqual(asyncio.run(run()), [], payload)

    def test_read_failure_starts_empty(self) -> None:
        asyncio.run(self._redis.set(_KEY, json.dumps(["nav-1"])))
        self._redis.fail_gets = True

        async def run() -> list[str]:
            tracker = self._tracker()
            await tracker.load()
            return tracker.liked_ids()

        self.assertEqual(asyncio.run(run()), [])

    def test_mutation_visible_before_write_completes(self) -> None:
        async def run() -> tuple[list[str], int]:
            tracker = self._tracker()
            await tracker.like("nav-1")
            visible = tracker.liked_ids()
            writes_so_far = len(self._redis.set_calls)
            await tracker.flush()
            return visible, writes_so_far

        visible, writes_so_far = asyncio.run(run())
        self.assertEqual(visible, ["nav-1"])
        self.assertEqual(writes_so_far, 0)

    def test_queued_writes_coalesce_to_latest_snapshot(self) -> None:
        async def run() -> None:
            tracker = self._tracker()
            await tracker.like("a")
            await tracker.like("b")
            await tracker.like("c")
            await tracker.flush()
            await tracker.unlike("b")
            await tracker.flush()

        asyncio.run(run())
        payloads = [json.loads(value) for _, value in self._redis.set_calls]
        self.assertEqual(payloads, [["a", "b", "c"], ["a", "c"]])
        self.assertEqual(self._stored(), ["a", "c"])

    def test_write_failure_is_retried_once(self) -> None:
        self._redis.fail_next_sets = 1

        async def run() -> None:
            tracker = self._tracker(retries=1)
            await tracker.like("nav-1")
            await tracker.flush()

        asyncio.run(run())
        self.assertEqual(self._stored(), ["nav-1"])

    def test_final_write_failure_keeps_memory_state(self) -> None:
        self._redis.fail_next_sets = 2

        async def run() -> list[str]:
            tracker = self._tracker(retries=1)
            await tracker.like("nav-1")
            await tracker.flush()
            return tracker.liked_ids()

        self.assertEqual(asyncio.run(run()), ["nav-1"])
        self.assertIsNone(self._stored())

    def test_repeated_like_still_persists(self) -> None:
        async def run() -> None:
            tracker = self._tracker()
            await tracker.like("nav-1")
            await tracker.flush()
            await tracker.like("nav-1")
            await tracker.flush()

        asyncio.run(run())
        self.assertEqual(len(self._redis.set_calls), 2)
        self.assertEqual([json.loads(v) for _, v in self._redis.set_calls], [["nav-1"], ["nav-1"]])

    def test_unlike_absent_id_still_persists(self) -> None:
        async def run() -> None:
            tracker = self._tracker()
            await tracker.unlike("missing")
            await tracker.flush()

        asyncio.run(run())
        self.assertEqual(len(self._redis.set_calls), 1)
        self.assertEqual(self._stored(), [])


class SerializedWriterTestCase(unittest.TestCase):
    def setUp(self) -> None:
        self._redis = FakeRedis()
        self._store = RedisKeyValueStore(FakeRedisClient(self._redis))  # type: ignore[arg-type]

    def test_failed_writes_counted_after_retries(self) -> None:
        self._redis.fail_next_sets = 2

        async def run() -> tuple[int, int]:
            writer = SerializedWriter(self._store, _KEY, retries=1)
            writer.submit('["nav-1"]')
            await writer.flush()
            after_failure = writer.failed_writes
            writer.submit('["nav-2"]')
            await writer.flush()
            return after_failure, writer.failed_writes

        after_failure, after_success = asyncio.run(run())
        self.assertEqual(after_failure, 1)
        self.assertEqual(after_success, 1)
        self.assertEqual(self._redis._strings[_KEY], '["nav-2"]')

    def test_retry_recovers_without_counting_failure(self) -> None:
        self._redis.fail_next_sets = 1

        async def run() -> int:
            writer = SerializedWriter(self._store, _KEY, retries=1)
            writer.submit("[]")
            await writer.flush()
            return writer.failed_writes

        self.assertEqual(asyncio.run(run()), 0)
        self.assertEqual(self._redis._strings[_KEY], "[]")


if __name__ == "__main__":
    unittest.main()
