import threading
import unittest
from unittest.mock import patch

from dublinbikes.result_cache import ResultCache


class TestResultCache(unittest.TestCase):
    def test_read_through_memoizes(self):
        cache = ResultCache(ttl_seconds=60)
        calls = []
        compute = lambda: calls.append(1) or len(calls)  # noqa: E731
        self.assertEqual(cache.get_or_compute("k", compute), 1)
        self.assertEqual(cache.get_or_compute("k", compute), 1)
        self.assertEqual(len(calls), 1)

    def test_invalidate_makes_every_entry_stale(self):
        cache = ResultCache(ttl_seconds=60)
        cache.get_or_compute("a", lambda: "old-a")
        cache.get_or_compute("b", lambda: "old-b")
        cache.invalidate()
        self.assertIsNone(cache.get("a"))
        self.assertEqual(cache.get_or_compute("b", lambda: "new-b"), "new-b")

    def test_invalidate_drops_retired_entries(self):
        cache = ResultCache(ttl_seconds=60)
        for round_ in range(50):
            for n in range(20):
                cache.get_or_compute(("snapshot", f"q{n}"), lambda: n)
            self.assertLessEqual(len(cache), 20)
            cache.invalidate()
            self.assertEqual(len(cache), 0)

    def test_invalidate_swaps_generation(self):
        cache = ResultCache()
        first = cache.generation
        self.assertEqual(cache.invalidate(), first + 1)
        self.assertEqual(cache.generation, first + 1)

    def test_ttl_bounds_entries(self):
        cache = ResultCache(ttl_seconds=10)
        with patch("dublinbikes.result_cache.time.monotonic") as mock_time:
            mock_time.return_value = 100.0
            cache.get_or_compute("k", lambda: "v1")
            mock_time.return_value = 109.0
            self.assertEqual(cache.get("k"), "v1")
            mock_time.return_value = 110.5
            self.assertEqual(cache.get_or_compute("k", lambda: "v2"), "v2")

    def test_value_computed_across_invalidation_is_not_kept(self):
        cache = ResultCache(ttl_seconds=60)

        def compute():
            cache.invalidate()
            return "computed-before-write"

        self.assertEqual(cache.get_or_compute("k", compute), "computed-before-write")
        self.assertIsNone(cache.get("k"))

    def test_concurrent_invalidations_are_not_lost(self):
        cache = ResultCache()
        start = cache.generation
        threads = [threading.Thread(target=lambda: [cache.invalidate() for _ in range(100)]) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        self.assertEqual(cache.generation, start + 800)

    def test_clear(self):
        cache = ResultCache()
        cache.get_or_compute("k", lambda: 1)
        self.assertEqual(len(cache), 1)
        cache.clear()
        self.assertEqual(len(cache), 0)


if __name__ == "__main__":
    unittest.main()
