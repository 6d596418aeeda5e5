"""Tests for the max-xsec cache (qelgen.core.xsec_cache)."""

import threading

import pytest

from qelgen.core.xsec_cache import MaxXSecCache

KEY = "nu:14;tgt:1000060120;N:2112;proc:Weak[CC],QES;"


@pytest.fixture
def cache() -> MaxXSecCache:
    return MaxXSecCache(min_energy=1.0)


class TestLookup:
    def test_miss(self, cache):
        assert cache.find(KEY, 2.0) is None

    def test_exact_hit(self, cache):
        cache.store(KEY, 2.0, 5.5)
        assert cache.find(KEY, 2.0) == 5.5
        assert cache.find("other", 2.0) is None

    def test_below_min_energy_never_cached(self, cache):
        cache.store(KEY, 0.5, 5.5)
        assert cache.size() == 0
        assert cache.find(KEY, 0.5) is None

    def test_non_positive_not_cached(self, cache):
        cache.store(KEY, 2.0, 0.0)
        assert cache.size(KEY) == 0


class TestInterpolation:
    def test_needs_enough_points(self, cache):
        for e, v in [(1.0, 1.0), (2.0, 2.0), (3.0, 3.0)]:
            cache.store(KEY, e, v)
        assert cache.find(KEY, 1.5) is None

    def test_interpolates_inside_range(self, cache):
        for e in (1.0, 2.0, 3.0, 4.0, 5.0):
            cache.store(KEY, e, 2.0 * e)
        assert cache.find(KEY, 2.5) == pytest.approx(5.0)

    def test_no_extrapolation(self, cache):
        for e in (1.0, 2.0, 3.0, 4.0):
            cache.store(KEY, e, e)
        assert cache.find(KEY, 6.0) is None

    def test_store_invalidates_spline(self, cache):
        for e in (1.0, 2.0, 3.0, 4.0):
            cache.store(KEY, e, 1.0)
        assert cache.find(KEY, 3.5) == pytest.approx(1.0)
        cache.store(KEY, 3.5, 7.0)
        assert cache.find(KEY, 3.5) == 7.0


class TestSharing:
    def test_concurrent_store_and_find(self, cache):
        errors = []

        def worker(offset: int) -> None:
            try:
                for i in range(200):
                    energy = 1.0 + 10.0 * offset + i * 0.01
                    cache.store(KEY, energy, energy)
                    value = cache.find(KEY, energy)
                    assert value == pytest.approx(energy)
            except AssertionError as exc:
                errors.append(exc)

        threads = [threading.Thread(target=worker, args=(k,)) for k in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert errors == []
        assert cache.size(KEY) == 800

    def test_clear(self, cache):
        cache.store(KEY, 2.0, 1.0)
        cache.clear()
        assert cache.size() == 0
