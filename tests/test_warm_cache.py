import threading
import time

import pytest

from edgestack.runtime import WarmInstanceCache, get_default_cache
from tests.conftest import CountingFactory


def test_get_or_create_bootstraps_once_per_context():
	cache = WarmInstanceCache()
	factory = CountingFactory()
	first = cache.get_or_create(factory)
	second = cache.get_or_create(factory)
	assert factory.calls == 1
	assert first is second
	assert cache.initialized is True


def test_independent_contexts_do_not_share_handles():
	factory = CountingFactory()
	ctx_a, ctx_b = WarmInstanceCache(), WarmInstanceCache()
	handle_a = ctx_a.get_or_create(factory)
	handle_b = ctx_b.get_or_create(factory)
	assert factory.calls == 2
	assert handle_a is not handle_b
	assert ctx_a.get_or_create(factory) is handle_a
	assert ctx_b.get_or_create(factory) is handle_b


def test_concurrent_first_calls_share_one_initialization():
	cache = WarmInstanceCache()

	def slow():
		time.sleep(0.05)
		return object()

	factory = CountingFactory(slow)
	barrier = threading.Barrier(8)
	results = []

	def worker():
		barrier.wait()
		results.append(cache.get_or_create(factory))

	threads = [threading.Thread(target=worker) for _ in range(8)]
	for t in threads:
		t.start()
	for t in threads:
		t.join()
	assert factory.calls == 1
	assert len(results) == 8
	assert all(r is results[0] for r in results)


def test_failed_bootstrap_propagates_and_leaves_slot_empty():
	cache = WarmInstanceCache()

	def broken():
		raise RuntimeError("database unreachable")

	with pytest.raises(RuntimeError, match="database unreachable"):
		cache.get_or_create(broken)
	assert cache.initialized is False

	factory = CountingFactory()
	handle = cache.get_or_create(factory)
	assert handle is cache.get_or_create(factory)
	assert cache.bootstrap_count == 2


def test_default_cache_is_process_wide():
	assert get_default_cache() is get_default_cache()
