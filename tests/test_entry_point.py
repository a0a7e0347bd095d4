import json

import pytest

from edgestack.edge.gateway import InvocationContext, ProxyGateway
from edgestack.edge.models import EdgeRequest
from edgestack.runtime import EntryPoint, WarmInstanceCache, make_handler
from tests.conftest import CountingFactory, FakeHandle


def _event(path="/api/health", method="GET"):
	return ProxyGateway(lambda e, c: {}).build_event(EdgeRequest(method=method, path=path))


def test_entry_point_passes_event_context_and_callback_through():
	handle = FakeHandle()
	entry = EntryPoint(WarmInstanceCache(), lambda: handle)
	event, context = _event(), InvocationContext()
	completed = []
	result = entry(event, context, completed.append)
	assert result is handle.response
	assert handle.calls == [(event, context, completed.append)]
	assert completed == [handle.response]


def test_handler_reuses_warm_instance():
	factory = CountingFactory()
	handler = make_handler(WarmInstanceCache(), factory)
	for _ in range(3):
		handler(_event(), InvocationContext())
	assert factory.calls == 1
	assert len(handler.entry_point.cache.get_or_create(factory).calls) == 3


def test_bootstrap_failure_fails_the_invocation():
	def broken():
		raise ValueError("bad config")

	handler = make_handler(WarmInstanceCache(), broken)
	with pytest.raises(ValueError):
		handler(_event(), InvocationContext())


def test_deployed_handler_serves_api_requests():
	from api import index

	resp = index.handler(_event("/api/health"), InvocationContext())
	assert resp["statusCode"] == 200
	assert json.loads(resp["body"]) == {"status": "ok"}
	index.handler(_event("/api/info"), InvocationContext())
	assert index.handler.entry_point.cache.bootstrap_count == 1
