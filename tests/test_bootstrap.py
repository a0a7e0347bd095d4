import json
import threading

import pytest
from fastapi.testclient import TestClient

from edgestack.config import AppConfig
from edgestack.edge.gateway import InvocationContext, ProxyGateway
from edgestack.edge.models import EdgeRequest
from edgestack.server import bootstrap as bs
from edgestack.server.http import create_app


def _event(path, method="GET", headers=None):
	return ProxyGateway(lambda e, c: {}).build_event(EdgeRequest(method=method, path=path, headers=headers or {}))


def test_bootstrap_completes_async_initialization_before_serving():
	handle = bs.bootstrap(AppConfig())
	assert handle.app.state.started_at is not None
	resp = handle.invoke(_event("/api/info"), InvocationContext())
	body = json.loads(resp["body"])
	assert body["stage"] == "prod"
	assert body["started_at"] == handle.app.state.started_at


def test_invoke_signals_completion_once():
	handle = bs.bootstrap(AppConfig())
	done = []
	resp = handle.invoke(_event("/api/health"), InvocationContext(), done.append)
	assert done == [resp]
	assert resp["statusCode"] == 200


def test_initializer_errors_propagate(monkeypatch):
	real_create_app = bs.create_app

	async def failing(app):
		raise ConnectionError("config service down")

	def create_app_with_failing_init(cfg):
		app = real_create_app(cfg)
		app.state.initializers.append(failing)
		return app

	monkeypatch.setattr(bs, "create_app", create_app_with_failing_init)
	with pytest.raises(ConnectionError):
		bs.bootstrap(AppConfig())


def test_api_prefix_follows_config(monkeypatch):
	monkeypatch.setenv("API_PREFIX", "/backend/")
	handle = bs.bootstrap(AppConfig())
	assert handle.invoke(_event("/backend/health"), InvocationContext())["statusCode"] == 200
	assert handle.invoke(_event("/api/health"), InvocationContext())["statusCode"] == 404


def test_cors_reflects_any_origin_with_credentials():
	client = TestClient(create_app(AppConfig()))
	r = client.get("/api/health", headers={"Origin": "https://app.example.org"})
	assert r.status_code == 200
	assert r.headers.get("access-control-allow-origin") == "https://app.example.org"
	assert r.headers.get("access-control-allow-credentials") == "true"

	pre = client.options(
		"/api/health",
		headers={"Origin": "https://other.example", "Access-Control-Request-Method": "DELETE"},
	)
	assert pre.status_code == 200
	assert pre.headers.get("access-control-allow-origin") == "https://other.example"


def test_event_loops_are_closed_after_each_cycle(monkeypatch):
	created = []
	real_new_event_loop = bs.asyncio.new_event_loop

	def recording_new_event_loop():
		loop = real_new_event_loop()
		created.append(loop)
		return loop

	monkeypatch.setattr(bs.asyncio, "new_event_loop", recording_new_event_loop)
	handle = bs.bootstrap(AppConfig())
	results = []
	workers = [
		threading.Thread(target=lambda: results.append(handle.invoke(_event("/api/health"), InvocationContext())))
		for _ in range(3)
	]
	for w in workers:
		w.start()
	for w in workers:
		w.join()

	assert [r["statusCode"] for r in results] == [200, 200, 200]
	assert len(created) == 4
	assert all(loop.is_closed() for loop in created)
