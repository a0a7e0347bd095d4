import sys
from pathlib import Path
from typing import Any, Callable, Optional

import pytest

# Ensure project root is on sys.path so `import edgestack` works under pytest
ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
	sys.path.insert(0, str(ROOT_DIR))

INDEX_HTML = b"<!doctype html><html><body><app-root></app-root></body></html>"


class FakeHandle:
	def __init__(self, response: Optional[dict[str, Any]] = None) -> None:
		self.calls: list[tuple[dict[str, Any], Any, Optional[Callable]]] = []
		self.response = response or {
			"statusCode": 200,
			"headers": {"Content-Type": "text/plain"},
			"multiValueHeaders": {},
			"body": "ok",
			"isBase64Encoded": False,
		}

	def invoke(self, event, context, callback=None):
		self.calls.append((event, context, callback))
		if callback is not None:
			callback(self.response)
		return self.response


class CountingFactory:
	def __init__(self, make: Callable[[], Any] = FakeHandle) -> None:
		self.make = make
		self.calls = 0

	def __call__(self):
		self.calls += 1
		return self.make()


class RecordingInvalidator:
	def __init__(self) -> None:
		self.calls: list[tuple[str, ...]] = []

	def invalidate(self, paths):
		self.calls.append(tuple(paths))
		return f"I{len(self.calls)}"


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
	for name in ("STAGE", "API_PREFIX", "ENTRY_DOCUMENT", "SITE_BUCKET", "DISTRIBUTION_ID", "SYNC_PRUNE"):
		monkeypatch.delenv(name, raising=False)


@pytest.fixture
def site_dir(tmp_path):
	root = tmp_path / "dist"
	(root / "assets").mkdir(parents=True)
	(root / "index.html").write_bytes(INDEX_HTML)
	(root / "assets" / "main.js").write_bytes(b"console.log('app');")
	(root / "assets" / "styles.css").write_bytes(b"body{margin:0}")
	(root / "favicon.ico").write_bytes(b"\x00\x00\x01\x00")
	return root


@pytest.fixture
def invalidator():
	return RecordingInvalidator()
