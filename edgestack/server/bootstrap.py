import asyncio
import logging
import time
from contextlib import contextmanager
from typing import Any, Callable, Iterator, Optional

from fastapi import FastAPI
from mangum import Mangum

from ..config import AppConfig
from .http import create_app

logger = logging.getLogger(__name__)

CompletionCallback = Callable[[dict[str, Any]], None]


@contextmanager
def _scoped_loop() -> Iterator[asyncio.AbstractEventLoop]:
	# Mangum drives each ASGI cycle on the calling thread's current loop.
	loop = asyncio.new_event_loop()
	asyncio.set_event_loop(loop)
	try:
		yield loop
	finally:
		asyncio.set_event_loop(None)
		loop.close()


class ApplicationHandle:
	"""A fully initialized application behind the Lambda proxy contract."""

	def __init__(self, app: FastAPI, adapter: Optional[Callable[..., dict[str, Any]]] = None) -> None:
		self.app = app
		self._adapter = adapter or Mangum(app, lifespan="off")

	def invoke(self, event: dict[str, Any], context: Any, callback: Optional[CompletionCallback] = None) -> dict[str, Any]:
		with _scoped_loop():
			response = self._adapter(event, context)
		if callback is not None:
			callback(response)
		return response

	__call__ = invoke


async def initialize(app: FastAPI) -> None:
	for init in list(getattr(app.state, "initializers", [])):
		await init(app)


def bootstrap(cfg: AppConfig | None = None) -> ApplicationHandle:
	cfg = cfg or AppConfig()
	started = time.perf_counter()
	logger.info("Bootstrapping application (stage=%s)", cfg.stage)
	app = create_app(cfg)
	with _scoped_loop() as loop:
		loop.run_until_complete(initialize(app))
	handle = ApplicationHandle(app)
	logger.info("Application ready in %.1f ms", (time.perf_counter() - started) * 1000)
	return handle
