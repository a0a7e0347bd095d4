import logging
from typing import Any, Callable, Optional

from ..server.bootstrap import ApplicationHandle, CompletionCallback
from .warm import WarmInstanceCache

logger = logging.getLogger(__name__)


class EntryPoint:
	def __init__(self, cache: WarmInstanceCache, factory: Callable[[], ApplicationHandle]) -> None:
		self.cache = cache
		self.factory = factory

	def __call__(self, event: dict[str, Any], context: Any, callback: Optional[CompletionCallback] = None) -> dict[str, Any]:
		if self.cache.initialized:
			logger.debug("Warm start")
		handle = self.cache.get_or_create(self.factory)
		return handle.invoke(event, context, callback)


def make_handler(cache: WarmInstanceCache, factory: Callable[[], ApplicationHandle]) -> Callable[[dict[str, Any], Any], dict[str, Any]]:
	entry = EntryPoint(cache, factory)

	def handler(event: dict[str, Any], context: Any) -> dict[str, Any]:
		return entry(event, context)

	handler.entry_point = entry  # type: ignore[attr-defined]
	return handler
