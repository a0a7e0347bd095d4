import logging
import threading
from typing import Callable, Generic, Optional, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class WarmInstanceCache(Generic[T]):
	"""Single-slot holder for the application handle of one execution context.

	The slot is filled on first use and never evicted. Concurrent first calls
	wait on the same initialization instead of racing each other.
	"""

	def __init__(self) -> None:
		self._lock = threading.Lock()
		self._value: Optional[T] = None
		self._filled = False
		self.bootstrap_count = 0

	@property
	def initialized(self) -> bool:
		return self._filled

	def get_or_create(self, factory: Callable[[], T]) -> T:
		if self._filled:
			return self._value  # type: ignore[return-value]
		with self._lock:
			if not self._filled:
				self.bootstrap_count += 1
				logger.debug("Cold start: initializing warm instance")
				# A raising factory leaves the slot empty.
				self._value = factory()
				self._filled = True
		return self._value  # type: ignore[return-value]


_default_cache: Optional[WarmInstanceCache] = None
_default_lock = threading.Lock()


def get_default_cache() -> WarmInstanceCache:
	global _default_cache
	if _default_cache is None:
		with _default_lock:
			if _default_cache is None:
				_default_cache = WarmInstanceCache()
	return _default_cache
