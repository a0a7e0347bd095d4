import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Optional

from ..errors import SyncError
from ..storage.base import ObjectStore, guess_content_type
from .invalidation import Invalidator

logger = logging.getLogger(__name__)


@dataclass
class SyncResult:
	uploaded: list[str] = field(default_factory=list)
	deleted: list[str] = field(default_factory=list)
	invalidation_id: Optional[str] = None


def iter_build_tree(build_dir: Path) -> Iterable[tuple[str, Path]]:
	for path in sorted(build_dir.rglob("*")):
		if path.is_file():
			yield path.relative_to(build_dir).as_posix(), path


class DeploymentSynchronizer:
	"""Publishes a static build into the origin store, then invalidates the edge."""

	def __init__(
		self,
		store: ObjectStore,
		invalidator: Invalidator,
		distribution_paths: Iterable[str] = ("/*",),
		prune: bool = True,
	) -> None:
		self.store = store
		self.invalidator = invalidator
		self.distribution_paths = tuple(distribution_paths)
		self.prune = prune

	def sync(self, build_dir: str | Path) -> SyncResult:
		root = Path(build_dir)
		if not root.is_dir():
			raise SyncError(f"Build directory not found: {root}")
		result = SyncResult()
		for key, path in iter_build_tree(root):
			self.store.put(key, path.read_bytes(), guess_content_type(key))
			result.uploaded.append(key)
			logger.debug("uploaded %s", key)
		if self.prune:
			local = set(result.uploaded)
			for key in list(self.store.keys()):
				if key not in local:
					self.store.delete(key)
					result.deleted.append(key)
					logger.debug("pruned %s", key)
		result.invalidation_id = self.invalidator.invalidate(self.distribution_paths)
		logger.info(
			"Synced %d objects (%d pruned), invalidation %s",
			len(result.uploaded), len(result.deleted), result.invalidation_id,
		)
		return result
