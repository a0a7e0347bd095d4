import mimetypes
from dataclasses import dataclass
from typing import Iterable, Optional, Protocol


@dataclass(frozen=True)
class StoredObject:
	key: str
	body: bytes
	content_type: str
	etag: str
	version_id: Optional[str] = None


class ObjectStore(Protocol):
	def put(self, key: str, body: bytes, content_type: str | None = None) -> StoredObject: ...
	def get(self, key: str, reader: str | None = None) -> StoredObject: ...
	def delete(self, key: str) -> None: ...
	def keys(self) -> Iterable[str]: ...


def guess_content_type(key: str) -> str:
	ctype, _ = mimetypes.guess_type(key)
	return ctype or "application/octet-stream"
