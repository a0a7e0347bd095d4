from dataclasses import dataclass, field, replace
from typing import Iterator


def _lookup(headers: dict[str, str], name: str) -> str | None:
	lname = name.lower()
	for k, v in headers.items():
		if k.lower() == lname:
			return v
	return None


@dataclass
class EdgeRequest:
	method: str
	path: str
	query_string: str = ""
	headers: dict[str, str] = field(default_factory=dict)
	body: bytes = b""
	scheme: str = "https"
	host: str = "localhost"

	def with_headers(self, headers: dict[str, str]) -> "EdgeRequest":
		return replace(self, headers=headers)

	def header(self, name: str) -> str | None:
		return _lookup(self.headers, name)

	@property
	def url(self) -> str:
		qs = f"?{self.query_string}" if self.query_string else ""
		return f"{self.scheme}://{self.host}{self.path}{qs}"


@dataclass
class EdgeResponse:
	"""Viewer-facing response.

	``headers`` holds single-valued headers. Headers sent more than once
	(Set-Cookie above all) live in ``multi_value_headers`` and are never joined.
	"""

	status: int
	headers: dict[str, str] = field(default_factory=dict)
	body: bytes = b""
	multi_value_headers: dict[str, list[str]] = field(default_factory=dict)

	def header(self, name: str) -> str | None:
		values = self.header_values(name)
		return values[0] if values else None

	def header_values(self, name: str) -> list[str]:
		lname = name.lower()
		return [v for k, v in self.header_items() if k.lower() == lname]

	def header_items(self) -> Iterator[tuple[str, str]]:
		yield from self.headers.items()
		for k, values in self.multi_value_headers.items():
			for v in values:
				yield k, v
