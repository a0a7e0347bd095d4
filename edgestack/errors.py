class EdgeStackError(Exception):
	pass


class SyncError(EdgeStackError):
	"""Raised when publishing the static build fails before any upload."""


class StoreError(EdgeStackError):
	status_code = 500

	def __init__(self, key: str, message: str | None = None) -> None:
		super().__init__(message or f"{self.__class__.__name__}: {key}")
		self.key = key


class AccessDenied(StoreError):
	status_code = 403


class NoSuchKey(StoreError):
	status_code = 404
