from .base import ObjectStore, StoredObject, guess_content_type
from .object_store import S3ObjectStore, VersionedObjectStore

__all__ = ["ObjectStore", "S3ObjectStore", "StoredObject", "VersionedObjectStore", "guess_content_type"]
