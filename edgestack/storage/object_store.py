import hashlib
import logging
import threading
import uuid
from typing import Any, Iterable, Optional

import boto3
from botocore.exceptions import ClientError

from ..errors import AccessDenied, NoSuchKey, StoreError
from .base import ObjectStore, StoredObject, guess_content_type

logger = logging.getLogger(__name__)


class VersionedObjectStore(ObjectStore):
	"""In-memory versioned bucket. Reads by anyone but the owner need a grant."""

	def __init__(self) -> None:
		self._lock = threading.Lock()
		# key -> generations, newest last; None marks a deletion
		self._versions: dict[str, list[Optional[StoredObject]]] = {}
		self._readers: set[str] = set()

	def grant_read(self, identity: str) -> None:
		self._readers.add(identity)

	def put(self, key: str, body: bytes, content_type: str | None = None) -> StoredObject:
		obj = StoredObject(
			key=key,
			body=body,
			content_type=content_type or guess_content_type(key),
			etag=hashlib.md5(body).hexdigest(),
			version_id=uuid.uuid4().hex,
		)
		with self._lock:
			self._versions.setdefault(key, []).append(obj)
		return obj

	def get(self, key: str, reader: str | None = None) -> StoredObject:
		if reader is not None and reader not in self._readers:
			raise AccessDenied(key)
		with self._lock:
			history = self._versions.get(key) or [None]
			latest = history[-1]
		if latest is None:
			raise NoSuchKey(key)
		return latest

	def delete(self, key: str) -> None:
		with self._lock:
			if key in self._versions and self._versions[key][-1] is not None:
				self._versions[key].append(None)

	def keys(self) -> list[str]:
		with self._lock:
			return sorted(k for k, v in self._versions.items() if v[-1] is not None)

	def versions(self, key: str) -> list[Optional[StoredObject]]:
		with self._lock:
			return list(self._versions.get(key, []))


class S3ObjectStore(ObjectStore):
	def __init__(self, bucket: str, client: Any = None, region: str | None = None) -> None:
		self.bucket = bucket
		self.client = client or boto3.client("s3", region_name=region)

	def put(self, key: str, body: bytes, content_type: str | None = None) -> StoredObject:
		ctype = content_type or guess_content_type(key)
		resp = self.client.put_object(
			Bucket=self.bucket,
			Key=key,
			Body=body,
			ContentType=ctype,
			ServerSideEncryption="AES256",
		)
		return StoredObject(
			key=key,
			body=body,
			content_type=ctype,
			etag=(resp.get("ETag") or "").strip('"'),
			version_id=resp.get("VersionId"),
		)

	def get(self, key: str, reader: str | None = None) -> StoredObject:
		try:
			resp = self.client.get_object(Bucket=self.bucket, Key=key)
		except ClientError as e:
			code = e.response.get("Error", {}).get("Code", "")
			if code in ("NoSuchKey", "404"):
				raise NoSuchKey(key) from e
			if code in ("AccessDenied", "403"):
				raise AccessDenied(key) from e
			raise StoreError(key, f"get_object failed for {key}: {code}") from e
		return StoredObject(
			key=key,
			body=resp["Body"].read(),
			content_type=resp.get("ContentType") or guess_content_type(key),
			etag=(resp.get("ETag") or "").strip('"'),
			version_id=resp.get("VersionId"),
		)

	def delete(self, key: str) -> None:
		self.client.delete_object(Bucket=self.bucket, Key=key)

	def keys(self) -> Iterable[str]:
		paginator = self.client.get_paginator("list_objects_v2")
		for page in paginator.paginate(Bucket=self.bucket):
			for item in page.get("Contents", []) or []:
				yield item["Key"]
