import logging
import time
import uuid
from typing import Any, Iterable, Protocol

import boto3

logger = logging.getLogger(__name__)


class Invalidator(Protocol):
	def invalidate(self, paths: Iterable[str]) -> str: ...


class CloudFrontInvalidator(Invalidator):
	def __init__(self, distribution_id: str, client: Any = None) -> None:
		self.distribution_id = distribution_id
		self.client = client or boto3.client("cloudfront")

	def invalidate(self, paths: Iterable[str]) -> str:
		items = list(paths)
		resp = self.client.create_invalidation(
			DistributionId=self.distribution_id,
			InvalidationBatch={
				"Paths": {"Quantity": len(items), "Items": items},
				"CallerReference": f"edgestack-{int(time.time())}-{uuid.uuid4().hex[:8]}",
			},
		)
		inv_id = resp["Invalidation"]["Id"]
		logger.info("CloudFront invalidation %s created for %s", inv_id, items)
		return inv_id
