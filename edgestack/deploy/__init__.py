from .invalidation import CloudFrontInvalidator, Invalidator
from .sync import DeploymentSynchronizer, SyncResult

__all__ = ["CloudFrontInvalidator", "DeploymentSynchronizer", "Invalidator", "SyncResult"]
