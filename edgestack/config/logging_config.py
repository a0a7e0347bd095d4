import logging
import os

_QUIET_LOGGERS = ("botocore", "boto3", "urllib3", "s3transfer", "mangum.lifespan")


def configure_logging() -> logging.Logger:
	level_name = os.environ.get("LOG_LEVEL", "DEBUG").upper()
	logging.basicConfig(level=level_name, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
	# AWS SDK debug output drowns request logs
	for name in _QUIET_LOGGERS:
		logging.getLogger(name).setLevel(max(logging.INFO, logging.getLogger().level))
	return logging.getLogger()
