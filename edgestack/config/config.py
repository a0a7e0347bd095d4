import os
from pathlib import Path


def read_env(name: str, default: str | None = None, required: bool = False) -> str | None:
	value = os.environ.get(name, default)
	if required and (value is None or value == ""):
		raise RuntimeError(f"Missing required environment variable: {name}")
	return value


def _read_int(name: str, default: int) -> int:
	raw = read_env(name, str(default))
	try:
		return int(raw or default)
	except Exception:
		return default


def _read_bool(name: str, default: bool) -> bool:
	raw = (read_env(name, "") or "").strip().lower()
	if not raw:
		return default
	return raw in {"1", "true", "yes", "on"}


_ROOT_DIR = Path(__file__).resolve().parents[2]


class AppConfig:
	def __init__(self) -> None:
		self.stage = read_env("STAGE", "prod") or "prod"
		self.version = read_env("APP_VERSION", "0.1.0") or "0.1.0"
		self.host = read_env("HOST", "0.0.0.0")
		self.port = _read_int("PORT", 8080)
		self.api_prefix = (read_env("API_PREFIX", "api") or "api").strip("/")


class StackConfig:
	"""Deployment-time parameters of the stack."""

	def __init__(self) -> None:
		self.stack_name = read_env("STACK_NAME", "WebApiStack") or "WebApiStack"
		self.stage = read_env("STAGE", "prod") or "prod"
		self.api_prefix = (read_env("API_PREFIX", "api") or "api").strip("/")
		self.memory_mb = max(128, min(_read_int("LAMBDA_MEMORY_MB", 1024), 10240))
		self.timeout_seconds = max(1, min(_read_int("LAMBDA_TIMEOUT_SECONDS", 15), 900))
		self.api_bundle_dir = read_env("API_BUNDLE_DIR", str(_ROOT_DIR / "build" / "api"))
		self.web_dist_dir = read_env("WEB_DIST_DIR", str(_ROOT_DIR / "web" / "dist"))
		self.entry_document = "/" + (read_env("ENTRY_DOCUMENT", "index.html") or "index.html").lstrip("/")
		self.log_level = (read_env("LOG_LEVEL", "INFO") or "INFO").upper()

	def function_environment(self) -> dict[str, str]:
		return {
			"PYTHONFAULTHANDLER": "1",
			"LOG_LEVEL": self.log_level,
			"STAGE": self.stage,
			"API_PREFIX": self.api_prefix,
		}


class SyncConfig:
	def __init__(self) -> None:
		self.bucket = read_env("SITE_BUCKET", required=True)
		self.distribution_id = read_env("DISTRIBUTION_ID", required=True)
		self.web_dist_dir = read_env("WEB_DIST_DIR", str(_ROOT_DIR / "web" / "dist"))
		self.prune = _read_bool("SYNC_PRUNE", True)
		self.region = read_env("AWS_REGION")
