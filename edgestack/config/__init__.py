from .config import AppConfig, StackConfig, SyncConfig, read_env
from .logging_config import configure_logging

__all__ = ["AppConfig", "StackConfig", "SyncConfig", "configure_logging", "read_env"]
