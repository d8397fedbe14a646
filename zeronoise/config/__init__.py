from .settings import Settings, get_settings
from .startup_validation import run_startup_validation

__all__ = ["Settings", "get_settings", "run_startup_validation"]
