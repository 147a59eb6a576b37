import os
from pathlib import Path

DEFAULT_LOG_LEVEL = "INFO"


def get_output_path(ensure_exists: bool = False) -> Path:
    """Get the directory generated universes are written to.

    Args:
        ensure_exists: If True, create the directory when it is missing.
                      If False, return the path as-is.
    """
    env_path = os.getenv("ORRERY_DATA_DIR")
    output = Path(env_path) if env_path else Path.cwd() / "universe-data"

    if ensure_exists:
        output.mkdir(parents=True, exist_ok=True)

    return output


def get_log_level() -> str:
    """Log level for the CLI (ORRERY_LOG_LEVEL, default INFO)."""
    return os.getenv("ORRERY_LOG_LEVEL", DEFAULT_LOG_LEVEL).upper()
