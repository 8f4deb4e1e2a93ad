import logging
from pathlib import Path
from typing import Any, Dict, Optional, Union

LOG_FORMAT = '%(asctime)s - %(levelname)s - %(message)s'


def setup_logging(level: Union[str, int] = "INFO", log_file: Optional[str] = None) -> logging.Logger:
    """
    Configure root logging for poly_slicer.

    Args:
        level: Level name ("DEBUG", "INFO", ...) or logging constant
        log_file: Optional file to log to in addition to the console

    Returns:
        The package logger
    """
    if isinstance(level, str):
        level = getattr(logging, level.strip().upper(), logging.INFO)

    handlers = [logging.StreamHandler()]
    if log_file is not None:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_file))

    logging.basicConfig(level=level, format=LOG_FORMAT, handlers=handlers, force=True)

    return logging.getLogger("poly_slicer")


def setup_logging_from_config(config: Dict[str, Any]) -> logging.Logger:
    """Configure logging from the ``logging`` section of a loaded config."""
    logging_config = config.get("logging", {}) or {}
    return setup_logging(logging_config.get("level", "INFO"), logging_config.get("file"))
