"""
Logging setup.

Modules log through `logging.getLogger(__name__)`; this only configures
the handlers once at start-up.
"""

import logging
from pathlib import Path
from typing import Optional, Union


def setup_logger(log_level: str = "INFO", log_file: Optional[Union[str, Path]] = None) -> None:
    """
    Configure root logging.

    Args:
        log_level: DEBUG, INFO, WARNING, ERROR or CRITICAL
        log_file: Optional log file path (its directory is created)
    """
    handlers = [logging.StreamHandler()]
    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_path, encoding="utf-8"))

    logging.basicConfig(
        level=getattr(logging, log_level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=handlers,
        force=True,
    )
