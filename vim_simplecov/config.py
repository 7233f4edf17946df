"""
Configuration and logging setup for the vim-simplecov server.
"""

import os
import logging
from typing import List, Optional

REPORT_RELATIVE_PATH = os.path.join("coverage", ".resultset.json")
MAX_SEARCH_DEPTH = 64
DEFAULT_HIGHLIGHT_COLOR = "#ffcccc"
HIGHLIGHT_GROUP = "SimpleCovUncovered"
LOGGER_NAME = "vim-simplecov"


def setup_logging():
    """Configure logging for the vim-simplecov server."""
    log_level = os.environ.get("LOG_LEVEL", "INFO").upper()
    log_file = os.environ.get("LOG_FILE")
    log_config = {
        "level": getattr(logging, log_level, logging.INFO),
        "format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    }
    if log_file:
        log_config.update({"filename": log_file, "filemode": "a"})
    logging.basicConfig(**log_config)
    return logging.getLogger(LOGGER_NAME)


def get_highlight_color() -> str:
    """Background colour used for uncovered lines."""
    return os.environ.get("SIMPLECOV_HIGHLIGHT_COLOR", DEFAULT_HIGHLIGHT_COLOR)


def get_frameworks() -> Optional[List[str]]:
    """Test-run names to consult in the report, or None for any of them."""
    raw = os.environ.get("SIMPLECOV_FRAMEWORKS", "")
    names = [name.strip() for name in raw.split(",") if name.strip()]
    return names or None


logger = setup_logging()
