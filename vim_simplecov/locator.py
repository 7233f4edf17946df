"""
Find the SimpleCov report that belongs to a source file.
"""

import os
import logging
from typing import Optional

from vim_simplecov.config import MAX_SEARCH_DEPTH, REPORT_RELATIVE_PATH

logger = logging.getLogger("vim-simplecov")


def find_report_path(
    starting_directory: str,
    relative_path: str = REPORT_RELATIVE_PATH,
    max_depth: int = MAX_SEARCH_DEPTH,
) -> Optional[str]:
    """Walk up from starting_directory until relative_path exists.

    Args:
        starting_directory: Directory to start searching from
        relative_path: Report location relative to a project root
        max_depth: Maximum number of directories to check

    Returns:
        Path of the report file, or None if the filesystem root was reached
        (or max_depth directories were checked) without a match
    """
    candidate = os.path.abspath(starting_directory)

    for _ in range(max_depth):
        report_path = os.path.join(candidate, relative_path)
        if os.path.isfile(report_path):
            logger.debug(f"Found coverage report at {report_path}")
            return report_path

        parent = os.path.dirname(candidate)
        if parent == candidate:
            logger.debug(f"No {relative_path} above {starting_directory}")
            return None
        candidate = parent

    logger.warning(
        f"Gave up looking for {relative_path} after {max_depth} directories "
        f"above {starting_directory}"
    )
    return None


def find_report_for_file(source_file_path: str) -> Optional[str]:
    """Find the report for a file, starting in the directory that holds it."""
    return find_report_path(os.path.dirname(os.path.abspath(source_file_path)))
