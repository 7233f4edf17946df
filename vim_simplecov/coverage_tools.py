"""
Coverage actions for the current editor buffer.

show_coverage runs the whole pipeline (locate report, read line counts, pick
uncovered lines, map them to regions) before touching the display, so a
failure at any step leaves existing highlights exactly as they were.
"""

import os
import logging
from typing import Any, Dict, List, NamedTuple, Optional, Sequence

from vim_simplecov.buffer import Buffer, Region, lines_to_regions, stale_lines
from vim_simplecov.config import REPORT_RELATIVE_PATH, get_frameworks, get_highlight_color
from vim_simplecov.errors import CoverageError, PathNotInReport, ReportNotFound
from vim_simplecov.extractor import CoverageSummary, extract_uncovered, summarize
from vim_simplecov.highlighter import (
    OverlayHost,
    VimOverlayHost,
    apply_overlays,
    clear_overlays,
)
from vim_simplecov.locator import find_report_for_file
from vim_simplecov.report_reader import read_coverage_for_file

logger = logging.getLogger("vim-simplecov")


class CoveragePlan(NamedTuple):
    report_path: str
    uncovered: List[int]
    regions: List[Region]
    skipped: List[int]
    summary: CoverageSummary


def plan_coverage(
    buffer: Buffer, frameworks: Optional[Sequence[str]] = None
) -> CoveragePlan:
    """Work out which regions of buffer to highlight.

    Raises:
        ReportNotFound: No report above the buffer's file
        PathNotInReport: The report has nothing for the buffer's file
        ReportParseError: The report is not valid JSON
    """
    report_path = find_report_for_file(buffer.filename)
    if report_path is None:
        raise ReportNotFound(
            f"No {REPORT_RELATIVE_PATH} found above {os.path.dirname(buffer.filename)}"
        )

    counts = read_coverage_for_file(report_path, buffer.filename, frameworks)
    uncovered = extract_uncovered(counts)
    regions = lines_to_regions(buffer, uncovered)
    skipped = stale_lines(buffer, uncovered)
    if skipped:
        logger.warning(
            f"{len(skipped)} uncovered lines are past the end of {buffer.filename}; "
            f"the report may be out of date"
        )

    return CoveragePlan(report_path, uncovered, regions, skipped, summarize(counts))


def _load_buffer(context: Dict[str, Any], filename: Optional[str] = None) -> Buffer:
    """Buffer for filename, using the live text Vim sent when it has any."""
    current = context.get("filename", "")
    name = os.path.abspath(filename or current)
    if context.get("content") and current and name == os.path.abspath(current):
        return Buffer(context["content"], name)

    try:
        return Buffer.from_file(name, context.get("encoding") or "utf-8")
    except (OSError, UnicodeDecodeError, LookupError) as e:
        raise CoverageError(f"Cannot read {name}: {e}") from e


def show_coverage(
    vim_state: Any,
    color: Optional[str] = None,
    frameworks: Optional[Sequence[str]] = None,
    host: Optional[OverlayHost] = None,
) -> str:
    """Highlight the uncovered lines of the current buffer.

    Args:
        vim_state: Vim state object for communicating with the editor
        color: Background colour, defaults to SIMPLECOV_HIGHLIGHT_COLOR
        frameworks: Test-run names to read from the report, defaults to
                    SIMPLECOV_FRAMEWORKS (any run when unset)
        host: Overlay host, defaults to the connected Vim instance

    Returns:
        Status message for the user
    """

    if not vim_state.is_connected():
        return "Vim not connected to MCP socket"

    context = vim_state.get_context()
    if not context.get("filename"):
        return "No file in current buffer"

    if color is None:
        color = get_highlight_color()
    if frameworks is None:
        frameworks = get_frameworks()
    if host is None:
        host = VimOverlayHost(vim_state)

    try:
        buffer = _load_buffer(context)
        plan = plan_coverage(buffer, frameworks)
        markers = apply_overlays(host, buffer, plan.regions, color)
    except PathNotInReport as e:
        logger.info(str(e))
        return str(e)
    except CoverageError as e:
        logger.warning(f"Coverage not shown: {e}")
        return f"Coverage not shown: {e}"

    message = (
        f"Highlighted {len(markers)} uncovered lines in {buffer.filename} "
        f"({plan.summary.percent:.1f}% covered)"
    )
    if plan.skipped:
        message += f", skipped {len(plan.skipped)} lines past the end of the buffer"
    return message


def clear_coverage(
    vim_state: Any,
    filename: Optional[str] = None,
    host: Optional[OverlayHost] = None,
) -> str:
    """Remove coverage highlights from a file or the current buffer.

    Args:
        vim_state: Vim state object for communicating with the editor
        filename: File to clear, defaults to the current buffer
        host: Overlay host, defaults to the connected Vim instance

    Returns:
        Status message for the user
    """

    if not vim_state.is_connected():
        return "Vim not connected to MCP socket"

    name = filename or vim_state.get_context().get("filename", "")
    if not name:
        return "No file in current buffer"
    if host is None:
        host = VimOverlayHost(vim_state)

    removed = clear_overlays(host, Buffer("", os.path.abspath(name)))
    return f"Cleared {removed} coverage highlights from {name}"


def get_uncovered_lines(
    vim_state: Any, filename: Optional[str] = None
) -> Dict[str, Any]:
    """Report uncovered lines without changing any highlight.

    Uses the current buffer unless filename is given, in which case the file
    is read from disk and Vim does not need to be connected.

    Returns:
        Dictionary containing filename, report_path, uncovered_lines,
        skipped_lines, relevant_lines, covered_lines, missed_lines and
        percent, or error on failure
    """

    context = vim_state.get_context()
    if filename is None:
        if not vim_state.is_connected():
            return {"error": "Vim not connected to MCP socket"}
        if not context.get("filename"):
            return {"error": "No file in current buffer"}

    try:
        buffer = _load_buffer(context, filename)
        plan = plan_coverage(buffer, get_frameworks())
    except CoverageError as e:
        logger.warning(f"Cannot read coverage: {e}")
        return {"error": str(e)}

    return {
        "filename": buffer.filename,
        "report_path": plan.report_path,
        "uncovered_lines": plan.uncovered,
        "skipped_lines": plan.skipped,
        "relevant_lines": plan.summary.relevant,
        "covered_lines": plan.summary.covered,
        "missed_lines": plan.summary.missed,
        "percent": round(plan.summary.percent, 1),
    }
