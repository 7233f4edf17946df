"""
Read per-line execution counts out of a SimpleCov .resultset.json.

The report maps each test-run name to the coverage it collected:

    {"Minitest": {"coverage": {"/abs/path.rb": {"lines": [1, 0, null]}}}}

SimpleCov releases before 0.18 store the list of counts directly under the
file path instead of under a "lines" key; both layouts are accepted.
"""

import json
import logging
from typing import Any, Dict, List, Optional, Sequence

from vim_simplecov.errors import PathNotInReport, ReportNotFound, ReportParseError

logger = logging.getLogger("vim-simplecov")


def load_report(report_path: str) -> Dict[str, Any]:
    """Parse the report file into a dict. Raises ReportNotFound or ReportParseError."""
    try:
        with open(report_path, encoding="utf-8") as report_file:
            raw = report_file.read()
    except FileNotFoundError as e:
        raise ReportNotFound(f"Coverage report not found: {report_path}") from e
    except UnicodeDecodeError as e:
        raise ReportParseError(f"Report is not valid UTF-8: {report_path}: {e}") from e
    except OSError as e:
        raise ReportNotFound(f"Cannot read coverage report {report_path}: {e}") from e

    try:
        report = json.loads(raw)
    except json.JSONDecodeError as e:
        raise ReportParseError(f"Invalid JSON in {report_path}: {e}") from e

    if not isinstance(report, dict):
        raise ReportParseError(
            f"Expected a JSON object in {report_path}, got {type(report).__name__}"
        )
    return report


def lookup_line_counts(
    report: Dict[str, Any],
    source_file_path: str,
    frameworks: Optional[Sequence[str]] = None,
    report_path: str = "",
) -> List[Optional[int]]:
    """Return the "lines" array recorded for source_file_path.

    Args:
        report: Parsed report
        source_file_path: Absolute path exactly as SimpleCov recorded it
        frameworks: Test-run names to consult, in order. None consults every
                    run in the order they appear in the report.
        report_path: Where the report came from, for error messages

    Raises:
        PathNotInReport: If no consulted run has line data for the file
    """
    names = list(report) if frameworks is None else list(frameworks)

    for name in names:
        run = report.get(name)
        if not isinstance(run, dict):
            continue
        coverage = run.get("coverage")
        if not isinstance(coverage, dict):
            continue
        entry = coverage.get(source_file_path)
        lines = entry.get("lines") if isinstance(entry, dict) else entry
        if isinstance(lines, list):
            logger.debug(f"Using '{name}' coverage for {source_file_path}")
            return lines

    raise PathNotInReport(source_file_path, report_path)


def read_coverage_for_file(
    report_path: str,
    source_file_path: str,
    frameworks: Optional[Sequence[str]] = None,
) -> List[Optional[int]]:
    """Load report_path and return the line counts for source_file_path."""
    report = load_report(report_path)
    return lookup_line_counts(report, source_file_path, frameworks, report_path)
