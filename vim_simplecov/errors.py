"""
Exceptions raised while turning a coverage report into highlights.
"""


class CoverageError(Exception):
    """Base class for everything that stops a coverage action."""


class ReportNotFound(CoverageError):
    """No coverage report could be located or opened."""


class PathNotInReport(ReportNotFound):
    """The report has no line data for the requested source file."""

    def __init__(self, source_file_path: str, report_path: str = ""):
        self.source_file_path = source_file_path
        self.report_path = report_path
        where = f" in {report_path}" if report_path else ""
        super().__init__(f"No coverage data for {source_file_path}{where}")


class ReportParseError(CoverageError):
    """The report exists but is not a JSON object."""


class InvalidHighlightColor(CoverageError, ValueError):
    """The highlight colour is not a #rgb or #rrggbb value."""
