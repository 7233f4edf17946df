"""
Pick uncovered lines out of SimpleCov line counts.
"""

from typing import List, NamedTuple, Optional, Sequence


class CoverageSummary(NamedTuple):
    """Line totals for one file."""

    relevant: int
    covered: int
    missed: int

    @property
    def percent(self) -> float:
        if not self.relevant:
            return 100.0
        return self.covered * 100.0 / self.relevant


def _is_count(value: object) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def extract_uncovered(counts: Sequence[Optional[int]]) -> List[int]:
    """Return the 1-based line numbers whose execution count is exactly 0.

    Lines recorded as null (comments, blank lines, anything SimpleCov does
    not consider executable) are never reported.
    """
    return [
        index + 1
        for index, count in enumerate(counts)
        if _is_count(count) and count == 0
    ]


def summarize(counts: Sequence[Optional[int]]) -> CoverageSummary:
    relevant = [count for count in counts if _is_count(count)]
    missed = sum(1 for count in relevant if count == 0)
    return CoverageSummary(len(relevant), len(relevant) - missed, missed)
