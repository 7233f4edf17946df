"""
Background highlights for uncovered regions.

The pipeline never touches the display directly. It talks to an OverlayHost,
which for a live editor is VimOverlayHost: every marker becomes a
highlight_text request queued for the Vim plugin, and clearing becomes a
clear_highlights request scoped to the SimpleCovUncovered property type, so
text properties owned by other plugins are left alone.
"""

import re
import itertools
import logging
from typing import Any, List, NamedTuple, Protocol, Sequence

from vim_simplecov.buffer import Buffer, Region
from vim_simplecov.config import HIGHLIGHT_GROUP
from vim_simplecov.errors import InvalidHighlightColor

logger = logging.getLogger("vim-simplecov")

_COLOR = re.compile(r"^#(?:[0-9a-fA-F]{3}|[0-9a-fA-F]{6})$")


class HighlightStyle(NamedTuple):
    background: str
    group: str = HIGHLIGHT_GROUP


class OverlayHost(Protocol):
    """Editor capability for creating and removing this plugin's markers."""

    def create(self, buffer: Buffer, region: Region, style: HighlightStyle) -> int:
        ...

    def remove_all(self, buffer: Buffer) -> int:
        ...


def validate_color(color: str) -> str:
    if not isinstance(color, str) or not _COLOR.match(color):
        raise InvalidHighlightColor(
            f"Invalid highlight color {color!r}, expected #rgb or #rrggbb"
        )
    return color.lower()


def apply_overlays(
    host: OverlayHost, buffer: Buffer, regions: Sequence[Region], color: str
) -> List[int]:
    """Replace the buffer's coverage markers with one marker per region.

    Args:
        host: Overlay host for the editor showing the buffer
        buffer: Buffer being annotated
        regions: Regions to paint, in order
        color: Background colour (#rgb or #rrggbb)

    Returns:
        Marker ids, one per region

    Raises:
        InvalidHighlightColor: Before any existing marker is removed
    """
    style = HighlightStyle(validate_color(color))

    removed = host.remove_all(buffer)
    logger.debug(f"Removed {removed} markers from {buffer.filename}")

    markers = [host.create(buffer, region, style) for region in regions]
    logger.info(f"Created {len(markers)} markers in {buffer.filename}")
    return markers


def clear_overlays(host: OverlayHost, buffer: Buffer) -> int:
    """Remove every coverage marker from the buffer."""
    removed = host.remove_all(buffer)
    logger.info(f"Cleared {removed} markers from {buffer.filename}")
    return removed


class VimOverlayHost:
    """OverlayHost that forwards markers to the Vim plugin via vim_state."""

    _ids = itertools.count(1)

    def __init__(self, vim_state: Any):
        self.vim_state = vim_state

    def create(self, buffer: Buffer, region: Region, style: HighlightStyle) -> int:
        marker_id = next(self._ids)
        start_line, start_col = buffer.position(region.start)
        end_line, end_col = buffer.position(region.end)

        self.vim_state.request_queue.put(
            (
                "highlight_text",
                {
                    "method": "highlight_text",
                    "params": {
                        "filename": buffer.filename,
                        "marker_id": marker_id,
                        "start_line": start_line,
                        "start_col": start_col,
                        "end_line": end_line,
                        "end_col": end_col,
                        "color": style.background,
                        "group": style.group,
                    },
                },
            )
        )
        self.vim_state.record_marker(buffer.filename, marker_id)
        return marker_id

    def remove_all(self, buffer: Buffer) -> int:
        self.vim_state.request_queue.put(
            (
                "clear_highlights",
                {
                    "method": "clear_highlights",
                    "params": {"filename": buffer.filename, "group": HIGHLIGHT_GROUP},
                },
            )
        )
        return self.vim_state.clear_markers(buffer.filename)
