"""
MCP server for the vim-simplecov plugin

Highlights lines that SimpleCov recorded as never executed in the file open in
Vim. The Vim plugin connects over a Unix domain socket and triggers the
actions itself (:SimpleCovShow, :SimpleCovClear); the same actions are exposed
as MCP tools so an assistant can show coverage while it writes tests.

MCP Tools Provided:
- show_coverage: Highlight uncovered lines in the current buffer
- clear_coverage: Remove coverage highlights
- get_uncovered_lines: List uncovered lines without changing highlights

Usage:
    python -m vim_simplecov.main

Configuration is read from the environment: LOG_LEVEL, LOG_FILE,
SIMPLECOV_HIGHLIGHT_COLOR, SIMPLECOV_FRAMEWORKS and SIMPLECOV_SOCKET_DIR.
"""

import sys
import signal
from typing import Optional
from fastmcp import FastMCP

from vim_simplecov.config import logger
from vim_simplecov.vim_state import VimState
from vim_simplecov.socket_server import start_socket_server
from vim_simplecov.coverage_tools import (
    show_coverage,
    clear_coverage,
    get_uncovered_lines,
)

mcp = FastMCP("vim-simplecov")
vim_state = VimState()


# ============================================================================
# MCP Tools
# ============================================================================


@mcp.tool()
def show_coverage_tool(color: Optional[str] = None) -> str:
    """Highlight the lines of the file open in Vim that no test executed.

    Reads coverage/.resultset.json (written by SimpleCov) from the nearest
    parent directory of the file. Use this after running the test suite, or
    when the user asks which parts of the current file are untested.

    Args:
        color (str, optional): Background colour as #rgb or #rrggbb
                               (default: SIMPLECOV_HIGHLIGHT_COLOR or #ffcccc)

    Returns:
        Status message with the number of highlighted lines and the
        file's line coverage
    """
    return show_coverage(vim_state, color)


@mcp.tool()
def clear_coverage_tool(filename: Optional[str] = None) -> str:
    """Remove coverage highlights from a file or the current buffer in Vim.

    Args:
        filename (str, optional): File path to clear highlights from.
                                 If empty, clears from current buffer.
    """
    return clear_coverage(vim_state, filename)


@mcp.tool()
def get_uncovered_lines_tool(filename: Optional[str] = None) -> dict:
    """List the uncovered line numbers of a file without highlighting them.

    Args:
        filename (str, optional): File to inspect. Defaults to the file open in Vim.

    Returns:
        Dictionary with uncovered_lines, coverage totals and the report path,
        or error when no coverage data is available
    """
    return get_uncovered_lines(vim_state, filename)


# ============================================================================
# Lifecycle Management
# ============================================================================


def cleanup_and_exit():
    """Close sockets and exit"""
    logger.info("Shutting down vim-simplecov server...")

    for name in ("socket_server", "vim_channel"):
        channel = getattr(vim_state, name)
        if channel is None:
            continue
        try:
            channel.close()
        except OSError as e:
            logger.error(f"Error closing {name}: {e}")

    sys.exit(0)


def signal_handler(signum, frame):
    logger.info(f"Received signal {signum}, shutting down...")
    cleanup_and_exit()


def run():
    signal.signal(signal.SIGTERM, signal_handler)
    signal.signal(signal.SIGINT, signal_handler)

    logger.info("Starting vim-simplecov server")
    start_socket_server(vim_state)
    mcp.run()


if __name__ == "__main__":
    run()
