"""
Message handling for incoming messages from the vim-simplecov plugin.
"""

import json
import logging
from typing import Any, Dict

from vim_simplecov.coverage_tools import clear_coverage, show_coverage

logger = logging.getLogger("vim-simplecov")


def handle_vim_message(message: str, vim_state: Any) -> None:
    """
    Process incoming messages from the vim-simplecov plugin.

    Handles message types:
    - context_update: Records the current file and buffer text
    - show_coverage: Highlights uncovered lines (:SimpleCovShow)
    - clear_coverage: Removes coverage highlights (:SimpleCovClear)
    - disconnect: Marks the Vim connection as disconnected

    The result of show_coverage and clear_coverage is sent back to Vim as a
    notify request so the user sees why nothing was highlighted.

    Args:
        message: JSON string containing method and params
        vim_state: VimState instance to update
    """
    try:
        data = json.loads(message)
        if not isinstance(data, dict):
            logger.warning(f"Ignoring message that is not an object: {data!r}")
            return

        method = data.get("method")
        params = data.get("params", {})

        if method == "context_update":
            _handle_context_update(params, vim_state)
        elif method == "show_coverage":
            if params.get("filename") and not _handle_context_update(
                params, vim_state
            ):
                return
            _notify(vim_state, show_coverage(vim_state, color=params.get("color")))
        elif method == "clear_coverage":
            _notify(vim_state, clear_coverage(vim_state, params.get("filename")))
        elif method == "disconnect":
            vim_state.set_connected(False)
            logger.info("Vim explicitly disconnected")
        else:
            logger.warning(f"Unknown method from Vim: {method}")
    except Exception as e:
        logger.error(f"Error handling Vim message: {e}")


def _handle_context_update(params: Dict[str, Any], vim_state: Any) -> bool:
    """Replace the stored context, filling in defaults for missing fields.

    Returns False, leaving the context untouched, if a field has the wrong type.
    """
    context = {
        "filename": params.get("filename", ""),  # Absolute path of the buffer
        "content": params.get("content", ""),  # Full buffer text
        "encoding": params.get("encoding", ""),
    }
    for key, value in context.items():
        if not isinstance(value, str):
            logger.warning(f"Ignoring context with non-string {key}: {value!r}")
            return False

    vim_state.update_context(context)
    vim_state.set_connected(True)
    logger.info(f"Context updated: {context['filename']}")
    return True


def _notify(vim_state: Any, message: str) -> None:
    vim_state.request_queue.put(
        ("notify", {"method": "notify", "params": {"message": message}})
    )
