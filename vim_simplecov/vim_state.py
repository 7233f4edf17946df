"""
Thread-safe state for the Vim connection, the current buffer and its markers.

Socket listener threads write the editor context; coverage actions read it
and record the markers they create. A single lock (_lock) protects the
context, the connected flag and the marker table.
"""

import threading
import queue
from typing import Any, Dict, List, Optional


class VimState:
    """Thread-safe state manager for the Vim editor connection.

    Thread-safe methods (use lock):
    - update_context()/get_context(): Current file and buffer text
    - set_connected()/is_connected(): Connection state
    - record_marker()/clear_markers()/marker_count(): Coverage markers per file

    Thread-safe without lock (queue.Queue is thread-safe):
    - request_queue: Outgoing requests to Vim
    """

    def __init__(self):
        self._lock = threading.Lock()
        self.socket_server: Optional[Any] = None
        self.vim_channel: Optional[Any] = None
        self.vim_connected = False
        self.request_queue: queue.Queue = queue.Queue()
        self.markers: Dict[str, List[int]] = {}
        self.current_context: Dict[str, Any] = {
            "filename": "",
            "content": "",
            "encoding": "",
        }

    def update_context(self, context: Dict[str, Any]) -> None:
        with self._lock:
            self.current_context = context

    def get_context(self) -> Dict[str, Any]:
        """Get a copy of the current context thread-safely."""
        with self._lock:
            return self.current_context.copy()

    def set_connected(self, connected: bool) -> None:
        with self._lock:
            self.vim_connected = connected

    def is_connected(self) -> bool:
        with self._lock:
            return self.vim_connected

    def record_marker(self, filename: str, marker_id: int) -> None:
        with self._lock:
            self.markers.setdefault(filename, []).append(marker_id)

    def clear_markers(self, filename: str) -> int:
        """Forget the markers of one file and return how many there were."""
        with self._lock:
            return len(self.markers.pop(filename, []))

    def marker_count(self, filename: str) -> int:
        with self._lock:
            return len(self.markers.get(filename, []))
