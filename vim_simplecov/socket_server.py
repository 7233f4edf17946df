"""
Unix domain socket server for Vim communication.

Vim and the server exchange newline-delimited JSON objects. Outgoing requests
are taken from vim_state.request_queue between reads, so every write to the
socket happens on the listener thread.
"""

import os
import json
import queue
import socket
import hashlib
import logging
import threading
from pathlib import Path
from typing import Any

from vim_simplecov.message_handler import handle_vim_message

logger = logging.getLogger("vim-simplecov")

RECV_SIZE = 65536
POLL_TIMEOUT = 0.1


def _validate_vim_message(data: Any) -> bool:
    """
    Check the structure of a decoded message from Vim.

    Expected structure:
    {
        "method": str,
        "params": dict (optional)
    }
    """
    if not isinstance(data, dict):
        logger.warning(f"Message is not a dict: {type(data)}")
        return False

    method = data.get("method")
    if not isinstance(method, str):
        logger.warning(f"Message has invalid or missing method field: {method}")
        return False

    if "params" in data and not isinstance(data["params"], dict):
        logger.warning(f"Message params is not a dict: {type(data['params'])}")
        return False

    return True


def get_socket_path() -> str:
    """Socket path under a directory named after a hash of the project dir."""
    dir_hash = hashlib.sha256(
        os.environ.get("SIMPLECOV_SOCKET_DIR", os.getcwd()).encode()
    ).hexdigest()
    socket_dir = Path(f"/tmp/vim-simplecov/{dir_hash}")
    socket_dir.mkdir(parents=True, exist_ok=True)
    return str(socket_dir / "sock")


def process_lines(pending: str, vim_state: Any) -> str:
    """Handle every complete line in pending and return the unfinished tail."""
    while "\n" in pending:
        line, pending = pending.split("\n", 1)
        line = line.strip()
        if not line:
            continue

        try:
            message = json.loads(line)
        except json.JSONDecodeError as e:
            logger.warning(f"Failed to parse JSON line: {line}, error: {e}")
            continue

        if _validate_vim_message(message):
            handle_vim_message(line, vim_state)
        else:
            logger.warning(f"Received invalid message structure: {message}")
    return pending


def _send_pending_requests(conn: socket.socket, vim_state: Any) -> int:
    """Send everything queued for Vim and return how many requests went out."""
    sent = 0
    while True:
        try:
            request_type, request_data = vim_state.request_queue.get_nowait()
        except queue.Empty:
            break
        conn.sendall((json.dumps(request_data) + "\n").encode("utf-8"))
        logger.debug(f"Sent {request_type} request to Vim")
        sent += 1
    if sent:
        logger.info(f"Sent {sent} requests to Vim")
    return sent


def start_socket_server(vim_state: Any) -> None:
    """Start the Unix domain socket server and accept Vim in the background."""
    socket_path = get_socket_path()
    logger.info(f"Creating socket at: {socket_path}")

    try:
        os.unlink(socket_path)
    except FileNotFoundError:
        pass

    vim_state.socket_server = socket.socket(socket.AF_UNIX, socket.SOCK_STREAM)
    vim_state.socket_server.bind(socket_path)
    os.chmod(socket_path, 0o600)
    vim_state.socket_server.listen(1)

    def accept_connections() -> None:
        while True:
            try:
                conn, _ = vim_state.socket_server.accept()
            except OSError as e:
                logger.error(f"Error accepting connection: {e}")
                break

            vim_state.vim_channel = conn
            vim_state.set_connected(True)
            logger.info("Vim connected to socket")
            threading.Thread(
                target=_listen_to_vim, args=(conn, vim_state), daemon=True
            ).start()

    threading.Thread(target=accept_connections, daemon=True).start()


def _listen_to_vim(conn: socket.socket, vim_state: Any) -> None:
    """Alternate between flushing queued requests and reading from Vim."""
    pending = ""
    conn.settimeout(POLL_TIMEOUT)
    while True:
        try:
            _send_pending_requests(conn, vim_state)

            try:
                raw_data = conn.recv(RECV_SIZE)
            except socket.timeout:
                continue

            if not raw_data:
                vim_state.set_connected(False)
                logger.info("Vim disconnected from socket")
                break

            try:
                data = raw_data.decode("utf-8")
            except UnicodeDecodeError as e:
                logger.error(f"Received malformed UTF-8 data, rejecting: {e}")
                continue

            logger.debug(f"Received data from Vim: {data}")
            pending = process_lines(pending + data, vim_state)
        except OSError as e:
            logger.error(f"Error in Vim communication: {e}")
            vim_state.set_connected(False)
            break
