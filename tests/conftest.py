import json

import pytest

from vim_simplecov.vim_state import VimState


class FakeOverlayHost:
    """In-memory overlay host that records markers per file."""

    def __init__(self):
        self.markers = {}
        self.calls = []
        self._next_id = 0

    def create(self, buffer, region, style):
        self._next_id += 1
        self.markers.setdefault(buffer.filename, []).append(
            (self._next_id, region, style)
        )
        self.calls.append(("create", buffer.filename, region))
        return self._next_id

    def remove_all(self, buffer):
        self.calls.append(("remove_all", buffer.filename))
        return len(self.markers.pop(buffer.filename, []))

    def count(self, filename):
        return len(self.markers.get(filename, []))


@pytest.fixture
def overlay_host():
    return FakeOverlayHost()


@pytest.fixture
def write_resultset():
    """Write a .resultset.json under <root>/coverage and return its path."""

    def _write(root, coverage, framework="Minitest"):
        report_dir = root / "coverage"
        report_dir.mkdir(parents=True, exist_ok=True)
        report_path = report_dir / ".resultset.json"
        report_path.write_text(
            json.dumps({framework: {"coverage": coverage, "timestamp": 1700000000}})
        )
        return report_path

    return _write


@pytest.fixture
def project(tmp_path, write_resultset):
    """A project with one partly covered Ruby file and its report."""
    source = tmp_path / "lib" / "calculator.rb"
    source.parent.mkdir(parents=True)
    source.write_text(
        "class Calculator\n"
        "  def add(a, b)\n"
        "    a + b\n"
        "  end\n"
        "\n"
        "  def divide(a, b)\n"
        "    a / b\n"
        "  end\n"
        "end\n"
    )
    write_resultset(
        tmp_path,
        {str(source): {"lines": [1, 1, 3, None, None, 1, 0, None, None]}},
    )
    return source


@pytest.fixture
def vim_state(project):
    """Connected VimState showing the project's source file."""
    state = VimState()
    state.set_connected(True)
    state.update_context(
        {
            "filename": str(project),
            "content": project.read_text(),
            "encoding": "utf-8",
        }
    )
    return state


def drain(request_queue):
    """Return every queued (request_type, request_data) pair."""
    items = []
    while not request_queue.empty():
        items.append(request_queue.get_nowait())
    return items
