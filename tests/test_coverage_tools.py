import pytest

from vim_simplecov.coverage_tools import (
    clear_coverage,
    get_uncovered_lines,
    plan_coverage,
    show_coverage,
)
from vim_simplecov.buffer import Buffer
from vim_simplecov.errors import PathNotInReport, ReportNotFound, ReportParseError
from vim_simplecov.vim_state import VimState

from conftest import drain


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    monkeypatch.delenv("SIMPLECOV_HIGHLIGHT_COLOR", raising=False)
    monkeypatch.delenv("SIMPLECOV_FRAMEWORKS", raising=False)


def test_plan_coverage(project):
    plan = plan_coverage(Buffer.from_file(str(project)))

    assert plan.report_path.endswith(".resultset.json")
    assert plan.uncovered == [7]
    assert plan.regions == [(69, 78)]
    assert plan.skipped == []
    assert plan.summary.percent == 80.0


def test_plan_coverage_without_report(tmp_path):
    source = tmp_path / "a.rb"
    source.write_text("x\n")

    with pytest.raises(ReportNotFound):
        plan_coverage(Buffer.from_file(str(source)))


def test_plan_coverage_file_not_in_report(project, write_resultset):
    write_resultset(project.parent.parent, {"/elsewhere.rb": {"lines": [0]}})

    with pytest.raises(PathNotInReport):
        plan_coverage(Buffer.from_file(str(project)))


def test_plan_coverage_with_stale_report(project, write_resultset):
    write_resultset(project.parent.parent, {str(project): {"lines": [0] + [None] * 10 + [0]}})

    plan = plan_coverage(Buffer.from_file(str(project)))

    assert plan.uncovered == [1, 12]
    assert plan.regions == [(0, 16)]
    assert plan.skipped == [12]


def test_show_coverage(vim_state, overlay_host, project):
    message = show_coverage(vim_state, host=overlay_host)

    assert message == f"Highlighted 1 uncovered lines in {project} (80.0% covered)"
    [(_, region, style)] = overlay_host.markers[str(project)]
    assert project.read_text()[region.start:region.end] == "    a / b"
    assert style.background == "#ffcccc"


def test_show_coverage_uses_live_buffer_text(vim_state, overlay_host, project):
    context = vim_state.get_context()
    context["content"] = "# header\n" + context["content"]
    vim_state.update_context(context)

    show_coverage(vim_state, host=overlay_host)

    [(_, region, _)] = overlay_host.markers[str(project)]
    assert context["content"][region.start:region.end] == "  def divide(a, b)"


def test_show_coverage_twice_is_idempotent(vim_state, overlay_host, project):
    show_coverage(vim_state, host=overlay_host)
    show_coverage(vim_state, host=overlay_host)

    assert overlay_host.count(str(project)) == 1


def test_show_coverage_color_from_environment(vim_state, overlay_host, project, monkeypatch):
    monkeypatch.setenv("SIMPLECOV_HIGHLIGHT_COLOR", "#ffeeaa")

    show_coverage(vim_state, host=overlay_host)

    [(_, _, style)] = overlay_host.markers[str(project)]
    assert style.background == "#ffeeaa"


def test_show_coverage_frameworks_from_environment(
    vim_state, overlay_host, monkeypatch
):
    monkeypatch.setenv("SIMPLECOV_FRAMEWORKS", "RSpec, Cucumber")

    message = show_coverage(vim_state, host=overlay_host)

    assert message.startswith("No coverage data for")
    assert overlay_host.calls == []


def test_show_coverage_invalid_color(vim_state, overlay_host):
    message = show_coverage(vim_state, color="pink", host=overlay_host)

    assert message.startswith("Coverage not shown: Invalid highlight color")
    assert overlay_host.calls == []


def test_show_coverage_parse_error_leaves_markers(vim_state, overlay_host, project):
    show_coverage(vim_state, host=overlay_host)
    report = project.parent.parent / "coverage" / ".resultset.json"
    report.write_text("not json")

    message = show_coverage(vim_state, host=overlay_host)

    assert message.startswith("Coverage not shown: Invalid JSON")
    assert overlay_host.count(str(project)) == 1


def test_show_coverage_reports_skipped_lines(
    vim_state, overlay_host, project, write_resultset
):
    write_resultset(project.parent.parent, {str(project): {"lines": [0] * 11}})

    message = show_coverage(vim_state, host=overlay_host)

    assert message == (
        f"Highlighted 9 uncovered lines in {project} (0.0% covered), "
        "skipped 2 lines past the end of the buffer"
    )


def test_show_coverage_requires_connection(overlay_host):
    assert show_coverage(VimState(), host=overlay_host) == "Vim not connected to MCP socket"


def test_show_coverage_requires_file(overlay_host):
    state = VimState()
    state.set_connected(True)

    assert show_coverage(state, host=overlay_host) == "No file in current buffer"


def test_show_coverage_over_vim(vim_state, project):
    show_coverage(vim_state)

    requests = drain(vim_state.request_queue)
    assert [request_type for request_type, _ in requests] == [
        "clear_highlights",
        "highlight_text",
    ]
    params = requests[1][1]["params"]
    assert (params["start_line"], params["end_line"]) == (7, 7)
    assert vim_state.marker_count(str(project)) == 1


def test_clear_coverage(vim_state, overlay_host, project):
    show_coverage(vim_state, host=overlay_host)

    message = clear_coverage(vim_state, host=overlay_host)

    assert message == f"Cleared 1 coverage highlights from {project}"
    assert overlay_host.count(str(project)) == 0


def test_clear_coverage_named_file(vim_state, overlay_host):
    message = clear_coverage(vim_state, "/proj/other.rb", host=overlay_host)

    assert message == "Cleared 0 coverage highlights from /proj/other.rb"
    assert overlay_host.calls == [("remove_all", "/proj/other.rb")]


def test_get_uncovered_lines(vim_state, project):
    result = get_uncovered_lines(vim_state)

    assert result == {
        "filename": str(project),
        "report_path": str(project.parent.parent / "coverage" / ".resultset.json"),
        "uncovered_lines": [7],
        "skipped_lines": [],
        "relevant_lines": 5,
        "covered_lines": 4,
        "missed_lines": 1,
        "percent": 80.0,
    }
    assert drain(vim_state.request_queue) == []


def test_get_uncovered_lines_for_file_without_vim(project):
    result = get_uncovered_lines(VimState(), str(project))

    assert result["uncovered_lines"] == [7]


def test_get_uncovered_lines_missing_file(tmp_path):
    result = get_uncovered_lines(VimState(), str(tmp_path / "gone.rb"))

    assert result["error"].startswith("Cannot read")


def test_get_uncovered_lines_parse_error(project):
    (project.parent.parent / "coverage" / ".resultset.json").write_text("{")

    with pytest.raises(ReportParseError):
        plan_coverage(Buffer.from_file(str(project)))
    assert "error" in get_uncovered_lines(VimState(), str(project))


def test_show_coverage_report_not_utf8(vim_state, overlay_host, project):
    report = project.parent.parent / "coverage" / ".resultset.json"
    report.write_bytes(b'{"Minitest": "\xff\xfe"}')

    message = show_coverage(vim_state, host=overlay_host)

    assert message.startswith("Coverage not shown: Report is not valid UTF-8")
    assert overlay_host.calls == []
