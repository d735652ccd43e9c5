import io

from trackersync.models import CreatedEntity, ExportResult, ExportStage, WorkItem
from trackersync.ux import Colors, colorize, print_result, print_warning, print_work_items


def test_colorize_plain_when_not_a_tty():
    assert colorize("text", Colors.RED, stream=io.StringIO()) == "text"


def test_colorize_respects_no_color(monkeypatch):
    class _Tty(io.StringIO):
        def isatty(self) -> bool:
            return True

    monkeypatch.setenv("NO_COLOR", "1")
    assert colorize("text", Colors.GREEN, stream=_Tty()) == "text"
    monkeypatch.delenv("NO_COLOR")
    monkeypatch.setenv("TERM", "xterm")
    assert colorize("text", Colors.GREEN, stream=_Tty()).startswith(Colors.GREEN)


def test_print_result_lists_entities_and_errors():
    result = ExportResult(target="linear", stage=ExportStage.DONE)
    result.issues.append(CreatedEntity(id="i1", key="ENG-1", name="Build", kind="issue"))
    result.errors.append("Failed to create issue Deploy: boom")
    buf = io.StringIO()

    print_result(result, stream=buf)

    out = buf.getvalue()
    assert "linear export" in out
    assert "[issue] ENG-1  Build" in out
    assert "Failed to create issue Deploy: boom" in out
    assert "completed" not in out


def test_print_work_items_shows_metadata():
    buf = io.StringIO()

    print_work_items(
        [WorkItem("Build", estimate=4, labels=frozenset({"feature"}), children=(WorkItem("Sub"),))],
        stream=buf,
    )

    assert buf.getvalue() == "- Build  (none, est 4, feature)\n    - Sub\n"


def test_print_warning_writes_to_given_stream():
    buf = io.StringIO()

    print_warning("nothing to export", stream=buf)

    assert buf.getvalue() == "⚠ nothing to export\n"
