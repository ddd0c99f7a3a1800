from conftest import make_report, make_suite, make_test
from reporting import catalog_snapshot, format_percentage, render_condensed_summary, truncate_list


def test_truncate_list():
    assert truncate_list([]) == ""
    assert truncate_list(["a", None, " "]) == "a"
    assert truncate_list(["a", "b", "c", "d", "e"], max_items=2) == "a, b (+3 more)"


def test_format_percentage():
    assert format_percentage(None) == "N/A"
    assert format_percentage(50) == "50.0%"
    assert format_percentage(33.333, precision=2) == "33.33%"


def test_snapshot_and_summary(model, runner):
    a, b = "/proj/tests/a.spec.ts", "/proj/tests/b.spec.ts"
    runner.report = make_report(("chromium", "/proj/tests", [a, b]), ("firefox", "/proj/tests", []))
    model.list_files()
    model.projects["chromium"].files[a].entries = [make_suite(a, 1, "s", [make_test(a, 2, "t")])]

    snapshot = catalog_snapshot(model)

    chromium = snapshot["projects"][0]
    assert snapshot["total_files"] == 2
    assert chromium["files"] == 2
    assert chromium["discovered"] == 1
    assert chromium["tests"] == 1
    assert chromium["undiscovered_files"] == [b]

    summary = render_condensed_summary(snapshot)
    assert "Catalog: 2 project(s), 2 file(s)" in summary
    assert "* chromium: 2 file(s), 1 test(s), discovered 50.0%" in summary
    assert f"pending: {b}" in summary
    assert "firefox: 0 file(s), 0 test(s), discovered N/A" in summary
