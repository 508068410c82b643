from tab_tracker.reporting import format_duration, render_summary


def test_format_duration_examples():
    assert format_duration(0) == "0s"
    assert format_duration(65000) == "1m 5s"
    assert format_duration(3661000) == "1h 1m 1s"
    assert format_duration(3600000) == "1h"


def test_format_duration_drops_empty_components():
    assert format_duration(999) == "0s"
    assert format_duration(60000) == "1m"
    assert format_duration(3605000) == "1h 5s"
    assert format_duration(7320000) == "2h 2m"
    assert format_duration(-5000) == "0s"


def test_render_summary_orders_longest_first():
    lines = render_summary({"https://a.test/": 5000, "https://b.test/": 7000})
    body = [line.strip() for line in lines[4:]]
    assert body[0].startswith("https://b.test/")
    assert body[0].endswith("7s")
    assert body[1].startswith("https://a.test/")
    assert "12s across 2 addresses" in lines[2]


def test_render_summary_limit_and_empty():
    lines = render_summary({"a": 3000, "b": 2000, "c": 1000}, limit=1)
    assert len(lines) == 5
    assert render_summary({}) == ["No activity logged yet. Start browsing!"]
