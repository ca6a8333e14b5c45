from datetime import datetime

import pytest

from otakutrack.utils.formatting import (
    calculate_progress,
    estimate_watch_time,
    format_date,
    format_number,
    get_status_color,
    get_status_label,
    title_from_id,
    truncate_text,
)


@pytest.mark.parametrize(
    "current,total,expected",
    [(0, 12, 0), (6, 12, 50), (1, 3, 33), (12, 12, 100), (20, 12, 100), (5, None, 0), (5, 0, 0)],
)
def test_calculate_progress(current, total, expected):
    assert calculate_progress(current, total) == expected


def test_estimate_watch_time():
    assert estimate_watch_time(17) == 6.8
    assert estimate_watch_time(1) == 0.4
    assert estimate_watch_time(10, episode_length=45) == 7.5


def test_truncate_text():
    assert truncate_text("short") == "short"
    assert truncate_text("a" * 120) == "a" * 100 + "..."
    assert truncate_text(None) is None


def test_status_label_and_color():
    assert get_status_label("on_hold") == "On Hold"
    assert get_status_label("plan_to_watch") == "Plan to Watch"
    assert get_status_label("mystery") == "mystery"
    assert get_status_color("completed") == "#10b981"
    assert get_status_color("mystery") == "#6b7280"


def test_format_number():
    assert format_number(1234567) == "1,234,567"
    assert format_number(6.8) == "6.8"
    assert format_number(12.0) == "12"


def test_format_date():
    stamp = int(datetime(2026, 10, 18, 12, 0).timestamp() * 1000)
    assert format_date(stamp) == "October 18, 2026"
    assert format_date(None) == "Unknown"


def test_title_from_id():
    assert title_from_id("jujutsu-kaisen") == "Jujutsu Kaisen"
    assert title_from_id("spy-x-family") == "Spy X Family"
