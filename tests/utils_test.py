from __future__ import annotations

from dutop.utils import SI, format_percentage, format_size, format_size_auto


def test_format_size_binary():
    assert format_size(0) == "0 B"
    assert format_size(500) == "500 B"
    assert format_size(1024) == "1.0 K"
    assert format_size(1536) == "1.5 K"
    assert format_size(1048576) == "1.0 M"
    assert format_size(1073741824) == "1.0 G"


def test_format_size_si():
    assert format_size(1000, SI) == "1.0 KB"
    assert format_size(1500, SI) == "1.5 KB"
    assert format_size(1000000, SI) == "1.0 MB"
    assert format_size(1000000000, SI) == "1.0 GB"


def test_format_size_auto():
    assert format_size_auto(0) == "0 B"
    assert format_size_auto(1024) == "1.0 K"
    assert format_size_auto(1572864) == "1.5 M"


def test_format_size_caps_at_largest_unit():
    assert format_size(1024 ** 6) == "1024.0 P"


def test_format_percentage():
    assert format_percentage(50, 100) == " 50%"
    assert format_percentage(1, 3) == " 33%"
    assert format_percentage(0, 100) == "  0%"
    assert format_percentage(100, 100) == "100%"
    assert format_percentage(5, 0) == "0%"
