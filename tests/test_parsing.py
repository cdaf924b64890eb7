import pytest

from vaultbot.parsing import parse_duration, parse_hex_color, robux_after_tax, robux_before_tax


@pytest.mark.parametrize(
    "text, expected",
    [
        ("30s", 30_000),
        ("5m", 300_000),
        ("2h", 7_200_000),
        ("1d", 86_400_000),
        ("28d", 28 * 86_400_000),
        ("0m", 0),
    ],
)
def test_parse_duration(text, expected):
    assert parse_duration(text) == expected


@pytest.mark.parametrize("text", ["", "5", "m", "5w", "1.5h", "-5m", "5 m", "permanent"])
def test_parse_duration_rejects_garbage(text):
    assert parse_duration(text) is None


def test_parse_hex_color():
    assert parse_hex_color("#FF00FF") == 0xFF00FF
    assert parse_hex_color("00ff00") == 0x00FF00
    # Leading hex digits are read, the rest ignored.
    assert parse_hex_color("#12zz") == 0x12


@pytest.mark.parametrize("text", [None, "", "#", "purple", "#1234567"])
def test_parse_hex_color_falls_back_to_blurple(text):
    assert parse_hex_color(text) == 0x5865F2


def test_robux_tax_conversion():
    assert robux_after_tax(1000) == 700
    assert robux_before_tax(700) == 1000
    assert robux_after_tax(1) == 1
    assert robux_before_tax(100) == 143
