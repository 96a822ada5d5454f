import pytest

from huecli.colors import (
    BrightnessExpr,
    hex_to_rgb,
    parse_brightness,
    resolve_color,
    rgb_to_hsb,
)
from huecli.errors import ColorError


@pytest.mark.parametrize("short", ["abc", "f00", "09f", "#7e1", "FFF"])
def test_short_hex_matches_expanded(short):
    digits = short.lstrip("#")
    assert hex_to_rgb(short) == hex_to_rgb("".join(c * 2 for c in digits))


def test_hex_with_and_without_hash():
    assert hex_to_rgb("#ff8000") == (255, 128, 0)
    assert hex_to_rgb("ff8000") == (255, 128, 0)


@pytest.mark.parametrize("bad", ["zzz", "ff00", "12345g", "", "#"])
def test_malformed_hex_is_rejected(bad):
    with pytest.raises(ColorError):
        hex_to_rgb(bad)


def test_css_color_name():
    assert resolve_color("red") == (255, 0, 0)
    assert resolve_color("navy") == (0, 0, 128)


def test_config_color_overrides_css_name():
    assert resolve_color("red", {"red": "00ff00"}) == (0, 255, 0)
    assert resolve_color("sunset", {"sunset": "#f80"}) == (255, 136, 0)


def test_unknown_name_falls_back_to_hex():
    assert resolve_color("0000ff", {"red": "00ff00"}) == (0, 0, 255)
    with pytest.raises(ColorError):
        resolve_color("notacolor")


@pytest.mark.parametrize(
    "token,expected",
    [
        ("=100", BrightnessExpr("=", 100, False)),
        ("+10", BrightnessExpr("+", 10, False)),
        ("-10%", BrightnessExpr("-", 10, True)),
    ],
)
def test_parse_brightness(token, expected):
    assert parse_brightness(token) == expected


@pytest.mark.parametrize("token", ["red", "10", "+", "=10%%", "+-5", "=1.5"])
def test_parse_brightness_rejects(token):
    assert parse_brightness(token) is None


def test_percent_extremes():
    for start in (1, 127, 254):
        assert parse_brightness("=100%").apply(start) == 254
        assert parse_brightness("=0%").apply(start) == 1


def test_percent_rounds_half_up():
    assert parse_brightness("=75%").apply(1) == 191
    assert parse_brightness("=50%").apply(1) == 127


@pytest.mark.parametrize("token", ["=0", "=999", "+300", "-300", "+100%", "-100%", "=5000%"])
@pytest.mark.parametrize("start", [1, 2, 128, 253, 254])
def test_brightness_always_clamped(token, start):
    assert 1 <= parse_brightness(token).apply(start) <= 254


def test_relative_brightness():
    assert parse_brightness("+10").apply(100) == 110
    assert parse_brightness("-10").apply(100) == 90
    assert parse_brightness("+10%").apply(100) == 125
    assert parse_brightness("+10").apply(250) == 254


def test_rgb_to_hsb():
    assert rgb_to_hsb(255, 0, 0) == {"hue": 0, "sat": 254, "bri": 254}
    assert rgb_to_hsb(0, 0, 255)["hue"] == 43690
    assert rgb_to_hsb(0, 0, 0)["bri"] == 1
