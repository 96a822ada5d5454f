import io

import pytest

from huecli.actions import (
    Brightness,
    Color,
    Effect,
    PowerOff,
    PowerOn,
    RawState,
    build_action,
)
from huecli.errors import ColorError, UsageError


def test_power():
    assert build_action("on") == PowerOn()
    assert build_action("off") == PowerOff()


@pytest.mark.parametrize(
    "name,patch",
    [
        ("colorloop", {"effect": "colorloop"}),
        ("alert", {"alert": "lselect"}),
        ("clear", {"effect": "none", "alert": "none"}),
        ("reset", {"on": True, "bri": 254, "effect": "none", "alert": "none", "ct": 370}),
    ],
)
def test_effect_patches(name, patch):
    action = build_action(name)
    assert isinstance(action, Effect)
    assert action.patch == patch


def test_effect_patch_is_a_copy():
    action = build_action("reset")
    action.patch["bri"] = 1
    assert build_action("reset").patch["bri"] == 254


def test_state_reads_stdin():
    action = build_action("state", stdin=io.StringIO('{"ct": 300, "on": true}'))
    assert action == RawState({"ct": 300, "on": True})


@pytest.mark.parametrize("text", ["", "not json", "[1, 2]"])
def test_state_rejects_bad_input(text):
    with pytest.raises(UsageError):
        build_action("state", stdin=io.StringIO(text))


def test_brightness_and_color():
    assert isinstance(build_action("+10%"), Brightness)
    assert build_action("red") == Color((255, 0, 0))
    assert build_action("fav", {"fav": "123"}) == Color((0x11, 0x22, 0x33))


def test_bad_color():
    with pytest.raises(ColorError):
        build_action("blurple")
