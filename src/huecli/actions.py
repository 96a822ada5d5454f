from __future__ import annotations

import dataclasses
import json
from typing import Any, Dict, IO, Mapping, Optional, Tuple, Union

from .colors import BrightnessExpr, parse_brightness, resolve_color
from .errors import UsageError

# name -> (state patch, message)
EFFECTS: Dict[str, Tuple[Dict[str, Any], str]] = {
    "colorloop": ({"effect": "colorloop"}, "color loop started"),
    "alert": ({"alert": "lselect"}, "alert started"),
    "clear": ({"effect": "none", "alert": "none"}, "effects cleared"),
    "reset": ({"on": True, "bri": 254, "effect": "none", "alert": "none", "ct": 370}, "reset to default state"),
}


@dataclasses.dataclass(frozen=True)
class PowerOn:
    name: str = "on"


@dataclasses.dataclass(frozen=True)
class PowerOff:
    name: str = "off"


@dataclasses.dataclass(frozen=True)
class Effect:
    name: str

    @property
    def patch(self) -> Dict[str, Any]:
        return dict(EFFECTS[self.name][0])

    @property
    def message(self) -> str:
        return EFFECTS[self.name][1]


@dataclasses.dataclass(frozen=True)
class RawState:
    patch: Mapping[str, Any]
    name: str = "state"


@dataclasses.dataclass(frozen=True)
class Brightness:
    expr: BrightnessExpr
    name: str = "brightness"


@dataclasses.dataclass(frozen=True)
class Color:
    rgb: Tuple[int, int, int]
    name: str = "color"


Action = Union[PowerOn, PowerOff, Effect, RawState, Brightness, Color]


def read_state(stream: IO[str]) -> Dict[str, Any]:
    """Read the whole of ``stream`` as one JSON object."""
    try:
        data = json.loads(stream.read())
    except ValueError as e:
        raise UsageError(f"failed to parse state data from stdin: {e}") from None
    if not isinstance(data, dict):
        raise UsageError("state data on stdin must be a JSON object")
    return data


def build_action(token: str, colors: Optional[Mapping[str, str]] = None,
                 stdin: Optional[IO[str]] = None) -> Action:
    if token == "on":
        return PowerOn()
    if token == "off":
        return PowerOff()
    if token in EFFECTS:
        return Effect(token)
    if token == "state":
        if stdin is None:
            raise UsageError("the state action needs JSON on stdin")
        return RawState(read_state(stdin))
    expr = parse_brightness(token)
    if expr is not None:
        return Brightness(expr)
    return Color(resolve_color(token, colors))
