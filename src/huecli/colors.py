from __future__ import annotations

import colorsys
import dataclasses
import math
import re
from typing import Dict, Mapping, Optional, Tuple

import webcolors

from .errors import ColorError

BRI_MIN = 1
BRI_MAX = 254

_BRIGHTNESS_RE = re.compile(r"^([-+=])([0-9]+)(%?)$")


@dataclasses.dataclass(frozen=True)
class BrightnessExpr:
    """A parsed brightness token such as ``=100``, ``+10`` or ``-25%``."""

    op: str
    amount: int
    percent: bool = False

    def magnitude(self) -> int:
        if not self.percent:
            return self.amount
        # half-up, so 75% is 191 and not 190
        return int(math.floor(self.amount * BRI_MAX / 100 + 0.5))

    def apply(self, current: int) -> int:
        n = self.magnitude()
        if self.op == "=":
            bri = n
        elif self.op == "+":
            bri = current + n
        else:
            bri = current - n
        return clamp_brightness(bri)


def clamp_brightness(value: int) -> int:
    return min(BRI_MAX, max(BRI_MIN, int(value)))


def parse_brightness(token: str) -> Optional[BrightnessExpr]:
    m = _BRIGHTNESS_RE.match(token)
    if m is None:
        return None
    op, num, perc = m.groups()
    return BrightnessExpr(op=op, amount=int(num), percent=bool(perc))


def hex_to_rgb(value: str) -> Tuple[int, int, int]:
    """Parse a 3 or 6 digit hex color, with or without the leading ``#``."""
    s = value if value.startswith("#") else "#" + value
    try:
        rgb = webcolors.hex_to_rgb(webcolors.normalize_hex(s))
    except ValueError:
        raise ColorError(f"not a color name or hex value: {value!r}") from None
    return (rgb.red, rgb.green, rgb.blue)


def lookup_color(name: str, colors: Optional[Mapping[str, str]] = None) -> Optional[str]:
    # config colors shadow the css names
    if colors and name in colors:
        return str(colors[name])
    try:
        return webcolors.name_to_hex(name)
    except ValueError:
        return None


def resolve_color(token: str, colors: Optional[Mapping[str, str]] = None) -> Tuple[int, int, int]:
    hexval = lookup_color(token, colors)
    return hex_to_rgb(hexval if hexval is not None else token)


def rgb_to_hsb(r: int, g: int, b: int) -> Dict[str, int]:
    """Convert 0-255 RGB into bridge hue (0-65535), sat (0-254) and bri (1-254)."""
    h, s, v = colorsys.rgb_to_hsv(r / 255.0, g / 255.0, b / 255.0)
    return {
        "hue": int(round(h * 65535)),
        "sat": int(round(s * 254)),
        "bri": clamp_brightness(round(v * 254)),
    }
