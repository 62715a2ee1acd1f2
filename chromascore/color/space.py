"""Color-space conversions (no rendering context involved)."""

from typing import Tuple


def hsb_to_rgb(h: float, s: float, b: float) -> Tuple[int, int, int]:
    """HSB (h 0-360, s 0-1, b 0-1) to 8-bit RGB."""
    def channel(n: int) -> int:
        k = (n + h / 60.0) % 6
        return round(255 * (b * (1 - s * max(0.0, min(k, 4 - k, 1.0)))))

    return channel(5), channel(3), channel(1)


def hsl_to_hsb(h: float, s: float, l: float) -> Tuple[int, int, int]:
    """HSL (h 0-360, s 0-1, l 0-1) to HSB (0-360, 0-100, 0-100)."""
    b = l + s * min(l, 1 - l)
    sb = 0.0 if b == 0 else 2 * (1 - l / b)
    return round(h) % 360, round(sb * 100), round(b * 100)


def hsb_to_hex(h: float, s: float, b: float) -> str:
    """HSB (h 0-360, s/b 0-100) to a #rrggbb string."""
    r, g, bl = hsb_to_rgb(h, s / 100.0, b / 100.0)
    return f"#{r:02x}{g:02x}{bl:02x}"
