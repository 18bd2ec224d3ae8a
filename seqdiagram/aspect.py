from __future__ import annotations

import math

ASPECT_RATIOS: dict[str, tuple[str, float | None]] = {
    "auto": ("Auto (Free)", None),
    "16:9": ("16:9 (Slides)", 16 / 9),
    "4:3": ("4:3 (Presentation)", 4 / 3),
    "a4-portrait": ("A4 Portrait", 1 / 1.414),
    "a4-landscape": ("A4 Landscape", 1.414),
    "square": ("Square (1:1)", 1.0),
}


def get_aspect_ratio(name: str | None) -> float | None:
    return ASPECT_RATIOS.get(name or "auto", ASPECT_RATIOS["auto"])[1]


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def adjust_to_aspect_ratio(width: int, height: int, name: str | None = None) -> tuple[int, int]:
    ratio = get_aspect_ratio(name)
    if not ratio or width <= 0 or height <= 0:
        return width, height

    # Too wide: keep the height. Too tall: keep the width.
    if width / height > ratio:
        return round_half_up(height * ratio), height
    return width, round_half_up(width / ratio)
