"""Abstract drawing primitives produced by the layout engine.

Every primitive carries a ``style`` made of one or more space separated style
class names; colours are resolved later through :mod:`seqdiagram.theme`.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Union

Point = tuple[float, float]


@dataclass(frozen=True)
class Rect:
    x: float
    y: float
    width: float
    height: float
    style: str
    rx: float = 0.0


@dataclass(frozen=True)
class Line:
    x1: float
    y1: float
    x2: float
    y2: float
    style: str


@dataclass(frozen=True)
class Polyline:
    points: tuple[Point, ...]
    style: str


@dataclass(frozen=True)
class Polygon:
    points: tuple[Point, ...]
    style: str


@dataclass(frozen=True)
class Text:
    x: float
    y: float
    text: str
    style: str
    anchor: str = "middle"


Primitive = Union[Rect, Line, Polyline, Polygon, Text]


@dataclass(frozen=True)
class Activation:
    participant: str
    start_row: int
    end_row: int
    depth: int


@dataclass
class Drawing:
    primitives: list[Primitive] = field(default_factory=list)
    width: int = 0
    height: int = 0
    view_width: int = 0
    view_height: int = 0
    rows: int = 0
    rows_used: int = 0
    activations: list[Activation] = field(default_factory=list)

    def style_classes(self) -> set[str]:
        classes: set[str] = set()
        for primitive in self.primitives:
            classes.update(primitive.style.split())
        return classes
