from __future__ import annotations

import xml.etree.ElementTree as ET
from typing import Any

from .drawing import Drawing, Line, Point, Polygon, Polyline, Primitive, Rect, Text
from .theme import theme_css

SVG_NS = "http://www.w3.org/2000/svg"


def fmt(value: float) -> str:
    text = f"{float(value):.2f}".rstrip("0").rstrip(".")
    return "0" if text in {"", "-0"} else text


def fmt_points(points: tuple[Point, ...]) -> str:
    return " ".join(f"{fmt(x)},{fmt(y)}" for x, y in points)


def primitive_to_element(primitive: Primitive) -> ET.Element:
    if isinstance(primitive, Rect):
        attrs = {
            "class": primitive.style,
            "x": fmt(primitive.x),
            "y": fmt(primitive.y),
            "width": fmt(primitive.width),
            "height": fmt(primitive.height),
        }
        if primitive.rx:
            attrs["rx"] = fmt(primitive.rx)
        return ET.Element("rect", attrs)
    if isinstance(primitive, Line):
        return ET.Element(
            "line",
            {
                "class": primitive.style,
                "x1": fmt(primitive.x1),
                "y1": fmt(primitive.y1),
                "x2": fmt(primitive.x2),
                "y2": fmt(primitive.y2),
            },
        )
    if isinstance(primitive, Polyline):
        return ET.Element("polyline", {"class": primitive.style, "points": fmt_points(primitive.points)})
    if isinstance(primitive, Polygon):
        return ET.Element("polygon", {"class": primitive.style, "points": fmt_points(primitive.points)})
    if isinstance(primitive, Text):
        el = ET.Element(
            "text",
            {
                "class": primitive.style,
                "x": fmt(primitive.x),
                "y": fmt(primitive.y),
                "text-anchor": primitive.anchor,
            },
        )
        el.text = primitive.text
        return el
    raise TypeError(f"unsupported primitive: {primitive!r}")


def drawing_to_svg(drawing: Drawing, theme: str | dict[str, Any] | None = None) -> str:
    """Serialize a drawing as a standalone SVG document.

    ``width``/``height`` carry the (possibly aspect-adjusted) canvas size while
    the ``viewBox`` keeps the natural layout size, so the content scales.
    """
    view_w = drawing.view_width or drawing.width
    view_h = drawing.view_height or drawing.height
    root = ET.Element(
        "svg",
        {
            "xmlns": SVG_NS,
            "width": str(drawing.width),
            "height": str(drawing.height),
            "viewBox": f"0 0 {view_w} {view_h}",
        },
    )
    defs = ET.SubElement(root, "defs")
    style = ET.SubElement(defs, "style")
    style.text = "\n" + theme_css(theme) + "\n"

    for primitive in drawing.primitives:
        root.append(primitive_to_element(primitive))

    return ET.tostring(root, encoding="unicode")
