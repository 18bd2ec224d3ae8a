from __future__ import annotations

import base64
from dataclasses import dataclass
from typing import Any

from .aspect import adjust_to_aspect_ratio
from .drawing import Drawing
from .errors import ParseError
from .layout import LayoutMetrics, layout_sequence
from .model import SequenceDiagram
from .parser import parse_sequence_diagram
from .svg import drawing_to_svg


@dataclass
class RenderResult:
    markup: str = ""
    width: int = 0
    height: int = 0
    error: str | None = None
    drawing: Drawing | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


def layout_with_aspect(
    diagram: SequenceDiagram,
    aspect_ratio: str | None = None,
    metrics: LayoutMetrics | None = None,
) -> Drawing:
    drawing = layout_sequence(diagram, metrics)
    drawing.width, drawing.height = adjust_to_aspect_ratio(drawing.view_width, drawing.view_height, aspect_ratio)
    return drawing


def render_sequence(
    diagram: SequenceDiagram | ParseError,
    aspect_ratio: str | None = None,
    theme: str | dict[str, Any] | None = None,
    metrics: LayoutMetrics | None = None,
) -> RenderResult:
    if isinstance(diagram, ParseError):
        return RenderResult(error=str(diagram))
    drawing = layout_with_aspect(diagram, aspect_ratio, metrics)
    return RenderResult(
        markup=drawing_to_svg(drawing, theme),
        width=drawing.width,
        height=drawing.height,
        drawing=drawing,
    )


def render_text(
    text: str,
    aspect_ratio: str | None = None,
    theme: str | dict[str, Any] | None = None,
    metrics: LayoutMetrics | None = None,
) -> RenderResult:
    try:
        diagram: SequenceDiagram | ParseError = parse_sequence_diagram(text)
    except ParseError as exc:
        diagram = exc
    return render_sequence(diagram, aspect_ratio, theme, metrics)


def markdown_export(markup: str, source: str, title: str = "UML Diagram") -> str:
    encoded = base64.b64encode(markup.encode("utf-8")).decode("ascii")
    return "\n".join(
        [
            f"# {title}",
            "",
            f"![{title}](data:image/svg+xml;base64,{encoded})",
            "",
            "## Source Code",
            "",
            "```",
            source.rstrip("\n"),
            "```",
            "",
        ]
    )
