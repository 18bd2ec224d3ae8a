from __future__ import annotations

from .aspect import ASPECT_RATIOS, adjust_to_aspect_ratio
from .drawing import Activation, Drawing, Line, Polygon, Polyline, Rect, Text
from .errors import (
    MisplacedElseError,
    MissingHeaderError,
    ParseError,
    UnclosedFragmentError,
    UnmatchedEndError,
)
from .layout import LayoutMetrics, count_rows, layout_sequence
from .model import (
    Alternative,
    Fragment,
    FragmentKind,
    Message,
    MessageType,
    SequenceDiagram,
    diagram_to_dict,
)
from .parser import parse_sequence_diagram
from .render import RenderResult, markdown_export, render_sequence, render_text
from .svg import drawing_to_svg
from .theme import THEMES, get_theme, style_for
from .writer import format_sequence_diagram

__version__ = "0.1.0"

__all__ = [
    "ASPECT_RATIOS",
    "Activation",
    "Alternative",
    "Drawing",
    "Fragment",
    "FragmentKind",
    "LayoutMetrics",
    "Line",
    "Message",
    "MessageType",
    "MisplacedElseError",
    "MissingHeaderError",
    "ParseError",
    "Polygon",
    "Polyline",
    "Rect",
    "RenderResult",
    "SequenceDiagram",
    "THEMES",
    "Text",
    "UnclosedFragmentError",
    "UnmatchedEndError",
    "adjust_to_aspect_ratio",
    "count_rows",
    "diagram_to_dict",
    "drawing_to_svg",
    "format_sequence_diagram",
    "get_theme",
    "layout_sequence",
    "markdown_export",
    "parse_sequence_diagram",
    "render_sequence",
    "render_text",
    "style_for",
]
