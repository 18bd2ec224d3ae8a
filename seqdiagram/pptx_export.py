from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from pptx import Presentation
from pptx.dml.color import RGBColor
from pptx.enum.dml import MSO_LINE_DASH_STYLE
from pptx.enum.shapes import MSO_CONNECTOR, MSO_SHAPE
from pptx.enum.text import MSO_AUTO_SIZE, MSO_VERTICAL_ANCHOR, PP_ALIGN
from pptx.util import Emu, Inches, Pt

from .drawing import Drawing, Line, Point, Polygon, Polyline, Primitive, Rect, Text
from .theme import get_theme, style_for

logger = logging.getLogger(__name__)

PX_PER_INCH = 96.0
EMU_PER_INCH = 914400.0
PT_PER_PX = 0.75
SLIDE_MARGIN_IN = 0.35
FONT_FAMILY = "Arial"

EMBED_START = "__SEQDIAGRAM_EMBED_START__"
EMBED_END = "__SEQDIAGRAM_EMBED_END__"

ALIGN_FOR_ANCHOR = {
    "start": PP_ALIGN.LEFT,
    "middle": PP_ALIGN.CENTER,
    "end": PP_ALIGN.RIGHT,
}


def to_rgb(value: str | None) -> RGBColor:
    text = (value or "000000").strip().lstrip("#")
    if len(text) == 3:
        text = "".join(ch * 2 for ch in text)
    if len(text) != 6:
        text = "000000"
    return RGBColor(int(text[0:2], 16), int(text[2:4], 16), int(text[4:6], 16))


def parse_slide_size(slide_size: str | None) -> tuple[float, float]:
    text = (slide_size or "16:9").strip().lower()
    if text in {"16:9", "wide", "widescreen"}:
        return 13.333, 7.5
    if text in {"4:3", "standard"}:
        return 10.0, 7.5

    if "x" in text:
        try:
            w_text, h_text = text.split("x", 1)
            width = float(w_text.strip())
            height = float(h_text.strip())
            if width <= 0 or height <= 0:
                raise ValueError("non-positive slide size")
        except ValueError as exc:
            raise ValueError(f"invalid slide size '{slide_size}' (expected 16:9, 4:3, or WxH)") from exc
        return width, height

    raise ValueError(f"invalid slide size '{slide_size}' (expected 16:9, 4:3, or WxH)")


def text_units(text: str) -> float:
    units = 0.0
    for ch in text:
        if ch.isspace():
            units += 0.35
            continue
        if ord(ch) >= 0x3000:
            units += 1.75
            continue
        units += 1.0
    return units


class SlideCanvas:
    """Maps drawing pixel coordinates onto a slide, scaled to fit and centred."""

    def __init__(self, slide: Any, drawing: Drawing, slide_w: float, slide_h: float, theme: dict[str, Any]) -> None:
        self.slide = slide
        self.theme = theme
        view_w = max(1.0, float(drawing.view_width or drawing.width)) / PX_PER_INCH
        view_h = max(1.0, float(drawing.view_height or drawing.height)) / PX_PER_INCH
        avail_w = max(0.5, slide_w - 2 * SLIDE_MARGIN_IN)
        avail_h = max(0.5, slide_h - 2 * SLIDE_MARGIN_IN)
        self.scale = min(avail_w / view_w, avail_h / view_h)
        self.offset_x = (slide_w - view_w * self.scale) / 2.0
        self.offset_y = (slide_h - view_h * self.scale) / 2.0

    def x(self, value: float) -> float:
        return self.offset_x + value / PX_PER_INCH * self.scale

    def y(self, value: float) -> float:
        return self.offset_y + value / PX_PER_INCH * self.scale

    def length(self, value: float) -> float:
        return value / PX_PER_INCH * self.scale

    def font_pt(self, px: float) -> float:
        return max(5.0, min(48.0, px * PT_PER_PX * self.scale))


def apply_connector_style(connector: Any, *, color: str | None, dashed: bool, width_pt: float) -> None:
    connector.line.width = Pt(width_pt)
    connector.line.color.rgb = to_rgb(color)
    connector.line.dash_style = MSO_LINE_DASH_STYLE.DASH if dashed else MSO_LINE_DASH_STYLE.SOLID


def apply_shape_style(shape: Any, style: dict[str, Any], scale: float) -> None:
    if style["fill"]:
        shape.fill.solid()
        shape.fill.fore_color.rgb = to_rgb(style["fill"])
    else:
        shape.fill.background()
    if style["stroke"]:
        shape.line.color.rgb = to_rgb(style["stroke"])
        shape.line.width = Pt(max(0.5, style["stroke_width"] * PT_PER_PX * scale))
        if style["dashed"]:
            shape.line.dash_style = MSO_LINE_DASH_STYLE.DASH
    else:
        shape.line.fill.background()


def add_segment(canvas: SlideCanvas, p0: Point, p1: Point, style: dict[str, Any]) -> Any:
    segment = canvas.slide.shapes.add_connector(
        MSO_CONNECTOR.STRAIGHT,
        Inches(canvas.x(p0[0])),
        Inches(canvas.y(p0[1])),
        Inches(canvas.x(p1[0])),
        Inches(canvas.y(p1[1])),
    )
    apply_connector_style(
        segment,
        color=style["stroke"],
        dashed=style["dashed"],
        width_pt=max(0.5, style["stroke_width"] * PT_PER_PX * canvas.scale),
    )
    return segment


def draw_rect(canvas: SlideCanvas, rect: Rect) -> None:
    kind = MSO_SHAPE.ROUNDED_RECTANGLE if rect.rx else MSO_SHAPE.RECTANGLE
    shape = canvas.slide.shapes.add_shape(
        kind,
        Inches(canvas.x(rect.x)),
        Inches(canvas.y(rect.y)),
        Inches(max(0.01, canvas.length(rect.width))),
        Inches(max(0.01, canvas.length(rect.height))),
    )
    apply_shape_style(shape, style_for(rect.style, canvas.theme), canvas.scale)


def draw_polygon(canvas: SlideCanvas, polygon: Polygon) -> None:
    # Freeform path coordinates must be integers, so build directly in EMU.
    vertices = [
        (int(round(canvas.x(px) * EMU_PER_INCH)), int(round(canvas.y(py) * EMU_PER_INCH)))
        for px, py in polygon.points
    ]
    builder = canvas.slide.shapes.build_freeform(vertices[0][0], vertices[0][1], scale=1.0)
    builder.add_line_segments(vertices[1:], close=True)
    shape = builder.convert_to_shape(Emu(0), Emu(0))
    apply_shape_style(shape, style_for(polygon.style, canvas.theme), canvas.scale)


def draw_text(canvas: SlideCanvas, text: Text) -> None:
    style = style_for(text.style, canvas.theme)
    font_pt = canvas.font_pt(style["font_size"])
    width = (max(2.0, text_units(text.text)) * font_pt * 0.62) / 72.0 + 0.12
    height = (font_pt * 1.35) / 72.0 + 0.04
    x = canvas.x(text.x)
    if text.anchor == "middle":
        x -= width / 2.0
    elif text.anchor == "end":
        x -= width
    # SVG text y is the baseline.
    y = canvas.y(text.y) - font_pt / 72.0 - 0.02

    tb = canvas.slide.shapes.add_textbox(Inches(x), Inches(y), Inches(width), Inches(height))
    tb.fill.background()
    tb.line.fill.background()
    tf = tb.text_frame
    tf.clear()
    tf.word_wrap = False
    tf.auto_size = MSO_AUTO_SIZE.NONE
    tf.vertical_anchor = MSO_VERTICAL_ANCHOR.MIDDLE
    tf.margin_left = tf.margin_right = tf.margin_top = tf.margin_bottom = Inches(0)
    p = tf.paragraphs[0]
    p.alignment = ALIGN_FOR_ANCHOR.get(text.anchor, PP_ALIGN.CENTER)
    run = p.add_run()
    run.text = text.text
    run.font.name = FONT_FAMILY
    run.font.size = Pt(font_pt)
    run.font.color.rgb = to_rgb(style["text"])


def draw_primitive(canvas: SlideCanvas, primitive: Primitive) -> None:
    if isinstance(primitive, Rect):
        draw_rect(canvas, primitive)
    elif isinstance(primitive, Line):
        add_segment(canvas, (primitive.x1, primitive.y1), (primitive.x2, primitive.y2), style_for(primitive.style, canvas.theme))
    elif isinstance(primitive, Polyline):
        style = style_for(primitive.style, canvas.theme)
        for p0, p1 in zip(primitive.points, primitive.points[1:]):
            add_segment(canvas, p0, p1, style)
    elif isinstance(primitive, Polygon):
        draw_polygon(canvas, primitive)
    elif isinstance(primitive, Text):
        draw_text(canvas, primitive)
    else:
        raise TypeError(f"unsupported primitive: {primitive!r}")


def drawing_to_pptx(
    drawing: Drawing,
    output: Path,
    *,
    theme: str | None = None,
    slide_size: str | None = None,
    source_text: str = "",
    append_to: Path | None = None,
) -> Path:
    append_target = append_to.resolve() if append_to else None
    if append_target and append_target.exists():
        prs = Presentation(str(append_target))
        slide_w = float(prs.slide_width) / EMU_PER_INCH
        slide_h = float(prs.slide_height) / EMU_PER_INCH
    else:
        prs = Presentation()
        slide_w, slide_h = parse_slide_size(slide_size)
        prs.slide_width = Inches(slide_w)
        prs.slide_height = Inches(slide_h)
    slide = prs.slides.add_slide(prs.slide_layouts[6])

    canvas = SlideCanvas(slide, drawing, slide_w, slide_h, get_theme(theme))
    for primitive in drawing.primitives:
        draw_primitive(canvas, primitive)

    embed = {
        "sourceText": source_text,
        "theme": theme or "default",
        "version": 1,
        "diagramType": "sequence",
    }
    notes = slide.notes_slide.notes_text_frame
    notes.clear()
    notes.text = "\n".join([EMBED_START, json.dumps(embed, ensure_ascii=False, indent=2), EMBED_END])

    save_path = append_target if append_target else output
    save_path.parent.mkdir(parents=True, exist_ok=True)
    prs.save(str(save_path))
    logger.info("Wrote %d primitives to %s", len(drawing.primitives), save_path)
    return save_path


def read_embedded_source(path: Path) -> list[str]:
    """Return the diagram sources embedded in the notes of every slide."""
    sources: list[str] = []
    prs = Presentation(str(path))
    for slide in prs.slides:
        if not slide.has_notes_slide:
            continue
        notes = slide.notes_slide.notes_text_frame.text
        if EMBED_START not in notes or EMBED_END not in notes:
            continue
        payload = notes.split(EMBED_START, 1)[1].split(EMBED_END, 1)[0]
        try:
            sources.append(str(json.loads(payload).get("sourceText", "")))
        except json.JSONDecodeError:
            logger.warning("Skipping malformed embed block in %s", path)
    return sources
