"""
tests/test_pptx_export.py

PowerPoint export: slide sizing, shape output, embedded source round trip and
appending to an existing deck.
"""

from __future__ import annotations

import pytest
from pptx import Presentation
from pptx.util import Inches

from seqdiagram.layout import layout_sequence
from seqdiagram.parser import parse_sequence_diagram
from seqdiagram.pptx_export import (
    EMBED_END,
    EMBED_START,
    drawing_to_pptx,
    parse_slide_size,
    read_embedded_source,
    to_rgb,
)

SOURCE = "\n".join(
    [
        "sequence:",
        "Client -> Server: request",
        "alt [ok]",
        "  Server --> Client: data",
        "else [busy]",
        "  Server ->> Server: retry",
        "end",
    ]
)


@pytest.fixture
def drawing():
    return layout_sequence(parse_sequence_diagram(SOURCE))


@pytest.mark.parametrize(
    "value, expected",
    [
        (None, (13.333, 7.5)),
        ("16:9", (13.333, 7.5)),
        ("4:3", (10.0, 7.5)),
        ("standard", (10.0, 7.5)),
        ("8x6", (8.0, 6.0)),
    ],
)
def test_parse_slide_size(value, expected):
    assert parse_slide_size(value) == expected


@pytest.mark.parametrize("value", ["huge", "0x5", "axb"])
def test_parse_slide_size_rejects_garbage(value):
    with pytest.raises(ValueError):
        parse_slide_size(value)


def test_to_rgb_expands_short_hex():
    assert str(to_rgb("#333")) == "333333"
    assert str(to_rgb("#4A90E2")) == "4A90E2"
    assert str(to_rgb("bogus")) == "000000"


def test_export_writes_single_slide(tmp_path, drawing):
    out = drawing_to_pptx(drawing, tmp_path / "deck" / "diagram.pptx", source_text=SOURCE, slide_size="4:3")

    assert out.exists()
    prs = Presentation(str(out))
    assert prs.slide_width == Inches(10.0)
    assert len(prs.slides) == 1
    shapes = list(prs.slides[0].shapes)
    assert len(shapes) >= len(drawing.primitives)
    texts = [shape.text_frame.text for shape in shapes if shape.has_text_frame and shape.text_frame.text]
    for expected in ["Client", "Server", "request", "alt", "[ok]", "[busy]"]:
        assert expected in texts


def test_shapes_stay_on_slide(tmp_path, drawing):
    out = drawing_to_pptx(drawing, tmp_path / "diagram.pptx")
    prs = Presentation(str(out))

    for shape in prs.slides[0].shapes:
        assert shape.left >= 0
        assert shape.top >= 0
        assert shape.left + shape.width <= prs.slide_width + Inches(0.5)


def test_embedded_source_round_trip(tmp_path, drawing):
    out = drawing_to_pptx(drawing, tmp_path / "diagram.pptx", source_text=SOURCE, theme="dark")

    notes = Presentation(str(out)).slides[0].notes_slide.notes_text_frame.text
    assert notes.startswith(EMBED_START)
    assert notes.endswith(EMBED_END)
    assert read_embedded_source(out) == [SOURCE]


def test_append_to_existing_deck(tmp_path, drawing):
    deck = drawing_to_pptx(drawing, tmp_path / "deck.pptx", source_text="first", slide_size="4:3")
    drawing_to_pptx(drawing, tmp_path / "ignored.pptx", source_text="second", append_to=deck)

    prs = Presentation(str(deck))
    assert len(prs.slides) == 2
    assert prs.slide_width == Inches(10.0)
    assert read_embedded_source(deck) == ["first", "second"]
    assert not (tmp_path / "ignored.pptx").exists()
