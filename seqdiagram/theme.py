from __future__ import annotations

from typing import Any

THEMES: dict[str, dict[str, Any]] = {
    "default": {
        "name": "Default Blue",
        "participant": {"fill": "#4A90E2", "stroke": "#2E5C8A", "text": "#FFFFFF"},
        "message": {"stroke": "#333333", "text": "#333333"},
        "fragment": {"stroke": "#666666", "fill": "#E8EAF6", "text": "#333333"},
        "activation": {"fill": "#CFE8FF", "stroke": "#3B82F6"},
        "lifeline": {"stroke": "#999999"},
    },
    "purple": {
        "name": "Purple Dream",
        "participant": {"fill": "#9C27B0", "stroke": "#7B1FA2", "text": "#FFFFFF"},
        "message": {"stroke": "#4A148C", "text": "#4A148C"},
        "fragment": {"stroke": "#7B1FA2", "fill": "#F3E5F5", "text": "#4A148C"},
        "activation": {"fill": "#F3E5F5", "stroke": "#7B1FA2"},
        "lifeline": {"stroke": "#9E9E9E"},
    },
    "green": {
        "name": "Fresh Green",
        "participant": {"fill": "#4CAF50", "stroke": "#388E3C", "text": "#FFFFFF"},
        "message": {"stroke": "#1B5E20", "text": "#1B5E20"},
        "fragment": {"stroke": "#388E3C", "fill": "#E8F5E9", "text": "#1B5E20"},
        "activation": {"fill": "#E8F5E9", "stroke": "#388E3C"},
        "lifeline": {"stroke": "#9E9E9E"},
    },
    "orange": {
        "name": "Warm Orange",
        "participant": {"fill": "#FF9800", "stroke": "#F57C00", "text": "#FFFFFF"},
        "message": {"stroke": "#E65100", "text": "#E65100"},
        "fragment": {"stroke": "#F57C00", "fill": "#FFF3E0", "text": "#E65100"},
        "activation": {"fill": "#FFF3E0", "stroke": "#F57C00"},
        "lifeline": {"stroke": "#9E9E9E"},
    },
    "dark": {
        "name": "Dark Mode",
        "participant": {"fill": "#37474F", "stroke": "#263238", "text": "#FFFFFF"},
        "message": {"stroke": "#CFD8DC", "text": "#CFD8DC"},
        "fragment": {"stroke": "#607D8B", "fill": "#455A64", "text": "#CFD8DC"},
        "activation": {"fill": "#455A64", "stroke": "#90A4AE"},
        "lifeline": {"stroke": "#78909C"},
    },
    "pastel": {
        "name": "Soft Pastel",
        "participant": {"fill": "#81D4FA", "stroke": "#4FC3F7", "text": "#01579B"},
        "message": {"stroke": "#0277BD", "text": "#0277BD"},
        "fragment": {"stroke": "#4FC3F7", "fill": "#E1F5FE", "text": "#01579B"},
        "activation": {"fill": "#E1F5FE", "stroke": "#4FC3F7"},
        "lifeline": {"stroke": "#B0BEC5"},
    },
}

DEFAULT_THEME = "default"

FONT_FAMILY = "Arial, sans-serif"

# style class -> (theme section, fill key, stroke key, text key, dashed, stroke width, font size)
STYLE_CLASSES: dict[str, tuple[str, str | None, str | None, str | None, bool, float, float]] = {
    "participant-box": ("participant", "fill", "stroke", None, False, 2.0, 0.0),
    "participant-text": ("participant", None, None, "text", False, 0.0, 14.0),
    "lifeline": ("lifeline", None, "stroke", None, True, 1.0, 0.0),
    "activation": ("activation", "fill", "stroke", None, False, 1.0, 0.0),
    "message-line": ("message", None, "stroke", None, False, 2.0, 0.0),
    "response": ("message", None, "stroke", None, True, 2.0, 0.0),
    "message-text": ("message", None, None, "text", False, 0.0, 12.0),
    "arrow": ("message", "stroke", "stroke", None, False, 1.0, 0.0),
    "arrow-open": ("message", None, "stroke", None, False, 2.0, 0.0),
    "fragment-box": ("fragment", None, "stroke", None, False, 1.5, 0.0),
    "fragment-header": ("fragment", "fill", "stroke", None, False, 1.5, 0.0),
    "fragment-label": ("fragment", None, None, "text", False, 0.0, 12.0),
    "fragment-condition": ("fragment", None, None, "text", False, 0.0, 11.0),
    "fragment-divider": ("fragment", None, "stroke", None, True, 1.0, 0.0),
}

TEXT_CLASSES = {name for name, entry in STYLE_CLASSES.items() if entry[3] is not None}


def get_theme(name: str | None) -> dict[str, Any]:
    return THEMES.get(name or DEFAULT_THEME, THEMES[DEFAULT_THEME])


def style_for(style: str, theme: str | dict[str, Any] | None = None) -> dict[str, Any]:
    """Resolve a (possibly multi-class) style string to concrete paint values.

    Later classes override earlier ones, so ``"message-line response"`` yields
    the dashed response stroke.
    """
    colors = theme if isinstance(theme, dict) else get_theme(theme)
    resolved: dict[str, Any] = {
        "fill": None,
        "stroke": None,
        "text": None,
        "dashed": False,
        "stroke_width": 1.0,
        "font_size": 12.0,
    }
    for name in style.split():
        entry = STYLE_CLASSES.get(name)
        if entry is None:
            continue
        section, fill_key, stroke_key, text_key, dashed, stroke_width, font_size = entry
        palette = colors.get(section, {})
        if fill_key:
            resolved["fill"] = palette.get(fill_key)
        if stroke_key:
            resolved["stroke"] = palette.get(stroke_key)
            resolved["stroke_width"] = stroke_width
        if text_key:
            resolved["text"] = palette.get(text_key)
            resolved["font_size"] = font_size
        resolved["dashed"] = resolved["dashed"] or dashed
    return resolved


def theme_css(theme: str | dict[str, Any] | None = None) -> str:
    """CSS rules for every known style class, used by the SVG writer."""
    rules: list[str] = []
    for name in STYLE_CLASSES:
        style = style_for(name, theme)
        decl: list[str] = []
        if name in TEXT_CLASSES:
            decl.append(f"fill: {style['text']}")
            decl.append(f"font-family: {FONT_FAMILY}")
            decl.append(f"font-size: {style['font_size']:g}px")
        else:
            decl.append(f"fill: {style['fill'] or 'none'}")
            if style["stroke"]:
                decl.append(f"stroke: {style['stroke']}")
                decl.append(f"stroke-width: {style['stroke_width']:g}")
            if style["dashed"]:
                decl.append("stroke-dasharray: 5,5")
        selector = ".message-line.response" if name == "response" else f".{name}"
        rules.append(f"{selector} {{ {'; '.join(decl)}; }}")
    return "\n".join(rules)
