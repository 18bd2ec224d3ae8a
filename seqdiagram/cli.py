from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path

from .aspect import ASPECT_RATIOS
from .errors import ParseError
from .model import diagram_to_dict
from .parser import parse_sequence_diagram
from .pptx_export import drawing_to_pptx, parse_slide_size
from .render import layout_with_aspect, markdown_export, render_sequence
from .theme import THEMES

logger = logging.getLogger("seqdiagram")

FORMAT_FOR_SUFFIX = {
    ".svg": "svg",
    ".pptx": "pptx",
    ".json": "json",
    ".md": "md",
}


def resolve_format(output: Path, requested: str | None) -> str:
    if requested:
        return requested
    fmt = FORMAT_FOR_SUFFIX.get(output.suffix.lower())
    if fmt is None:
        raise ValueError(f"cannot infer output format from '{output.name}'; pass --format")
    return fmt


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Render a text sequence diagram to SVG, PowerPoint, JSON or Markdown")
    parser.add_argument("--source", required=True, type=Path)
    parser.add_argument("--output", required=True, type=Path)
    parser.add_argument("--format", type=str, default=None, choices=sorted(set(FORMAT_FOR_SUFFIX.values())))
    parser.add_argument("--theme", type=str, default="default", choices=sorted(THEMES))
    parser.add_argument("--aspect-ratio", type=str, default="auto", choices=list(ASPECT_RATIOS))
    parser.add_argument("--slide-size", type=str, default="16:9")
    parser.add_argument("--append-to", type=Path, default=None)
    parser.add_argument("-v", "--verbose", action="store_true")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        fmt = resolve_format(args.output, args.format)
        if fmt == "pptx":
            parse_slide_size(args.slide_size)
        elif args.append_to is not None:
            raise ValueError(f"--append-to needs pptx output, got {fmt}")
    except ValueError as exc:
        logger.error("%s", exc)
        return 2

    source_text = args.source.read_text(encoding="utf-8")
    try:
        diagram = parse_sequence_diagram(source_text)
    except ParseError as exc:
        logger.error("%s: %s", exc.kind, exc)
        return 1

    args.output.parent.mkdir(parents=True, exist_ok=True)

    if fmt == "json":
        args.output.write_text(json.dumps(diagram_to_dict(diagram), ensure_ascii=False, indent=2) + "\n", encoding="utf-8")
    elif fmt == "pptx":
        drawing = layout_with_aspect(diagram, args.aspect_ratio)
        drawing_to_pptx(
            drawing,
            args.output,
            theme=args.theme,
            slide_size=args.slide_size,
            source_text=source_text,
            append_to=args.append_to,
        )
    else:
        result = render_sequence(diagram, args.aspect_ratio, args.theme)
        if fmt == "md":
            args.output.write_text(markdown_export(result.markup, source_text), encoding="utf-8")
        else:
            args.output.write_text(result.markup, encoding="utf-8")

    logger.info("Rendered %s -> %s (%s)", args.source, args.output, fmt)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
