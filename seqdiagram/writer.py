from __future__ import annotations

from .model import Element, Fragment, FragmentKind, Message, MessageType, SequenceDiagram

ARROW_FOR_TYPE = {
    MessageType.SYNC: "->",
    MessageType.ASYNC: "->>",
    MessageType.RESPONSE: "-->",
}

INDENT = "  "


def _header(keyword: str, condition: str) -> str:
    return f"{keyword} [{condition}]" if condition else keyword


def _write_elements(elements: list[Element], depth: int, out: list[str]) -> None:
    pad = INDENT * depth
    for element in elements:
        if isinstance(element, Message):
            out.append(f"{pad}{element.source} {ARROW_FOR_TYPE[element.message_type]} {element.target}: {element.text}")
        elif isinstance(element, Fragment):
            _write_fragment(element, depth, out)
        else:
            raise TypeError(f"unsupported element: {element!r}")


def _write_fragment(fragment: Fragment, depth: int, out: list[str]) -> None:
    pad = INDENT * depth
    out.append(pad + _header(fragment.kind.value, fragment.condition))
    _write_elements(fragment.elements, depth + 1, out)

    alternatives = list(fragment.alternatives) if fragment.kind is FragmentKind.ALT else []
    # A leading alternative labelled like the fragment is written inline; the
    # parser promotes it back on "end".
    if (
        len(alternatives) > 1
        and not fragment.elements
        and alternatives[0].elements
        and alternatives[0].condition == fragment.condition
    ):
        _write_elements(alternatives[0].elements, depth + 1, out)
        alternatives = alternatives[1:]
    for alt in alternatives:
        out.append(pad + _header("else", alt.condition))
        _write_elements(alt.elements, depth + 1, out)

    out.append(f"{pad}end")


def format_sequence_diagram(diagram: SequenceDiagram) -> str:
    """Serialize a diagram back into the line syntax accepted by the parser."""
    out = ["sequence:"]
    _write_elements(diagram.elements, 0, out)
    return "\n".join(out) + "\n"
