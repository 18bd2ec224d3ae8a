from __future__ import annotations

import logging
import re
from dataclasses import dataclass

from .errors import MisplacedElseError, MissingHeaderError, UnclosedFragmentError, UnmatchedEndError
from .model import FRAGMENT_KINDS, Alternative, Element, Fragment, FragmentKind, Message, MessageType, SequenceDiagram

logger = logging.getLogger(__name__)

HEADER = "sequence:"

# Longest first so "-->" and "->>" are never read as "-".
ARROW_PATTERNS = [
    ("-->", MessageType.RESPONSE),
    ("->>", MessageType.ASYNC),
    ("->", MessageType.SYNC),
    ("-", MessageType.SYNC),
]

# A bare "-" surrounded by whitespace wins over a hyphen inside a name.
SPACED_DASH_RE = re.compile(r"\s-\s")

FRAGMENT_OPEN_RE = re.compile(
    r"^(" + "|".join(FRAGMENT_KINDS) + r")\s*(?:\[(.*)\])?$",
    flags=re.IGNORECASE,
)
ELSE_RE = re.compile(r"^else\s*(?:\[(.*)\])?$", flags=re.IGNORECASE)
END_RE = re.compile(r"^end$", flags=re.IGNORECASE)


@dataclass
class _FragmentFrame:
    fragment: Fragment
    current_alternative: Alternative | None = None

    def target(self) -> list[Element]:
        if self.current_alternative is not None:
            return self.current_alternative.elements
        return self.fragment.elements


def split_lines(text: str) -> list[tuple[int, str]]:
    """Return ``(line_number, stripped_line)`` for every non-blank line."""
    out: list[tuple[int, str]] = []
    for number, raw in enumerate(text.replace("\r\n", "\n").split("\n"), start=1):
        line = raw.strip()
        if line:
            out.append((number, line))
    return out


def is_comment(line: str) -> bool:
    return line.startswith("%%") or line.startswith("#")


def parse_message(line: str, number: int | None = None) -> Message | None:
    if ":" not in line:
        return None
    head, text = line.split(":", 1)
    head = head.strip()
    if not head:
        return None

    for arrow, message_type in ARROW_PATTERNS:
        idx = head.find(arrow)
        if arrow == "-":
            spaced = SPACED_DASH_RE.search(head)
            if spaced:
                idx = spaced.start() + 1
        if idx < 0:
            continue
        source = head[:idx].strip()
        target = head[idx + len(arrow) :].strip()
        if not source or not target:
            return None
        return Message(source=source, target=target, text=text.strip(), message_type=message_type, line=number)

    return None


def _append(stack: list[_FragmentFrame], top_level: list[Element], element: Element) -> None:
    if stack:
        stack[-1].target().append(element)
    else:
        top_level.append(element)


def _close_fragment(frame: _FragmentFrame) -> Fragment:
    fragment = frame.fragment
    if fragment.kind is FragmentKind.ALT and fragment.alternatives and fragment.elements:
        fragment.alternatives.insert(0, Alternative(condition=fragment.condition, elements=fragment.elements))
        fragment.elements = []
    frame.current_alternative = None
    return fragment


def parse_sequence_diagram(text: str) -> SequenceDiagram:
    """Parse sequence diagram text into a :class:`SequenceDiagram`.

    Raises a :class:`~seqdiagram.errors.ParseError` subclass on structural
    problems; unrecognised lines are skipped and reported as warnings.
    """
    lines = split_lines(text)
    if not lines or not lines[0][1].lower().startswith(HEADER):
        raise MissingHeaderError()

    diagram = SequenceDiagram()
    stack: list[_FragmentFrame] = []

    for number, line in lines[1:]:
        if is_comment(line):
            continue

        open_match = FRAGMENT_OPEN_RE.match(line)
        if open_match:
            fragment = Fragment(
                kind=FragmentKind(open_match.group(1).lower()),
                condition=(open_match.group(2) or "").strip(),
                line=number,
            )
            _append(stack, diagram.elements, fragment)
            stack.append(_FragmentFrame(fragment))
            continue

        else_match = ELSE_RE.match(line)
        if else_match:
            if not stack or stack[-1].fragment.kind is not FragmentKind.ALT:
                raise MisplacedElseError(number)
            alternative = Alternative(condition=(else_match.group(1) or "").strip())
            stack[-1].fragment.alternatives.append(alternative)
            stack[-1].current_alternative = alternative
            continue

        if END_RE.match(line):
            if not stack:
                raise UnmatchedEndError(number)
            _close_fragment(stack.pop())
            continue

        message = parse_message(line, number)
        if message:
            diagram.add_participant(message.source)
            diagram.add_participant(message.target)
            _append(stack, diagram.elements, message)
            continue

        logger.warning("Ignoring unrecognised line %d: %s", number, line)
        diagram.warnings.append(f"Line {number}: ignored {line!r}")

    if stack:
        innermost = stack[-1].fragment
        raise UnclosedFragmentError(innermost.kind.value, innermost.line)

    logger.debug(
        "Parsed %d participants, %d top-level elements",
        len(diagram.participants),
        len(diagram.elements),
    )
    return diagram
