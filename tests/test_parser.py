"""
tests/test_parser.py

Sequence parser: header handling, arrow recognition, fragment nesting,
alt/else promotion and the structural error kinds.
"""

from __future__ import annotations

import pytest

from seqdiagram.errors import (
    MisplacedElseError,
    MissingHeaderError,
    ParseError,
    UnclosedFragmentError,
    UnmatchedEndError,
)
from seqdiagram.model import Alternative, Fragment, FragmentKind, Message, MessageType
from seqdiagram.parser import FRAGMENT_OPEN_RE, parse_message, parse_sequence_diagram, split_lines


# ─────────────────────────────────────────────────────────
# Messages and participants
# ─────────────────────────────────────────────────────────


def test_request_and_response():
    diagram = parse_sequence_diagram("sequence:\nA -> B: Hello\nB --> A: Hi")

    assert diagram.participants == ["A", "B"]
    assert len(diagram.elements) == 2
    first, second = diagram.elements
    assert first == Message("A", "B", "Hello", MessageType.SYNC)
    assert second == Message("B", "A", "Hi", MessageType.RESPONSE)
    assert not first.is_self
    assert not second.is_self


def test_self_message():
    diagram = parse_sequence_diagram("sequence:\nA -> A: Ping")

    assert diagram.participants == ["A"]
    (message,) = diagram.elements
    assert message.is_self
    assert message.text == "Ping"


@pytest.mark.parametrize(
    "line, source, target, message_type, text",
    [
        ("A->B:x", "A", "B", MessageType.SYNC, "x"),
        ("A - B: x", "A", "B", MessageType.SYNC, "x"),
        ("A ->> B: fire", "A", "B", MessageType.ASYNC, "fire"),
        ("A->>B: x", "A", "B", MessageType.ASYNC, "x"),
        ("B-->A:done", "B", "A", MessageType.RESPONSE, "done"),
        ("Web-Server -> DB: query", "Web-Server", "DB", MessageType.SYNC, "query"),
        ("Web-Server - DB: q", "Web-Server", "DB", MessageType.SYNC, "q"),
        ("Web-Server - Read-Replica: q", "Web-Server", "Read-Replica", MessageType.SYNC, "q"),
        ("A-B: x", "A", "B", MessageType.SYNC, "x"),
        ("Web Client -> Auth Service: login: step 1", "Web Client", "Auth Service", MessageType.SYNC, "login: step 1"),
        ("A -> B:", "A", "B", MessageType.SYNC, ""),
    ],
)
def test_message_forms(line, source, target, message_type, text):
    message = parse_message(line)

    assert message is not None
    assert message.source == source
    assert message.target == target
    assert message.message_type is message_type
    assert message.text == text


@pytest.mark.parametrize("line", ["A -> B", "-> B: x", "A ->: x", "just words", ": x"])
def test_non_messages(line):
    assert parse_message(line) is None


def test_participants_keep_first_appearance_order():
    diagram = parse_sequence_diagram("sequence:\nZed -> Amy: a\nAmy -> Bob: b\nBob --> Zed: c")

    assert diagram.participants == ["Zed", "Amy", "Bob"]


# ─────────────────────────────────────────────────────────
# Header and line handling
# ─────────────────────────────────────────────────────────


@pytest.mark.parametrize("header", ["sequence:", "SEQUENCE:", "Sequence: my diagram", "  sequence:  "])
def test_header_variants(header):
    diagram = parse_sequence_diagram(f"{header}\nA -> B: x")

    assert diagram.participants == ["A", "B"]


@pytest.mark.parametrize("text", ["", "   \n\n", "A -> B: x", "class:\nA -> B: x", "sequence\nA -> B: x"])
def test_missing_header(text):
    with pytest.raises(MissingHeaderError) as exc_info:
        parse_sequence_diagram(text)

    assert exc_info.value.kind == "MissingHeader"


def test_blank_lines_and_crlf_are_ignored():
    diagram = parse_sequence_diagram("\r\n  sequence:\r\n\r\n   A -> B: x  \r\n\r\n")

    assert diagram.elements == [Message("A", "B", "x")]


def test_split_lines_keeps_raw_line_numbers():
    assert split_lines("a\n\n  b \n") == [(1, "a"), (3, "b")]


def test_comments_are_skipped_without_warning():
    diagram = parse_sequence_diagram("sequence:\n%% note\n# another\nA -> B: x")

    assert diagram.warnings == []
    assert len(diagram.elements) == 1


def test_unrecognised_lines_are_warnings_not_errors(caplog):
    diagram = parse_sequence_diagram("sequence:\nthis is not a message\nA -> B: x")

    assert len(diagram.elements) == 1
    assert diagram.warnings == ["Line 2: ignored 'this is not a message'"]
    assert "Ignoring unrecognised line 2" in caplog.text


def test_fragment_keyword_with_trailing_words_is_not_a_fragment():
    diagram = parse_sequence_diagram("sequence:\nloop forever\nA -> B: x")

    assert diagram.elements == [Message("A", "B", "x")]
    assert len(diagram.warnings) == 1


def test_message_from_participant_named_like_keyword():
    diagram = parse_sequence_diagram("sequence:\nalt -> B: x")

    assert diagram.elements == [Message("alt", "B", "x")]


# ─────────────────────────────────────────────────────────
# Fragments
# ─────────────────────────────────────────────────────────


def test_loop_fragment():
    diagram = parse_sequence_diagram("sequence:\nloop [n times]\nA -> B: X\nend")

    (fragment,) = diagram.elements
    assert isinstance(fragment, Fragment)
    assert fragment.kind is FragmentKind.LOOP
    assert fragment.condition == "n times"
    assert fragment.elements == [Message("A", "B", "X")]
    assert fragment.alternatives == []


@pytest.mark.parametrize("keyword", ["loop", "alt", "opt", "par", "break", "strict", "seq", "critical"])
def test_every_fragment_kind(keyword):
    diagram = parse_sequence_diagram(f"sequence:\n{keyword.upper()}\nA -> B: X\nEND")

    (fragment,) = diagram.elements
    assert fragment.kind.value == keyword
    assert fragment.condition == ""
    assert len(fragment.elements) == 1


def test_alt_with_else_promotes_body_to_first_alternative():
    diagram = parse_sequence_diagram("sequence:\nalt [cond1]\nA -> B: X\nelse [cond2]\nA -> C: Y\nend")

    (fragment,) = diagram.elements
    assert fragment.kind is FragmentKind.ALT
    assert fragment.elements == []
    assert fragment.alternatives == [
        Alternative("cond1", [Message("A", "B", "X")]),
        Alternative("cond2", [Message("A", "C", "Y")]),
    ]
    assert diagram.participants == ["A", "B", "C"]


def test_alt_without_else_keeps_plain_body():
    diagram = parse_sequence_diagram("sequence:\nalt [only]\nA -> B: X\nend")

    (fragment,) = diagram.elements
    assert fragment.elements == [Message("A", "B", "X")]
    assert fragment.alternatives == []


def test_alt_starting_with_else_has_no_implicit_alternative():
    diagram = parse_sequence_diagram("sequence:\nalt [a]\nelse [b]\nA -> B: X\nelse\nB --> A: Y\nend")

    (fragment,) = diagram.elements
    assert fragment.elements == []
    assert [alt.condition for alt in fragment.alternatives] == ["b", ""]


def test_nested_fragments_route_into_active_alternative():
    text = "\n".join(
        [
            "sequence:",
            "loop [retry]",
            "  alt [ok]",
            "    A -> B: call",
            "  else [fail]",
            "    opt [log]",
            "      B -> L: write",
            "    end",
            "    B --> A: error",
            "  end",
            "end",
            "A -> A: done",
        ]
    )
    diagram = parse_sequence_diagram(text)

    assert len(diagram.elements) == 2
    loop = diagram.elements[0]
    assert loop.kind is FragmentKind.LOOP
    (alt,) = loop.elements
    ok, fail = alt.alternatives
    assert ok.elements == [Message("A", "B", "call")]
    opt, error = fail.elements
    assert opt.kind is FragmentKind.OPT
    assert opt.elements == [Message("B", "L", "write")]
    assert error == Message("B", "A", "error", MessageType.RESPONSE)
    assert diagram.elements[1].is_self
    assert diagram.participants == ["A", "B", "L"]


def test_fragment_keywords_follow_fragment_kinds():
    for kind in FragmentKind:
        assert FRAGMENT_OPEN_RE.match(f"{kind.value.upper()} [c]")
    assert FRAGMENT_OPEN_RE.match("loops") is None


def test_deep_nesting():
    depth = 40
    text = "sequence:\n" + "loop\n" * depth + "A -> B: x\n" + "end\n" * depth
    diagram = parse_sequence_diagram(text)

    node = diagram.elements[0]
    for _ in range(depth - 1):
        (node,) = node.elements
    assert node.elements == [Message("A", "B", "x")]


# ─────────────────────────────────────────────────────────
# Structural errors
# ─────────────────────────────────────────────────────────


def test_else_outside_fragment():
    with pytest.raises(MisplacedElseError) as exc_info:
        parse_sequence_diagram("sequence:\nelse [bad]")

    assert exc_info.value.line == 2
    assert exc_info.value.kind == "MisplacedElse"
    assert "Line 2" in str(exc_info.value)


def test_else_inside_non_alt_fragment():
    with pytest.raises(MisplacedElseError) as exc_info:
        parse_sequence_diagram("sequence:\nalt\nloop\nA -> B: x\nelse\nend\nend")

    assert exc_info.value.line == 5


def test_error_lines_count_blank_lines():
    with pytest.raises(MisplacedElseError) as exc_info:
        parse_sequence_diagram("sequence:\n\n\nelse")

    assert exc_info.value.line == 4


def test_unmatched_end():
    with pytest.raises(UnmatchedEndError) as exc_info:
        parse_sequence_diagram("sequence:\nA -> B: x\nend")

    assert exc_info.value.line == 3
    assert exc_info.value.to_dict() == {
        "kind": "UnmatchedEnd",
        "message": 'Line 3: "end" without an open fragment',
        "line": 3,
    }


def test_unclosed_fragment_names_kind():
    with pytest.raises(UnclosedFragmentError) as exc_info:
        parse_sequence_diagram("sequence:\nloop\nA -> B: X")

    assert exc_info.value.fragment_kind == "loop"
    assert exc_info.value.line == 2
    assert "loop" in str(exc_info.value)


def test_unclosed_fragment_reports_innermost():
    with pytest.raises(UnclosedFragmentError) as exc_info:
        parse_sequence_diagram("sequence:\nloop\nalt [x]\npar\nA -> B: X\nend")

    assert exc_info.value.fragment_kind == "alt"


def test_parse_errors_are_value_errors():
    assert issubclass(ParseError, ValueError)
    with pytest.raises(ValueError):
        parse_sequence_diagram("nope")


def test_parsing_is_deterministic():
    text = "sequence:\nalt [a]\nA -> B: 1\nelse [b]\nB ->> C: 2\nend\nloop\nC --> A: 3\nend"

    assert parse_sequence_diagram(text) == parse_sequence_diagram(text)
