from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Union


class MessageType(str, Enum):
    SYNC = "sync"
    ASYNC = "async"
    RESPONSE = "response"


class FragmentKind(str, Enum):
    LOOP = "loop"
    ALT = "alt"
    OPT = "opt"
    PAR = "par"
    BREAK = "break"
    STRICT = "strict"
    SEQ = "seq"
    CRITICAL = "critical"


FRAGMENT_KINDS = tuple(kind.value for kind in FragmentKind)


@dataclass(frozen=True)
class Message:
    source: str
    target: str
    text: str
    message_type: MessageType = MessageType.SYNC
    line: int | None = field(default=None, compare=False)

    @property
    def is_self(self) -> bool:
        return self.source == self.target


@dataclass
class Alternative:
    condition: str
    elements: list[Element] = field(default_factory=list)


@dataclass
class Fragment:
    kind: FragmentKind
    condition: str = ""
    elements: list[Element] = field(default_factory=list)
    alternatives: list[Alternative] = field(default_factory=list)
    line: int | None = field(default=None, compare=False)


Element = Union[Message, Fragment]


@dataclass
class SequenceDiagram:
    participants: list[str] = field(default_factory=list)
    elements: list[Element] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list, compare=False)

    def add_participant(self, name: str) -> None:
        if name not in self.participants:
            self.participants.append(name)


def element_to_dict(element: Element) -> dict[str, Any]:
    if isinstance(element, Message):
        return {
            "type": "message",
            "from": element.source,
            "to": element.target,
            "text": element.text,
            "messageType": element.message_type.value,
            "isSelf": element.is_self,
        }
    if isinstance(element, Fragment):
        return {
            "type": "fragment",
            "kind": element.kind.value,
            "condition": element.condition,
            "elements": [element_to_dict(child) for child in element.elements],
            "alternatives": [
                {
                    "condition": alt.condition,
                    "elements": [element_to_dict(child) for child in alt.elements],
                }
                for alt in element.alternatives
            ],
        }
    raise TypeError(f"unsupported element: {element!r}")


def diagram_to_dict(diagram: SequenceDiagram) -> dict[str, Any]:
    return {
        "participants": list(diagram.participants),
        "elements": [element_to_dict(element) for element in diagram.elements],
    }
