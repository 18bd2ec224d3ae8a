from __future__ import annotations


class ParseError(ValueError):
    """Terminal failure of a sequence diagram parse.

    ``kind`` names the failure class, ``line`` is the 1-based input line the
    failure refers to when there is one.
    """

    kind = "ParseError"

    def __init__(self, message: str, *, line: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.line = line

    def to_dict(self) -> dict[str, object]:
        payload: dict[str, object] = {"kind": self.kind, "message": self.message}
        if self.line is not None:
            payload["line"] = self.line
        return payload


class MissingHeaderError(ParseError):
    kind = "MissingHeader"

    def __init__(self) -> None:
        super().__init__('Diagram must start with "sequence:"', line=1)


class MisplacedElseError(ParseError):
    kind = "MisplacedElse"

    def __init__(self, line: int) -> None:
        super().__init__(f'Line {line}: "else" is only allowed inside an "alt" fragment', line=line)


class UnmatchedEndError(ParseError):
    kind = "UnmatchedEnd"

    def __init__(self, line: int) -> None:
        super().__init__(f'Line {line}: "end" without an open fragment', line=line)


class UnclosedFragmentError(ParseError):
    kind = "UnclosedFragment"

    def __init__(self, fragment_kind: str, line: int | None = None) -> None:
        where = f" opened on line {line}" if line is not None else ""
        super().__init__(f'Unclosed "{fragment_kind}" fragment{where}: missing "end"', line=line)
        self.fragment_kind = fragment_kind
