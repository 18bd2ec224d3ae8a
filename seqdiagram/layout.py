from __future__ import annotations

import logging
from dataclasses import dataclass, field

from .drawing import Activation, Drawing, Line, Polygon, Polyline, Primitive, Rect, Text
from .model import Element, Fragment, Message, MessageType, SequenceDiagram

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LayoutMetrics:
    participant_width: float = 120.0
    participant_height: float = 40.0
    participant_spacing: float = 150.0
    participant_radius: float = 5.0
    row_height: float = 60.0
    top_margin: float = 20.0
    side_margin: float = 50.0
    lifeline_extension: float = 40.0
    message_label_gap: float = 6.0
    arrow_size: float = 10.0
    self_loop_width: float = 40.0
    self_loop_height: float = 20.0
    activation_width: float = 10.0
    activation_offset: float = 5.0
    fragment_padding: float = 60.0
    fragment_inset: float = 10.0
    fragment_top_offset: float = 20.0
    divider_offset: float = 10.0
    tab_height: float = 20.0
    tab_notch: float = 8.0
    tab_min_width: float = 40.0
    char_width: float = 7.0


DEFAULT_METRICS = LayoutMetrics()


@dataclass
class _OpenActivation:
    start_row: int
    depth: int


@dataclass
class _LayoutState:
    metrics: LayoutMetrics
    centers: dict[str, float]
    lifeline_top: float
    width: float = 0.0
    fragments: list[Primitive] = field(default_factory=list)
    bars: list[Primitive] = field(default_factory=list)
    messages: list[Primitive] = field(default_factory=list)
    open_activations: dict[str, list[_OpenActivation]] = field(default_factory=dict)
    activations: list[Activation] = field(default_factory=list)

    def row_y(self, row: int) -> float:
        return self.lifeline_top + row * self.metrics.row_height

    def center(self, participant: str) -> float:
        return self.centers.get(participant, self.metrics.side_margin)


def count_rows(elements: list[Element]) -> int:
    """Number of row slots the drawing pass will consume for ``elements``."""
    rows = 0
    for element in elements:
        if isinstance(element, Message):
            rows += 1
        elif isinstance(element, Fragment):
            rows += 2 + count_rows(element.elements)
            for index, alt in enumerate(element.alternatives):
                rows += count_rows(alt.elements)
                if index > 0:
                    rows += 1
        else:
            raise TypeError(f"unsupported element: {element!r}")
    return rows


def fragment_participants(fragment: Fragment) -> list[str]:
    seen: list[str] = []

    def visit(elements: list[Element]) -> None:
        for element in elements:
            if isinstance(element, Message):
                for name in (element.source, element.target):
                    if name not in seen:
                        seen.append(name)
            elif isinstance(element, Fragment):
                visit(element.elements)
                for alt in element.alternatives:
                    visit(alt.elements)
            else:
                raise TypeError(f"unsupported element: {element!r}")

    visit(fragment.elements)
    for alt in fragment.alternatives:
        visit(alt.elements)
    return seen


# Activation bookkeeping


def _push_activation(state: _LayoutState, participant: str, row: int) -> None:
    stack = state.open_activations.setdefault(participant, [])
    stack.append(_OpenActivation(start_row=row, depth=len(stack)))


def _pop_activation(state: _LayoutState, participant: str, row: int) -> None:
    stack = state.open_activations.get(participant)
    if not stack:
        return
    opened = stack.pop()
    _record_activation(state, participant, opened, row)


def _record_activation(state: _LayoutState, participant: str, opened: _OpenActivation, end_row: int) -> None:
    m = state.metrics
    end_row = max(end_row, opened.start_row)
    state.activations.append(
        Activation(participant=participant, start_row=opened.start_row, end_row=end_row, depth=opened.depth)
    )
    y1 = state.row_y(opened.start_row)
    y2 = state.row_y(end_row)
    x = state.center(participant) - m.activation_width / 2.0 + opened.depth * m.activation_offset
    height = max(y2 - y1, m.row_height / 3.0)
    state.bars.append(Rect(x, y1, m.activation_width, height, "activation"))


def _track_activations(state: _LayoutState, message: Message, row: int) -> None:
    if message.message_type is MessageType.RESPONSE:
        _pop_activation(state, message.source, row)
        if not message.is_self:
            _pop_activation(state, message.target, row)
        return
    _push_activation(state, message.source, row)
    if not message.is_self:
        _push_activation(state, message.target, row)


def _close_open_activations(state: _LayoutState, last_row: int) -> None:
    for participant, stack in state.open_activations.items():
        while stack:
            _record_activation(state, participant, stack.pop(), last_row)


# Messages


def _arrow_head(message_type: MessageType, tip: tuple[float, float], direction: float, size: float) -> Primitive:
    x, y = tip
    back = x - direction * size
    half = size / 2.0
    if message_type is MessageType.SYNC:
        return Polygon(((x, y), (back, y - half), (back, y + half)), "arrow")
    return Polyline(((back, y - half), (x, y), (back, y + half)), "arrow-open")


def _line_style(message_type: MessageType) -> str:
    if message_type is MessageType.RESPONSE:
        return "message-line response"
    return "message-line"


def _draw_message(message: Message, row: int, state: _LayoutState) -> None:
    m = state.metrics
    y = state.row_y(row)
    x1 = state.center(message.source)
    style = _line_style(message.message_type)
    filled = message.message_type is MessageType.SYNC

    if message.is_self:
        right = x1 + m.self_loop_width
        bottom = y + m.self_loop_height
        end_x = x1 + m.arrow_size if filled else x1
        state.messages.append(Polyline(((x1, y), (right, y), (right, bottom), (end_x, bottom)), style))
        state.messages.append(_arrow_head(message.message_type, (x1, bottom), -1.0, m.arrow_size))
        if message.text:
            state.messages.append(
                Text(right + m.message_label_gap, y + m.self_loop_height / 2.0 + 4.0, message.text, "message-text", "start")
            )
        return

    x2 = state.center(message.target)
    direction = 1.0 if x2 >= x1 else -1.0
    end_x = x2 - direction * m.arrow_size if filled else x2
    state.messages.append(Line(x1, y, end_x, y, style))
    state.messages.append(_arrow_head(message.message_type, (x2, y), direction, m.arrow_size))
    if message.text:
        state.messages.append(Text((x1 + x2) / 2.0, y - m.message_label_gap, message.text, "message-text"))


# Fragments


def _fragment_bounds(fragment: Fragment, depth: int, state: _LayoutState) -> tuple[float, float]:
    m = state.metrics
    # Clamped to the canvas, nested frames keep their inset from the edges.
    edge = min(m.fragment_inset * (depth + 1), state.width / 2.0)
    names = fragment_participants(fragment) or list(state.centers)
    if not names:
        left, right = m.side_margin, m.side_margin + m.participant_width
    else:
        xs = [state.center(name) for name in names]
        pad = max(m.fragment_inset, m.fragment_padding - depth * m.fragment_inset)
        left, right = min(xs) - pad, max(xs) + pad
    left = max(left, edge)
    right = max(left, min(right, state.width - edge))
    return left, right


def _draw_fragment_frame(
    fragment: Fragment,
    open_row: int,
    close_row: int,
    dividers: list[tuple[int, str]],
    depth: int,
    state: _LayoutState,
) -> None:
    m = state.metrics
    left, right = _fragment_bounds(fragment, depth, state)
    top = state.row_y(open_row) - m.fragment_top_offset
    bottom = state.row_y(close_row) - m.fragment_top_offset
    state.fragments.append(Rect(left, top, right - left, bottom - top, "fragment-box"))

    label = fragment.kind.value
    tab_w = max(m.tab_min_width, len(label) * m.char_width + 16.0)
    tab_h = m.tab_height
    state.fragments.append(
        Polygon(
            (
                (left, top),
                (left + tab_w, top),
                (left + tab_w, top + tab_h - m.tab_notch),
                (left + tab_w - m.tab_notch, top + tab_h),
                (left, top + tab_h),
            ),
            "fragment-header",
        )
    )
    state.fragments.append(Text(left + 6.0, top + 14.0, label, "fragment-label", "start"))

    condition = fragment.condition
    if not condition and fragment.alternatives:
        condition = fragment.alternatives[0].condition
    if condition:
        state.fragments.append(Text(left + tab_w + 8.0, top + 14.0, f"[{condition}]", "fragment-condition", "start"))

    # The first branch has no divider; label it under the tab when its guard
    # differs from the one shown in the header.
    if fragment.alternatives:
        first = fragment.alternatives[0].condition
        if first and first != condition:
            state.fragments.append(Text(left + 6.0, top + tab_h + 14.0, f"[{first}]", "fragment-condition", "start"))

    for row, alt_condition in dividers:
        y = state.row_y(row) - m.divider_offset
        state.fragments.append(Line(left, y, right, y, "fragment-divider"))
        if alt_condition:
            state.fragments.append(Text(left + 6.0, y + 16.0, f"[{alt_condition}]", "fragment-condition", "start"))


def _draw_fragment(fragment: Fragment, cursor: int, state: _LayoutState, depth: int) -> int:
    cursor += 1
    open_row = cursor
    cursor = _draw_elements(fragment.elements, cursor, state, depth + 1)

    dividers: list[tuple[int, str]] = []
    for index, alt in enumerate(fragment.alternatives):
        if index > 0:
            cursor += 1
            dividers.append((cursor, alt.condition))
        cursor = _draw_elements(alt.elements, cursor, state, depth + 1)

    cursor += 1
    _draw_fragment_frame(fragment, open_row, cursor, dividers, depth, state)
    return cursor


def _draw_elements(elements: list[Element], cursor: int, state: _LayoutState, depth: int = 0) -> int:
    """Draw ``elements`` starting after row ``cursor``; return the last row used."""
    for element in elements:
        if isinstance(element, Message):
            cursor += 1
            _draw_message(element, cursor, state)
            _track_activations(state, element, cursor)
        elif isinstance(element, Fragment):
            cursor = _draw_fragment(element, cursor, state, depth)
        else:
            raise TypeError(f"unsupported element: {element!r}")
    return cursor


def layout_sequence(diagram: SequenceDiagram, metrics: LayoutMetrics | None = None) -> Drawing:
    """Lay out a parsed diagram as absolutely positioned primitives.

    Row usage is counted up front so the canvas size is fixed before anything
    is placed; the drawing pass then stacks rows top-down.
    """
    m = metrics or DEFAULT_METRICS
    participants = list(diagram.participants)
    rows = count_rows(diagram.elements)

    width = int(round(m.side_margin * 2 + len(participants) * m.participant_spacing))
    height = int(round(m.top_margin + m.participant_height + rows * m.row_height + m.lifeline_extension))

    header: list[Primitive] = []
    lifelines: list[Primitive] = []
    centers: dict[str, float] = {}
    lifeline_top = m.top_margin + m.participant_height
    lifeline_bottom = height - m.lifeline_extension

    for i, name in enumerate(participants):
        x = m.side_margin + i * m.participant_spacing
        center = x + m.participant_width / 2.0
        centers[name] = center
        header.append(Rect(x, m.top_margin, m.participant_width, m.participant_height, "participant-box", m.participant_radius))
        header.append(Text(center, m.top_margin + m.participant_height / 2.0 + 5.0, name, "participant-text"))
        lifelines.append(Line(center, lifeline_top, center, lifeline_bottom, "lifeline"))

    state = _LayoutState(metrics=m, centers=centers, lifeline_top=lifeline_top, width=width)
    rows_used = _draw_elements(diagram.elements, 0, state)
    _close_open_activations(state, rows_used)

    if rows_used != rows:
        logger.warning("Row count drift: counted %d rows, drew %d", rows, rows_used)
    logger.debug(
        "Laid out %d participants over %d rows (%dx%d), %d activations",
        len(participants),
        rows_used,
        width,
        height,
        len(state.activations),
    )

    return Drawing(
        primitives=header + lifelines + state.fragments + state.bars + state.messages,
        width=width,
        height=height,
        view_width=width,
        view_height=height,
        rows=rows,
        rows_used=rows_used,
        activations=state.activations,
    )
