"""View-model for the turn order bar.

The scheduler only knows whose turn it is. Everything the bar needs on top of
that (which slots to show, which way to slide, when to flash the round
counter, the temporary-turn banner) is derived here by diffing successive
frames, so none of it leaks into SchedulerState.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping, Optional, Tuple

from turnkeeper.components.scheduler_state import SchedulerState
from turnkeeper.components.turn_entry import EntryKind, TurnEntry
from turnkeeper.components.unit import Unit
from turnkeeper.constants import (
    TURN_BAR_MAX_VISIBLE,
    UNKNOWN_GROUP_LABEL,
    UNKNOWN_UNIT_LABEL,
)
from turnkeeper.utils.eligibility import grouped_unit_ids, is_entry_eligible
from turnkeeper.utils.temp_turns import resume_target
from turnkeeper.utils.turn_resolver import resolve_current_position

FORWARD = "forward"
BACKWARD = "backward"


@dataclass(frozen=True, slots=True)
class TurnBarSlot:
    entry: TurnEntry
    source_index: int
    label: Optional[str]


@dataclass(frozen=True, slots=True)
class TurnBarFrame:
    slots: Tuple[TurnBarSlot, ...] = ()
    current_index: Optional[int] = None
    visible: Tuple[int, ...] = ()
    direction: Optional[str] = None
    round: int = 1
    round_flash: bool = False
    current_label: Optional[str] = None
    temp_label: Optional[str] = None
    resume_label: Optional[str] = None
    temp_depth: int = 0

    @property
    def is_temp_turn(self) -> bool:
        return self.temp_depth > 0

    @property
    def current_entry(self) -> TurnEntry | None:
        if self.current_index is None:
            return None
        return self.slots[self.current_index].entry


def unit_label(unit: Unit | None) -> str | None:
    if unit is None:
        return None
    alias = (unit.alias or "").strip()
    return alias or unit.name or UNKNOWN_UNIT_LABEL


def entry_label(
    entry: TurnEntry | None,
    state: SchedulerState,
    units: Mapping[str, Unit],
    marker_labels: Mapping[str, str] | None = None,
) -> str | None:
    """Display label for an entry; None when it points at nothing."""

    if entry is None:
        return None
    if entry.kind is EntryKind.UNIT:
        return unit_label(units.get(entry.ref))
    if entry.kind is EntryKind.GROUP:
        group = state.group(entry.ref)
        if group is None:
            return None
        return group.name.strip() or group.group_id or UNKNOWN_GROUP_LABEL
    if entry.kind is EntryKind.MARKER:
        return (marker_labels or {}).get(entry.ref) or entry.ref
    return entry.ref


class TurnBarViewModel:
    """Turns successive scheduler states into frames for the turn bar."""

    def __init__(self, *, max_visible: int = TURN_BAR_MAX_VISIBLE):
        self.max_visible = max(1, max_visible)
        self._previous: TurnBarFrame | None = None

    @property
    def previous(self) -> TurnBarFrame | None:
        return self._previous

    def reset(self) -> None:
        self._previous = None

    def update(
        self,
        state: SchedulerState,
        units: Mapping[str, Unit],
        marker_labels: Mapping[str, str] | None = None,
    ) -> TurnBarFrame:
        slots = self._build_slots(state, units, marker_labels)
        current_index = self._current_slot(state, units, slots)
        main_entry = slots[current_index].entry if current_index is not None else None
        temp_label = resume_label = None
        if state.temp_stack:
            temp_label = entry_label(state.temp_stack[-1], state, units, marker_labels)
            resume_label = entry_label(resume_target(state, units), state, units, marker_labels)
        frame = TurnBarFrame(
            slots=slots,
            current_index=current_index,
            visible=self._window(len(slots), current_index),
            direction=self._direction(slots, current_index),
            round=state.round,
            round_flash=self._previous is not None and state.round > self._previous.round,
            current_label=entry_label(main_entry, state, units, marker_labels),
            temp_label=temp_label,
            resume_label=resume_label,
            temp_depth=len(state.temp_stack),
        )
        self._previous = frame
        return frame

    def _build_slots(self, state, units, marker_labels) -> Tuple[TurnBarSlot, ...]:
        groups_by_id = state.groups_by_id()
        grouped = grouped_unit_ids(state.groups)
        slots = []
        for position, entry in enumerate(state.entries):
            if entry.kind is EntryKind.LABEL:
                continue
            if entry.kind is not EntryKind.MARKER and not is_entry_eligible(
                entry, units, groups_by_id, grouped
            ):
                continue
            slots.append(
                TurnBarSlot(
                    entry=entry,
                    source_index=position,
                    label=entry_label(entry, state, units, marker_labels),
                )
            )
        return tuple(slots)

    def _current_slot(self, state, units, slots) -> Optional[int]:
        position = resolve_current_position(state, units)
        if position is None:
            return None
        for index, slot in enumerate(slots):
            if slot.source_index == position:
                return index
        return None

    def _window(self, count: int, current_index: Optional[int]) -> Tuple[int, ...]:
        if count == 0:
            return ()
        center = current_index or 0
        visible_count = min(count, self.max_visible)
        left = (visible_count - 1) // 2
        right = visible_count - 1 - left
        return tuple((center + offset) % count for offset in range(-left, right + 1))

    def _direction(self, slots, current_index: Optional[int]) -> Optional[str]:
        previous = self._previous
        if previous is None or current_index is None or len(slots) <= 1:
            return None
        previous_entry = previous.current_entry
        if previous_entry is None:
            return None
        count = len(slots)
        previous_index = next(
            (index for index, slot in enumerate(slots) if slot.entry == previous_entry),
            None,
        )
        # A previous current that left the bar means the bar jumps.
        if previous_index is None or previous_index == current_index:
            return None
        if (previous_index + 1) % count == current_index:
            return FORWARD
        if (previous_index - 1) % count == current_index:
            return BACKWARD
        return None
