"""Cyclic resolution of the current turn and forward advancement.

The rotation is a ring: ``turn_index`` is a raw position and the current
entry is the first eligible entry scanning forward from it. Advancing moves
to the next eligible entry strictly after the current one and bumps the
round counter when the walk from ``turn_index`` to the new entry wraps past
the end of the rotation.
"""
from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Mapping, Tuple

from turnkeeper.components.scheduler_state import SchedulerState
from turnkeeper.components.turn_entry import EntryKind, TurnEntry
from turnkeeper.components.unit import Unit
from turnkeeper.utils.eligibility import grouped_unit_ids, is_entry_eligible


@dataclass(frozen=True, slots=True)
class AdvanceResult:
    """Outcome of a single advance step.

    popped: temp-turn token removed from the stack, when the stack was in play.
    passed_markers: marker ids crossed between the old and the new current.
    no_eligible: nothing could take the turn; the state is unchanged.
    """
    state: SchedulerState
    round_incremented: bool = False
    popped: TurnEntry | None = None
    passed_markers: Tuple[str, ...] = ()
    no_eligible: bool = False


class _Eligibility:
    """Caches the group lookups needed to test many entries of one state."""

    __slots__ = ("units", "groups_by_id", "grouped_ids")

    def __init__(self, state: SchedulerState, units: Mapping[str, Unit]):
        self.units = units
        self.groups_by_id = state.groups_by_id()
        self.grouped_ids = grouped_unit_ids(state.groups)

    def __call__(self, entry: TurnEntry) -> bool:
        return is_entry_eligible(entry, self.units, self.groups_by_id, self.grouped_ids)


def resolve_current_position(state: SchedulerState, units: Mapping[str, Unit]) -> int | None:
    """Return the index in ``state.entries`` of the current entry, if any."""

    count = len(state.entries)
    if count == 0:
        return None
    eligible = _Eligibility(state, units)
    start = state.turn_index % count
    for step in range(count):
        position = (start + step) % count
        if eligible(state.entries[position]):
            return position
    return None


def resolve_current(
    state: SchedulerState,
    units: Mapping[str, Unit],
    explicit_id: TurnEntry | str | None = None,
) -> TurnEntry | None:
    """Return the main-rotation entry whose turn it is, ignoring temp turns.

    explicit_id lets callers that already track the current unit skip the
    scan; it is honoured only when it names an eligible entry of the rotation.
    """

    if not state.entries:
        return None
    if explicit_id is not None:
        candidate = _explicit_entry(state, units, explicit_id)
        if candidate is not None and candidate in state.entries and _Eligibility(state, units)(candidate):
            return candidate
    position = resolve_current_position(state, units)
    if position is None:
        return None
    return state.entries[position]


def _explicit_entry(
    state: SchedulerState,
    units: Mapping[str, Unit],
    explicit_id: TurnEntry | str,
) -> TurnEntry | None:
    if isinstance(explicit_id, TurnEntry):
        return explicit_id
    if explicit_id in units:
        return TurnEntry.unit(explicit_id)
    if state.group(explicit_id) is not None:
        return TurnEntry.group(explicit_id)
    return None


def advance(state: SchedulerState, units: Mapping[str, Unit]) -> AdvanceResult:
    """Move the turn on by one step.

    With temp turns outstanding this pops exactly one token and leaves the
    main rotation frozen. Otherwise ``turn_index`` moves to the next eligible
    entry and ``round`` goes up by one when the scan wraps.
    """

    if state.temp_stack:
        token = state.temp_stack[-1]
        return AdvanceResult(
            state=replace(state, temp_stack=state.temp_stack[:-1]),
            popped=token,
        )

    current = resolve_current_position(state, units)
    if current is None:
        return AdvanceResult(state=state, no_eligible=True)

    count = len(state.entries)
    # Resolving past the end of the rotation already counts as a wrap.
    resolved_wrapped = current < state.turn_index % count
    eligible = _Eligibility(state, units)
    passed: list[str] = []
    for step in range(1, count + 1):
        position = (current + step) % count
        entry = state.entries[position]
        if eligible(entry):
            wrapped = resolved_wrapped or current + step >= count
            next_state = replace(
                state,
                turn_index=position,
                round=state.round + 1 if wrapped else state.round,
            )
            return AdvanceResult(
                state=next_state,
                round_incremented=wrapped,
                passed_markers=tuple(passed),
            )
        if entry.kind is EntryKind.MARKER:
            passed.append(entry.ref)
    # Unreachable while the current entry itself is eligible.
    return AdvanceResult(state=state, no_eligible=True)
