"""Roster edits that implicitly touch the rotation.

Creating a unit or group appends it to the rotation; deleting one strips
every reference from entries and groups. Temp-turn tokens are left alone:
a token for a deleted unit stays on the stack and pops in order.
"""
from __future__ import annotations

from dataclasses import replace
from typing import Callable

from turnkeeper.components.scheduler_state import SchedulerState
from turnkeeper.components.turn_entry import EntryKind, TurnEntry
from turnkeeper.components.turn_group import TurnGroup
from turnkeeper.utils.eligibility import grouped_unit_ids
from turnkeeper.utils.turn_reorder import TurnOrderError


def _drop_entries(state: SchedulerState, predicate: Callable[[TurnEntry], bool]) -> SchedulerState:
    """Remove matching entries, keeping turn_index on the same surviving slot."""

    kept: list[TurnEntry] = []
    shift = 0
    for position, entry in enumerate(state.entries):
        if predicate(entry):
            if position < state.turn_index:
                shift += 1
            continue
        kept.append(entry)
    if len(kept) == len(state.entries):
        return state
    turn_index = state.turn_index - shift
    if not kept or turn_index >= len(kept):
        turn_index = 0
    return replace(state, entries=tuple(kept), turn_index=turn_index)


def add_unit_entry(state: SchedulerState, unit_id: str) -> SchedulerState:
    """Append a bare entry for a newly created unit."""

    entry = TurnEntry.unit(unit_id)
    if entry in state.entries or unit_id in grouped_unit_ids(state.groups):
        return state
    return replace(state, entries=state.entries + (entry,))


def add_group(state: SchedulerState, group: TurnGroup) -> SchedulerState:
    """Register a group and give it a slot at the end of the rotation.

    Bare entries of its members are removed so each unit keeps one slot.
    """

    if state.group(group.group_id) is not None:
        raise TurnOrderError(f"Duplicate turn group '{group.group_id}'")
    claimed = grouped_unit_ids(state.groups)
    for unit_id in group.member_unit_ids:
        if unit_id in claimed:
            raise TurnOrderError(f"Unit '{unit_id}' already belongs to a group")
    members = set(group.member_unit_ids)
    state = _drop_entries(
        state,
        lambda entry: entry.kind is EntryKind.UNIT and entry.ref in members,
    )
    return replace(
        state,
        entries=state.entries + (TurnEntry.group(group.group_id),),
        groups=state.groups + (group,),
    )


def remove_unit(state: SchedulerState, unit_id: str) -> SchedulerState:
    state = _drop_entries(
        state,
        lambda entry: entry.kind is EntryKind.UNIT and entry.ref == unit_id,
    )
    if not any(group.has_member(unit_id) for group in state.groups):
        return state
    # Emptied groups stay put; they are skipped until they get members again.
    groups = tuple(
        replace(
            group,
            member_unit_ids=tuple(m for m in group.member_unit_ids if m != unit_id),
        )
        for group in state.groups
    )
    return replace(state, groups=groups)


def remove_group(state: SchedulerState, group_id: str) -> SchedulerState:
    state = _drop_entries(
        state,
        lambda entry: entry.kind is EntryKind.GROUP and entry.ref == group_id,
    )
    groups = tuple(group for group in state.groups if group.group_id != group_id)
    if len(groups) == len(state.groups):
        return state
    return replace(state, groups=groups)
