"""Operator reorders of the rotation.

A reorder replaces the entries and groups wholesale and may flip
``turn_disabled`` on a batch of units. It is validated against the live unit
registry rather than the previous snapshot, since units can be created or
deleted between the operator opening the editor and applying it. Either the
whole edit applies or a :class:`TurnOrderError` is raised and nothing does.
"""
from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Dict, Iterable, Mapping, Sequence, Tuple

from turnkeeper.components.scheduler_state import SchedulerState
from turnkeeper.components.turn_entry import EntryKind, TurnEntry
from turnkeeper.components.turn_group import TurnGroup
from turnkeeper.components.unit import Unit
from turnkeeper.utils.eligibility import grouped_unit_ids
from turnkeeper.utils.turn_resolver import resolve_current


class TurnOrderError(ValueError):
    """A turn-order edit or payload was rejected."""


DisabledChanges = Mapping[str, bool] | Iterable[Tuple[str, bool]]


@dataclass(frozen=True, slots=True)
class ReorderResult:
    """New scheduler state plus the unit components after disabled flips.

    units: full registry copy; only entries in changed_units differ.
    stripped: unit ids whose bare entries were dropped because a group owns them.
    """
    state: SchedulerState
    units: Dict[str, Unit] = field(default_factory=dict)
    changed_units: Tuple[str, ...] = ()
    stripped: Tuple[str, ...] = ()


def normalize_groups(groups: Iterable[TurnGroup]) -> tuple[TurnGroup, ...]:
    """Tidy operator-supplied groups.

    Repeated members inside one group collapse to their first slot and a blank
    name falls back to the id. A duplicate group id or a unit claimed by two
    groups is ambiguous and rejected.
    """

    normalized: list[TurnGroup] = []
    seen_groups: set[str] = set()
    owner_of: dict[str, str] = {}
    for group in groups:
        if not isinstance(group, TurnGroup):
            raise TurnOrderError(f"Expected TurnGroup, got {group!r}")
        if group.group_id in seen_groups:
            raise TurnOrderError(f"Duplicate turn group '{group.group_id}'")
        seen_groups.add(group.group_id)
        members: list[str] = []
        for unit_id in group.member_unit_ids:
            if not unit_id or unit_id in members:
                continue
            other = owner_of.get(unit_id)
            if other is not None:
                raise TurnOrderError(
                    f"Unit '{unit_id}' belongs to both '{other}' and '{group.group_id}'"
                )
            owner_of[unit_id] = group.group_id
            members.append(unit_id)
        normalized.append(
            TurnGroup(
                group_id=group.group_id,
                name=group.name.strip() or group.group_id,
                member_unit_ids=tuple(members),
            )
        )
    return tuple(normalized)


def _validate_entries(
    entries: Sequence[TurnEntry],
    groups_by_id: Mapping[str, TurnGroup],
    units: Mapping[str, Unit],
) -> None:
    bare_units: set[str] = set()
    group_entries: set[str] = set()
    for entry in entries:
        if not isinstance(entry, TurnEntry):
            raise TurnOrderError(f"Expected TurnEntry, got {entry!r}")
        if entry.kind is EntryKind.GROUP:
            if entry.ref not in groups_by_id:
                raise TurnOrderError(f"Turn order references unknown group '{entry.ref}'")
            if entry.ref in group_entries:
                raise TurnOrderError(f"Group '{entry.ref}' appears twice in the turn order")
            group_entries.add(entry.ref)
        elif entry.kind is EntryKind.UNIT:
            if entry.ref not in units:
                raise TurnOrderError(f"Turn order references unknown unit '{entry.ref}'")
            if entry.ref in bare_units:
                raise TurnOrderError(f"Unit '{entry.ref}' appears twice in the turn order")
            bare_units.add(entry.ref)
    for group in groups_by_id.values():
        for unit_id in group.member_unit_ids:
            if unit_id not in units:
                raise TurnOrderError(
                    f"Group '{group.group_id}' references unknown unit '{unit_id}'"
                )


def _disabled_pairs(changes: DisabledChanges) -> list[tuple[str, bool]]:
    if isinstance(changes, Mapping):
        return [(unit_id, bool(flag)) for unit_id, flag in changes.items()]
    return [(unit_id, bool(flag)) for unit_id, flag in changes]


def _locate(
    previous: TurnEntry | None,
    entries: Sequence[TurnEntry],
    groups: Sequence[TurnGroup],
) -> int:
    if previous is None:
        return 0
    if previous in entries:
        return entries.index(previous)
    if previous.kind is EntryKind.UNIT:
        # The unit was folded into a group; its turn now lives with the group.
        for group in groups:
            if group.has_member(previous.ref):
                entry = TurnEntry.group(group.group_id)
                if entry in entries:
                    return entries.index(entry)
    return 0


def apply_reorder(
    state: SchedulerState,
    units: Mapping[str, Unit],
    new_entries: Sequence[TurnEntry],
    new_groups: Iterable[TurnGroup],
    disabled_changes: DisabledChanges = (),
) -> ReorderResult:
    """Replace the rotation while keeping the same participant current."""

    groups = normalize_groups(new_groups)
    groups_by_id = {group.group_id: group for group in groups}
    _validate_entries(new_entries, groups_by_id, units)
    changes = _disabled_pairs(disabled_changes)
    for unit_id, _ in changes:
        if unit_id not in units:
            raise TurnOrderError(f"Cannot change turn_disabled of unknown unit '{unit_id}'")

    grouped = grouped_unit_ids(groups)
    entries: list[TurnEntry] = []
    stripped: list[str] = []
    for entry in new_entries:
        if entry.kind is EntryKind.UNIT and entry.ref in grouped:
            stripped.append(entry.ref)
            continue
        entries.append(entry)
    listed_groups = {entry.ref for entry in entries if entry.kind is EntryKind.GROUP}
    for group in groups:
        if group.group_id not in listed_groups:
            entries.append(TurnEntry.group(group.group_id))

    previous = resolve_current(state, units)
    turn_index = _locate(previous, entries, groups)

    next_units = dict(units)
    touched: list[str] = []
    for unit_id, flag in changes:
        next_units[unit_id] = replace(next_units[unit_id], turn_disabled=flag)
        if unit_id not in touched:
            touched.append(unit_id)
    changed = [
        unit_id
        for unit_id in touched
        if next_units[unit_id].turn_disabled != units[unit_id].turn_disabled
    ]

    next_state = replace(
        state,
        entries=tuple(entries),
        groups=groups,
        turn_index=turn_index,
    )
    return ReorderResult(
        state=next_state,
        units=next_units,
        changed_units=tuple(changed),
        stripped=tuple(stripped),
    )
