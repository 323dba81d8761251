"""Predicates deciding who may hold the current turn.

Every function here is pure; callers pass the unit registry as a mapping of
``unit_id -> Unit``. Ids that are missing from the registry are treated as
ineligible rather than as errors.
"""
from __future__ import annotations

from typing import Iterable, Mapping

from turnkeeper.components.turn_entry import EntryKind, TurnEntry
from turnkeeper.components.turn_group import TurnGroup
from turnkeeper.components.unit import Unit, UnitKind


def is_unit_eligible(unit: Unit | None) -> bool:
    if unit is None:
        return False
    return unit.bench is None and unit.kind is UnitKind.NORMAL and not unit.turn_disabled


def is_group_eligible(group: TurnGroup | None, units: Mapping[str, Unit]) -> bool:
    """A group holds the turn while at least one member is eligible."""

    if group is None:
        return False
    return any(is_unit_eligible(units.get(unit_id)) for unit_id in group.member_unit_ids)


def grouped_unit_ids(groups: Iterable[TurnGroup]) -> set[str]:
    return {unit_id for group in groups for unit_id in group.member_unit_ids}


def is_entry_eligible(
    entry: TurnEntry,
    units: Mapping[str, Unit],
    groups_by_id: Mapping[str, TurnGroup],
    grouped_ids: set[str] | frozenset[str] = frozenset(),
) -> bool:
    """Return True when ``entry`` may be the current turn.

    Bare unit entries for units that belong to a group are suppressed; the
    group's own entry carries their turn.
    """

    if entry.kind is EntryKind.UNIT:
        if entry.ref in grouped_ids:
            return False
        return is_unit_eligible(units.get(entry.ref))
    if entry.kind is EntryKind.GROUP:
        return is_group_eligible(groups_by_id.get(entry.ref), units)
    return False
