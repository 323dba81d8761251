from __future__ import annotations

from typing import Iterable, Sequence

from turnkeeper.components.scheduler_state import SchedulerState
from turnkeeper.components.turn_entry import TurnEntry
from turnkeeper.components.turn_group import TurnGroup
from turnkeeper.components.unit import Unit


def make_units(*unit_ids: str, **overrides) -> dict[str, Unit]:
    """Build an eligible unit registry; overrides map unit ids to field dicts."""

    units = {unit_id: Unit(unit_id=unit_id, name=unit_id.upper()) for unit_id in unit_ids}
    for unit_id, fields in overrides.items():
        for name, value in fields.items():
            setattr(units[unit_id], name, value)
    return units


def make_state(
    entries: Sequence[TurnEntry | str],
    groups: Iterable[TurnGroup] = (),
    *,
    turn_index: int = 0,
    round: int = 1,
    temp_stack: Sequence[TurnEntry] = (),
) -> SchedulerState:
    """Build a state; plain strings become unit entries."""

    return SchedulerState(
        entries=tuple(TurnEntry.unit(e) if isinstance(e, str) else e for e in entries),
        groups=tuple(groups),
        turn_index=turn_index,
        round=round,
        temp_stack=tuple(temp_stack),
    )


def group(group_id: str, *members: str, name: str = "") -> TurnGroup:
    return TurnGroup(group_id=group_id, name=name, member_unit_ids=tuple(members))


def recorder(bus, name: str) -> list[dict]:
    events: list[dict] = []
    bus.subscribe(name, lambda sender, **payload: events.append(payload))
    return events
