from esper import World

from .events.bus import EventBus, EVENT_UNIT_CREATED, EVENT_UNIT_DELETED
from turnkeeper.components.scheduler_state import SchedulerState
from turnkeeper.components.unit import Bench, Unit, UnitKind
from turnkeeper.utils.scheduler_lookup import find_unit_entity


def create_world(event_bus: EventBus, state: SchedulerState | None = None) -> World:
    """Create the encounter world with its singleton scheduler state entity."""
    world = World()
    world.create_entity(state or SchedulerState())
    return world


def create_unit(
    world: World,
    event_bus: EventBus,
    unit_id: str,
    *,
    name: str = "",
    alias: str | None = None,
    bench: Bench | None = None,
    kind: UnitKind = UnitKind.NORMAL,
    turn_disabled: bool = False,
) -> int:
    """Spawn a unit entity and announce it so the rotation picks it up."""
    if find_unit_entity(world, unit_id) is not None:
        raise ValueError(f"Unit '{unit_id}' already exists")
    entity = world.create_entity(
        Unit(
            unit_id=unit_id,
            name=name or unit_id,
            alias=alias,
            bench=bench,
            kind=kind,
            turn_disabled=turn_disabled,
        )
    )
    event_bus.emit(EVENT_UNIT_CREATED, unit_id=unit_id)
    return entity


def delete_unit(world: World, event_bus: EventBus, unit_id: str) -> bool:
    entity = find_unit_entity(world, unit_id)
    if entity is None:
        return False
    world.delete_entity(entity, immediate=True)
    event_bus.emit(EVENT_UNIT_DELETED, unit_id=unit_id)
    return True
