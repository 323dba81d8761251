from esper import World

from turnkeeper.components.scheduler_state import SchedulerState
from turnkeeper.components.unit import Unit


def get_scheduler_entity(world: World) -> int:
    """Return the entity carrying SchedulerState, creating it if absent."""
    existing = list(world.get_component(SchedulerState))
    if existing:
        return existing[0][0]
    return world.create_entity(SchedulerState())


def get_scheduler_state(world: World) -> SchedulerState:
    entity = get_scheduler_entity(world)
    return world.component_for_entity(entity, SchedulerState)


def set_scheduler_state(world: World, state: SchedulerState) -> None:
    # SchedulerState is immutable; add_component swaps the stored instance.
    world.add_component(get_scheduler_entity(world), state)


def unit_registry(world: World) -> dict[str, Unit]:
    """Map unit ids to the live Unit components of the world."""
    return {unit.unit_id: unit for _, unit in world.get_component(Unit)}


def find_unit_entity(world: World, unit_id: str) -> int | None:
    for ent, unit in world.get_component(Unit):
        if unit.unit_id == unit_id:
            return ent
    return None
