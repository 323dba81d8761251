import logging

from esper import World
from turnkeeper.events.bus import (
    EventBus,
    EVENT_ADVANCE_TURN_REQUEST,
    EVENT_GRANT_TEMP_TURN_REQUEST,
    EVENT_GROUP_CREATED,
    EVENT_GROUP_DELETED,
    EVENT_MARKER_PASSED,
    EVENT_NO_ELIGIBLE_TURN,
    EVENT_ROUND_STARTED,
    EVENT_SET_TURN_DISABLED_REQUEST,
    EVENT_SET_TURN_ORDER_REQUEST,
    EVENT_TEMP_TURN_ENDED,
    EVENT_TEMP_TURN_GRANTED,
    EVENT_TURN_ADVANCED,
    EVENT_TURN_DISABLED_CHANGED,
    EVENT_TURN_ORDER_CHANGED,
    EVENT_TURN_ORDER_REJECTED,
    EVENT_UNIT_CREATED,
    EVENT_UNIT_DELETED,
)
from turnkeeper.components.scheduler_state import SchedulerState
from turnkeeper.components.turn_entry import TurnEntry
from turnkeeper.components.unit import Unit
from turnkeeper.utils.scheduler_lookup import (
    find_unit_entity,
    get_scheduler_state,
    set_scheduler_state,
    unit_registry,
)
from turnkeeper.utils.temp_turns import current_entry, grant_temp_turn, resume_target
from turnkeeper.utils.turn_codec import (
    parse_disabled_changes,
    parse_disabled_flag,
    parse_entries,
    parse_group,
    parse_groups,
    parse_token,
)
from turnkeeper.utils.turn_reorder import TurnOrderError, apply_reorder
from turnkeeper.utils.turn_resolver import AdvanceResult, advance, resolve_current
from turnkeeper.utils.turn_roster import add_group, add_unit_entry, remove_group, remove_unit

logger = logging.getLogger(__name__)


class TurnSystem:
    """Owns the encounter's SchedulerState and applies operator turn actions.

    Requests arrive on the bus from the action log, which serializes them per
    encounter; results are published back as turn events. Invalid requests
    never raise out of a handler: they are logged and answered with
    EVENT_TURN_ORDER_REJECTED. Direct method calls raise TurnOrderError.
    """
    def __init__(self, world: World, event_bus: EventBus):
        self.world = world
        self.event_bus = event_bus
        self.event_bus.subscribe(EVENT_SET_TURN_ORDER_REQUEST, self.on_set_turn_order_request)
        self.event_bus.subscribe(EVENT_ADVANCE_TURN_REQUEST, self.on_advance_turn_request)
        self.event_bus.subscribe(EVENT_GRANT_TEMP_TURN_REQUEST, self.on_grant_temp_turn_request)
        self.event_bus.subscribe(EVENT_SET_TURN_DISABLED_REQUEST, self.on_set_turn_disabled_request)
        self.event_bus.subscribe(EVENT_UNIT_CREATED, self.on_unit_created)
        self.event_bus.subscribe(EVENT_UNIT_DELETED, self.on_unit_deleted)
        self.event_bus.subscribe(EVENT_GROUP_CREATED, self.on_group_created)
        self.event_bus.subscribe(EVENT_GROUP_DELETED, self.on_group_deleted)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------
    def state(self) -> SchedulerState:
        return get_scheduler_state(self.world)

    def units(self) -> dict[str, Unit]:
        return unit_registry(self.world)

    def current_entry(self) -> TurnEntry | None:
        return current_entry(self.state(), self.units())

    def resolve_current(self, explicit_id: TurnEntry | str | None = None) -> TurnEntry | None:
        return resolve_current(self.state(), self.units(), explicit_id)

    def resume_target(self) -> TurnEntry | None:
        return resume_target(self.state(), self.units())

    # ------------------------------------------------------------------
    # Bus handlers
    # ------------------------------------------------------------------
    def on_set_turn_order_request(self, sender, **payload):
        try:
            entries = parse_entries(payload.get("turn_order") or ())
            groups = parse_groups(payload.get("turn_groups") or ())
            changes = parse_disabled_changes(payload.get("disabled_changes"))
            self.set_turn_order(entries, groups, changes)
        except TurnOrderError as exc:
            self._reject(str(exc))

    def on_advance_turn_request(self, sender, **payload):
        self.advance()

    def on_grant_temp_turn_request(self, sender, **payload):
        target = payload.get("target")
        if target is None and payload.get("unit_id") is not None:
            target = TurnEntry.unit(payload["unit_id"])
        state = self.state()
        token = parse_token(
            target,
            self.units().keys(),
            {group.group_id for group in state.groups},
        )
        if token is None:
            self._reject(f"Cannot grant a temporary turn to {target!r}")
            return
        self.grant_temp_turn(token)

    def on_set_turn_disabled_request(self, sender, **payload):
        unit_id = payload.get("unit_id")
        try:
            flag = parse_disabled_flag(unit_id, payload.get("turn_disabled"))
            self.set_turn_disabled(unit_id, flag)
        except TurnOrderError as exc:
            self._reject(str(exc))

    def on_unit_created(self, sender, **payload):
        unit_id = payload.get("unit_id")
        if unit_id is None:
            return
        set_scheduler_state(self.world, add_unit_entry(self.state(), unit_id))

    def on_unit_deleted(self, sender, **payload):
        unit_id = payload.get("unit_id")
        if unit_id is None:
            return
        set_scheduler_state(self.world, remove_unit(self.state(), unit_id))

    def on_group_created(self, sender, **payload):
        try:
            group = parse_group(payload.get("group"))
            set_scheduler_state(self.world, add_group(self.state(), group))
        except TurnOrderError as exc:
            self._reject(str(exc))

    def on_group_deleted(self, sender, **payload):
        group_id = payload.get("group_id")
        if group_id is None:
            return
        set_scheduler_state(self.world, remove_group(self.state(), group_id))

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------
    def advance(self) -> AdvanceResult:
        """Advance one step and publish what happened."""
        units = self.units()
        before = self.state()
        previous_entry = current_entry(before, units)
        result = advance(before, units)
        if result.no_eligible:
            logger.debug("No eligible turn to advance to")
            self.event_bus.emit(EVENT_NO_ELIGIBLE_TURN)
            return result
        set_scheduler_state(self.world, result.state)
        new_entry = current_entry(result.state, units)
        if result.popped is not None:
            logger.debug("Temporary turn %s ended", result.popped.key)
            self.event_bus.emit(
                EVENT_TEMP_TURN_ENDED,
                token=result.popped,
                depth=len(result.state.temp_stack),
                current_entry=new_entry,
            )
        for marker_id in result.passed_markers:
            self.event_bus.emit(EVENT_MARKER_PASSED, marker_id=marker_id, round=result.state.round)
        if result.round_incremented:
            logger.debug("Round %d started", result.state.round)
            self.event_bus.emit(EVENT_ROUND_STARTED, round=result.state.round)
        self.event_bus.emit(
            EVENT_TURN_ADVANCED,
            previous_entry=previous_entry,
            new_entry=new_entry,
            round=result.state.round,
            round_incremented=result.round_incremented,
        )
        return result

    def grant_temp_turn(self, token: TurnEntry) -> SchedulerState:
        state = grant_temp_turn(self.state(), token)
        set_scheduler_state(self.world, state)
        logger.debug("Temporary turn granted to %s (depth %d)", token.key, len(state.temp_stack))
        self.event_bus.emit(
            EVENT_TEMP_TURN_GRANTED,
            token=token,
            depth=len(state.temp_stack),
            resume_entry=resume_target(state, self.units()),
        )
        return state

    def set_turn_order(self, entries, groups, disabled_changes=()) -> SchedulerState:
        """Apply an operator reorder; raises TurnOrderError and changes nothing on failure."""
        result = apply_reorder(self.state(), self.units(), entries, groups, disabled_changes)
        set_scheduler_state(self.world, result.state)
        for unit_id in result.changed_units:
            self._write_turn_disabled(unit_id, result.units[unit_id].turn_disabled)
        if result.stripped:
            logger.debug("Dropped grouped bare entries: %s", ", ".join(result.stripped))
        self.event_bus.emit(
            EVENT_TURN_ORDER_CHANGED,
            entries=result.state.entries,
            groups=result.state.groups,
            turn_index=result.state.turn_index,
            stripped=result.stripped,
        )
        return result.state

    def set_turn_disabled(self, unit_id: str, turn_disabled: bool) -> None:
        if unit_id is None or find_unit_entity(self.world, unit_id) is None:
            raise TurnOrderError(f"Cannot change turn_disabled of unknown unit '{unit_id}'")
        self._write_turn_disabled(unit_id, turn_disabled)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------
    def _write_turn_disabled(self, unit_id: str, turn_disabled: bool) -> None:
        entity = find_unit_entity(self.world, unit_id)
        if entity is None:
            return
        try:
            unit = self.world.component_for_entity(entity, Unit)
        except KeyError:
            return
        if unit.turn_disabled == turn_disabled:
            return
        unit.turn_disabled = turn_disabled
        self.event_bus.emit(EVENT_TURN_DISABLED_CHANGED, unit_id=unit_id, turn_disabled=turn_disabled)

    def _reject(self, reason: str) -> None:
        logger.warning("Turn order request rejected: %s", reason)
        self.event_bus.emit(EVENT_TURN_ORDER_REJECTED, reason=reason)
