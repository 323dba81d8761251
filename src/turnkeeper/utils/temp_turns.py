"""Temporary turns: operator-granted interrupts stacked above the rotation."""
from __future__ import annotations

from dataclasses import replace
from typing import Mapping

from turnkeeper.components.scheduler_state import SchedulerState
from turnkeeper.components.turn_entry import InterruptToken, TurnEntry
from turnkeeper.components.unit import Unit
from turnkeeper.utils.turn_resolver import resolve_current
from turnkeeper.utils.turn_reorder import TurnOrderError


def grant_temp_turn(state: SchedulerState, target: InterruptToken) -> SchedulerState:
    """Push ``target`` on the temp stack.

    Eligibility is deliberately not checked; a grant is an explicit operator
    override and may name a benched or disabled unit.
    """

    if not isinstance(target, TurnEntry) or not target.is_participant:
        raise TurnOrderError(f"Temporary turns need a unit or group, got {target!r}")
    return replace(state, temp_stack=state.temp_stack + (target,))


def is_temp_turn(state: SchedulerState) -> bool:
    return bool(state.temp_stack)


def current_entry(state: SchedulerState, units: Mapping[str, Unit]) -> TurnEntry | None:
    if state.temp_stack:
        return state.temp_stack[-1]
    return resolve_current(state, units)


def resume_target(state: SchedulerState, units: Mapping[str, Unit]) -> TurnEntry | None:
    """Entry that regains the turn once the top temp turn is advanced past.

    With a single outstanding temp turn that is the main rotation; with nested
    grants it is the next-outer interrupt.
    """

    depth = len(state.temp_stack)
    if depth == 0:
        return None
    if depth >= 2:
        return state.temp_stack[-2]
    return resolve_current(state, units)
