import pytest

from turnkeeper.components.turn_entry import TurnEntry
from turnkeeper.utils.turn_resolver import advance, resolve_current, resolve_current_position

from tests.helpers import group, make_state, make_units

U1, U2, U3 = TurnEntry.unit("u1"), TurnEntry.unit("u2"), TurnEntry.unit("u3")
G1 = TurnEntry.group("g1")


def test_empty_rotation_resolves_to_none_and_advance_is_noop():
    state = make_state([])
    assert resolve_current(state, {}) is None
    assert resolve_current_position(state, {}) is None
    result = advance(state, {})
    assert result.no_eligible
    assert result.state is state


@pytest.mark.parametrize("turn_index", [0, 1, 2])
def test_current_is_never_none_with_an_eligible_unit(turn_index):
    units = make_units("u1", "u2", "u3", u1={"turn_disabled": True}, u2={"turn_disabled": True})
    state = make_state(["u1", "u2", "u3"], turn_index=turn_index)
    assert resolve_current(state, units) == U3


def test_scan_skips_ineligible_entries_and_wraps():
    units = make_units("u1", "u2", "u3", u3={"turn_disabled": True})
    state = make_state(["u1", "u2", "u3"], turn_index=2)
    assert resolve_current(state, units) == U1
    assert resolve_current_position(state, units) == 0


def test_explicit_id_fast_path_only_for_eligible_entries():
    units = make_units("u1", "u2", "u3", u3={"turn_disabled": True})
    state = make_state(["u1", "u2", "u3"], turn_index=0)
    assert resolve_current(state, units, explicit_id="u2") == U2
    assert resolve_current(state, units, explicit_id=U2) == U2
    assert resolve_current(state, units, explicit_id="u3") == U1
    assert resolve_current(state, units, explicit_id="nobody") == U1


def test_nothing_eligible_is_a_representable_result():
    units = make_units("u1", u1={"turn_disabled": True})
    state = make_state(["u1", TurnEntry.marker("m1")])
    assert resolve_current(state, units) is None
    result = advance(state, units)
    assert result.no_eligible
    assert result.state.turn_index == 0
    assert result.state.round == 1


def test_full_cycle_returns_to_start_and_counts_one_round():
    units = make_units("u1", "u2", "u3")
    state = make_state(["u1", "u2", "u3"])
    increments = 0
    for _ in range(len(state.entries)):
        result = advance(state, units)
        state = result.state
        increments += result.round_incremented
    assert resolve_current(state, units) == U1
    assert state.round == 2
    assert increments == 1


def test_single_eligible_entry_wraps_onto_itself():
    units = make_units("u1", "u2", u2={"turn_disabled": True})
    state = make_state(["u1", "u2"])
    result = advance(state, units)
    assert result.state.turn_index == 0
    assert result.round_incremented
    assert result.state.round == 2


def test_advance_reports_markers_it_passes():
    units = make_units("u1", "u2")
    state = make_state(["u1", TurnEntry.marker("m1"), TurnEntry.label("--"), "u2"])
    result = advance(state, units)
    assert result.state.turn_index == 3
    assert result.passed_markers == ("m1",)
    assert not result.round_incremented


def test_advance_starts_from_resolved_current_when_index_is_stale():
    units = make_units("u1", "u2", "u3", u2={"turn_disabled": True})
    # turn_index points at a disabled unit; u3 holds the turn.
    state = make_state(["u1", "u2", "u3"], turn_index=1)
    result = advance(state, units)
    assert resolve_current(result.state, units) == U1
    assert result.round_incremented


def test_stale_index_at_the_end_counts_the_wrap_once():
    units = make_units("u1", "u2", "u3", u3={"turn_disabled": True})
    # u3 was current and has just been disabled, so u1 already plays in the next round.
    state = make_state(["u1", "u2", "u3"], turn_index=2)
    seen = []
    for _ in range(4):
        state = advance(state, units).state
        seen.append((resolve_current(state, units).ref, state.round))
    assert seen == [("u2", 2), ("u1", 3), ("u2", 3), ("u1", 4)]


def test_dangling_entries_are_skipped_silently():
    units = make_units("u1", "u3")
    state = make_state(["u1", "deleted", TurnEntry.group("gone"), "u3"])
    result = advance(state, units)
    assert result.state.turn_index == 3


def test_scenario_groups_disable_and_temp_turn():
    from dataclasses import replace

    from turnkeeper.utils.temp_turns import current_entry, grant_temp_turn

    units = make_units("u1", "u2", "u3", "u4")
    state = make_state(["u1", "u2", G1], [group("g1", "u3", "u4")])

    for _ in range(3):
        state = advance(state, units).state
    assert current_entry(state, units) == U1
    assert state.round == 2

    units["u2"] = replace(units["u2"], turn_disabled=True)
    state = advance(state, units).state
    assert current_entry(state, units) == G1

    state = grant_temp_turn(state, TurnEntry.unit("u4"))
    assert current_entry(state, units) == TurnEntry.unit("u4")
    state = advance(state, units).state
    assert current_entry(state, units) == G1
    assert state.round == 2
