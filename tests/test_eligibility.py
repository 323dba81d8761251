from turnkeeper.components.turn_entry import TurnEntry
from turnkeeper.components.unit import Bench, Unit, UnitKind
from turnkeeper.utils.eligibility import (
    grouped_unit_ids,
    is_entry_eligible,
    is_group_eligible,
    is_unit_eligible,
)

from tests.helpers import group, make_units


def test_normal_active_unit_is_eligible():
    assert is_unit_eligible(Unit(unit_id="u1"))


def test_benched_servant_building_and_disabled_units_are_not():
    assert not is_unit_eligible(Unit(unit_id="u1", bench=Bench.TEAM))
    assert not is_unit_eligible(Unit(unit_id="u2", bench=Bench.ENEMY))
    assert not is_unit_eligible(Unit(unit_id="u3", kind=UnitKind.SERVANT))
    assert not is_unit_eligible(Unit(unit_id="u4", kind=UnitKind.BUILDING))
    assert not is_unit_eligible(Unit(unit_id="u5", turn_disabled=True))
    assert not is_unit_eligible(None)


def test_group_needs_one_eligible_member_and_ignores_missing_ids():
    units = make_units("u1", "u2", u1={"turn_disabled": True}, u2={"bench": Bench.ENEMY})
    g = group("g1", "u1", "ghost", "u2")
    assert not is_group_eligible(g, units)
    units["u2"].bench = None
    assert is_group_eligible(g, units)
    assert not is_group_eligible(None, units)


def test_bare_entry_of_grouped_unit_is_suppressed():
    units = make_units("u1", "u2")
    g = group("g1", "u2")
    groups_by_id = {"g1": g}
    grouped = grouped_unit_ids([g])
    assert grouped == {"u2"}
    assert is_entry_eligible(TurnEntry.unit("u1"), units, groups_by_id, grouped)
    assert not is_entry_eligible(TurnEntry.unit("u2"), units, groups_by_id, grouped)
    assert is_entry_eligible(TurnEntry.group("g1"), units, groups_by_id, grouped)


def test_markers_labels_and_dangling_entries_never_hold_the_turn():
    units = make_units("u1")
    assert not is_entry_eligible(TurnEntry.marker("m1"), units, {})
    assert not is_entry_eligible(TurnEntry.label("--"), units, {})
    assert not is_entry_eligible(TurnEntry.unit("gone"), units, {})
    assert not is_entry_eligible(TurnEntry.group("gone"), units, {})
