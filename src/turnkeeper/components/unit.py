"""Unit component: the fields the turn scheduler reads from a combatant."""
from dataclasses import dataclass
from enum import Enum
from typing import Optional


class Bench(Enum):
    """Bench a unit has been parked on; benched units never take turns."""
    TEAM = "TEAM"
    ENEMY = "ENEMY"


class UnitKind(Enum):
    NORMAL = "NORMAL"
    SERVANT = "SERVANT"
    BUILDING = "BUILDING"


@dataclass(slots=True)
class Unit:
    """A combatant on the encounter board.

    unit_id: stable id used by turn entries, groups and temp-turn tokens.
    name/alias: display only; the turn bar prefers the alias.
    """
    unit_id: str
    name: str = ""
    alias: Optional[str] = None
    bench: Optional[Bench] = None
    kind: UnitKind = UnitKind.NORMAL
    turn_disabled: bool = False
