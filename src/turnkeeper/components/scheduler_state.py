from dataclasses import dataclass
from typing import Dict, Tuple

from turnkeeper.components.turn_entry import InterruptToken, TurnEntry
from turnkeeper.components.turn_group import TurnGroup
from turnkeeper.constants import DEFAULT_ROUND


@dataclass(frozen=True, slots=True)
class SchedulerState:
    """Singleton component holding the turn rotation of an encounter.

    entries: canonical rotation, independent of eligibility.
    turn_index: raw position in entries; the current entry is the first
        eligible one scanning forward from here.
    temp_stack: pending temporary turns, top of stack last.
    """
    entries: Tuple[TurnEntry, ...] = ()
    groups: Tuple[TurnGroup, ...] = ()
    turn_index: int = 0
    round: int = DEFAULT_ROUND
    temp_stack: Tuple[InterruptToken, ...] = ()

    def groups_by_id(self) -> Dict[str, TurnGroup]:
        return {group.group_id: group for group in self.groups}

    def group(self, group_id: str) -> TurnGroup | None:
        for group in self.groups:
            if group.group_id == group_id:
                return group
        return None
