from dataclasses import dataclass
from typing import Tuple


@dataclass(frozen=True, slots=True)
class TurnGroup:
    """Units that share a single slot in the rotation.

    member_unit_ids is ordered; the first member leads the group for display.
    """
    group_id: str
    name: str = ""
    member_unit_ids: Tuple[str, ...] = ()

    def has_member(self, unit_id: str) -> bool:
        return unit_id in self.member_unit_ids
