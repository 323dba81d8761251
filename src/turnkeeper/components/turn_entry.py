from dataclasses import dataclass
from enum import Enum

from turnkeeper.constants import GROUP_TOKEN_PREFIX, UNIT_TOKEN_PREFIX


class EntryKind(Enum):
    UNIT = "unit"
    GROUP = "group"
    MARKER = "marker"
    LABEL = "label"


@dataclass(frozen=True, slots=True)
class TurnEntry:
    """One slot in the turn rotation.

    ref holds the unit id, group id, marker id or label text depending on kind.
    Unit and group entries are turn participants; marker and label entries are
    separators that never hold the turn. The same type doubles as the token
    pushed on the temporary turn stack.
    """
    kind: EntryKind
    ref: str

    @classmethod
    def unit(cls, unit_id: str) -> "TurnEntry":
        return cls(EntryKind.UNIT, unit_id)

    @classmethod
    def group(cls, group_id: str) -> "TurnEntry":
        return cls(EntryKind.GROUP, group_id)

    @classmethod
    def marker(cls, marker_id: str) -> "TurnEntry":
        return cls(EntryKind.MARKER, marker_id)

    @classmethod
    def label(cls, text: str) -> "TurnEntry":
        return cls(EntryKind.LABEL, text)

    @property
    def is_participant(self) -> bool:
        return self.kind in (EntryKind.UNIT, EntryKind.GROUP)

    @property
    def key(self) -> str:
        if self.kind is EntryKind.UNIT:
            return f"{UNIT_TOKEN_PREFIX}{self.ref}"
        if self.kind is EntryKind.GROUP:
            return f"{GROUP_TOKEN_PREFIX}{self.ref}"
        return f"{self.kind.value}:{self.ref}"


# Temp-turn stack tokens share the entry shape but live outside the rotation.
InterruptToken = TurnEntry
