"""Boundary between wire payloads and the typed turn-order components.

Turn entries have been stored in several shapes over time (bare unit ids,
``{"id": ...}``, nested ``{"unit": {"id": ...}}`` and the tagged
``{"kind": ...}`` form). All of them are decided here, once; everything past
this module works with :class:`TurnEntry` only.
"""
from __future__ import annotations

from typing import Any, Collection, Iterable, Mapping

from turnkeeper.components.scheduler_state import SchedulerState
from turnkeeper.components.turn_entry import EntryKind, TurnEntry
from turnkeeper.components.turn_group import TurnGroup
from turnkeeper.constants import DEFAULT_ROUND, GROUP_TOKEN_PREFIX, UNIT_TOKEN_PREFIX
from turnkeeper.utils.turn_reorder import TurnOrderError

_REF_FIELDS = {
    "unit": "unitId",
    "group": "groupId",
    "marker": "markerId",
    "label": "text",
}


def _clean_id(value: Any) -> str | None:
    if not isinstance(value, str):
        return None
    value = value.strip()
    return value or None


def parse_entry(raw: Any) -> TurnEntry:
    """Decode one turn-order entry, raising TurnOrderError for unknown shapes."""

    if isinstance(raw, TurnEntry):
        return raw
    if isinstance(raw, str):
        unit_id = _clean_id(raw)
        if unit_id is None:
            raise TurnOrderError("Blank turn entry")
        return TurnEntry.unit(unit_id)
    if not isinstance(raw, Mapping):
        raise TurnOrderError(f"Unsupported turn entry {raw!r}")

    kind = raw.get("kind")
    if kind is not None:
        field = _REF_FIELDS.get(kind) if isinstance(kind, str) else None
        if field is None:
            raise TurnOrderError(f"Unknown turn entry kind '{kind}'")
        if kind == "label":
            text = raw.get(field)
            if not isinstance(text, str):
                raise TurnOrderError("Label entry without text")
            return TurnEntry.label(text)
        ref = _clean_id(raw.get(field))
        if ref is None and kind == "unit":
            ref = _clean_id(raw.get("id"))
        if ref is None:
            raise TurnOrderError(f"Turn entry of kind '{kind}' is missing '{field}'")
        return TurnEntry(EntryKind(kind), ref)

    for candidate in (raw.get("unitId"), raw.get("id")):
        unit_id = _clean_id(candidate)
        if unit_id is not None:
            return TurnEntry.unit(unit_id)
    nested = raw.get("unit")
    if isinstance(nested, Mapping):
        unit_id = _clean_id(nested.get("id"))
        if unit_id is not None:
            return TurnEntry.unit(unit_id)
    raise TurnOrderError(f"Unsupported turn entry {dict(raw)!r}")


def parse_entries(raws: Iterable[Any]) -> tuple[TurnEntry, ...]:
    return tuple(parse_entry(raw) for raw in raws)


def parse_group(raw: Any) -> TurnGroup:
    if isinstance(raw, TurnGroup):
        return raw
    if not isinstance(raw, Mapping):
        raise TurnOrderError(f"Unsupported turn group {raw!r}")
    group_id = _clean_id(raw.get("id"))
    if group_id is None:
        raise TurnOrderError("Turn group without id")
    name = raw.get("name")
    members = raw.get("unitIds") or ()
    if isinstance(members, str) or not isinstance(members, Iterable):
        raise TurnOrderError(f"Turn group '{group_id}' has malformed unitIds")
    return TurnGroup(
        group_id=group_id,
        name=name.strip() if isinstance(name, str) else "",
        member_unit_ids=tuple(unit_id for unit_id in (_clean_id(m) for m in members) if unit_id),
    )


def parse_groups(raws: Iterable[Any]) -> tuple[TurnGroup, ...]:
    return tuple(parse_group(raw) for raw in raws)


def parse_token(
    raw: Any,
    unit_ids: Collection[str] = (),
    group_ids: Collection[str] = (),
) -> TurnEntry | None:
    """Decode a temp-turn token such as ``"unit:u1"`` or ``"group:g1"``.

    A bare id is resolved against the known units first, then the groups.
    Blank or unresolvable tokens yield None.
    """

    if isinstance(raw, TurnEntry):
        return raw if raw.is_participant else None
    token = _clean_id(raw)
    if token is None:
        return None
    if token.startswith(UNIT_TOKEN_PREFIX):
        unit_id = _clean_id(token[len(UNIT_TOKEN_PREFIX):])
        return TurnEntry.unit(unit_id) if unit_id else None
    if token.startswith(GROUP_TOKEN_PREFIX):
        group_id = _clean_id(token[len(GROUP_TOKEN_PREFIX):])
        return TurnEntry.group(group_id) if group_id else None
    if token in unit_ids:
        return TurnEntry.unit(token)
    if token in group_ids:
        return TurnEntry.group(token)
    return None


def parse_disabled_flag(unit_id: str, value: Any) -> bool:
    if not isinstance(value, bool):
        raise TurnOrderError(f"turnDisabled of '{unit_id}' must be a boolean, got {value!r}")
    return value


def parse_disabled_changes(raw: Any) -> tuple[tuple[str, bool], ...]:
    """Decode ``turnDisabled`` flips.

    Accepts a ``{unit_id: bool}`` mapping, ``{"unitId", "turnDisabled"}``
    records or ``(unit_id, bool)`` pairs.
    """

    if not raw:
        return ()
    if isinstance(raw, Mapping):
        return tuple((str(unit_id), parse_disabled_flag(str(unit_id), flag)) for unit_id, flag in raw.items())
    changes: list[tuple[str, bool]] = []
    for item in raw:
        if isinstance(item, Mapping):
            unit_id = _clean_id(item.get("unitId"))
            if unit_id is None:
                raise TurnOrderError(f"Disabled change without unitId: {dict(item)!r}")
            changes.append((unit_id, parse_disabled_flag(unit_id, item.get("turnDisabled"))))
            continue
        try:
            unit_id, flag = item
        except (TypeError, ValueError) as exc:
            raise TurnOrderError(f"Unsupported disabled change {item!r}") from exc
        changes.append((str(unit_id), parse_disabled_flag(str(unit_id), flag)))
    return tuple(changes)


def token_to_str(token: TurnEntry) -> str:
    return token.key


def entry_to_dict(entry: TurnEntry) -> dict:
    return {"kind": entry.kind.value, _REF_FIELDS[entry.kind.value]: entry.ref}


def group_to_dict(group: TurnGroup) -> dict:
    return {
        "id": group.group_id,
        "name": group.name,
        "unitIds": list(group.member_unit_ids),
    }


def state_to_dict(state: SchedulerState) -> dict:
    return {
        "turnOrder": [entry_to_dict(entry) for entry in state.entries],
        "turnGroups": [group_to_dict(group) for group in state.groups],
        "turnIndex": state.turn_index,
        "round": state.round,
        "tempTurnStack": [token_to_str(token) for token in state.temp_stack],
    }


def state_from_dict(data: Mapping[str, Any], unit_ids: Collection[str] = ()) -> SchedulerState:
    """Build a SchedulerState from its JSON-compatible form.

    Temp-stack tokens keep their position even when they no longer resolve;
    an unprefixed id that matches nothing is kept as a unit token.
    """

    entries = parse_entries(data.get("turnOrder") or ())
    groups = parse_groups(data.get("turnGroups") or ())
    group_ids = {group.group_id for group in groups}
    stack: list[TurnEntry] = []
    for raw in data.get("tempTurnStack") or ():
        token = parse_token(raw, unit_ids, group_ids)
        if token is None:
            bare = _clean_id(raw)
            if bare is None:
                continue
            token = TurnEntry.unit(bare)
        stack.append(token)

    turn_index = data.get("turnIndex")
    if not isinstance(turn_index, int) or isinstance(turn_index, bool):
        turn_index = 0
    turn_index = turn_index % len(entries) if entries else 0
    round_value = data.get("round")
    if not isinstance(round_value, int) or isinstance(round_value, bool) or round_value < DEFAULT_ROUND:
        round_value = DEFAULT_ROUND
    return SchedulerState(
        entries=entries,
        groups=groups,
        turn_index=turn_index,
        round=round_value,
        temp_stack=tuple(stack),
    )
