from blinker import Signal
from typing import Dict

class EventBus:
    """Simple event bus leveraging blinker Signal objects."""
    def __init__(self):
        self._signals: Dict[str, Signal] = {}

    def subscribe(self, name: str, fn):
        sig = self._signals.setdefault(name, Signal(name))
        # Use weak=False to retain strong reference to bound methods so systems not kept in a variable still receive events.
        sig.connect(fn, weak=False)

    def unsubscribe(self, name: str, fn):
        sig = self._signals.get(name)
        if sig:
            sig.disconnect(fn)

    def emit(self, name: str, **payload):
        sig = self._signals.get(name)
        if sig:
            sig.send(self, **payload)


# ============================================================================
# ROSTER
# ============================================================================
EVENT_UNIT_CREATED = "unit_created"        # payload: unit_id=str
EVENT_UNIT_DELETED = "unit_deleted"        # payload: unit_id=str
EVENT_GROUP_CREATED = "group_created"      # payload: group=TurnGroup|dict
EVENT_GROUP_DELETED = "group_deleted"      # payload: group_id=str


# ============================================================================
# TURN REQUESTS (administrative operations from the action log)
# ============================================================================
EVENT_SET_TURN_ORDER_REQUEST = "set_turn_order_request"        # payload: turn_order=list, turn_groups=list, disabled_changes=list[(unit_id, bool)]
EVENT_ADVANCE_TURN_REQUEST = "advance_turn_request"            # payload: None
EVENT_GRANT_TEMP_TURN_REQUEST = "grant_temp_turn_request"      # payload: target=TurnEntry|str
EVENT_SET_TURN_DISABLED_REQUEST = "set_turn_disabled_request"  # payload: unit_id=str, turn_disabled=bool


# ============================================================================
# TURN SYSTEM
# ============================================================================
EVENT_TURN_ADVANCED = "turn_advanced"                  # payload: previous_entry=TurnEntry|None, new_entry=TurnEntry|None, round=int, round_incremented=bool
EVENT_ROUND_STARTED = "round_started"                  # payload: round=int
EVENT_NO_ELIGIBLE_TURN = "no_eligible_turn"            # payload: None
EVENT_MARKER_PASSED = "marker_passed"                  # payload: marker_id=str, round=int
EVENT_TEMP_TURN_GRANTED = "temp_turn_granted"          # payload: token=TurnEntry, depth=int, resume_entry=TurnEntry|None
EVENT_TEMP_TURN_ENDED = "temp_turn_ended"              # payload: token=TurnEntry, depth=int, current_entry=TurnEntry|None
EVENT_TURN_ORDER_CHANGED = "turn_order_changed"        # payload: entries=tuple[TurnEntry], groups=tuple[TurnGroup], turn_index=int, stripped=tuple[str]
EVENT_TURN_ORDER_REJECTED = "turn_order_rejected"      # payload: reason=str
EVENT_TURN_DISABLED_CHANGED = "turn_disabled_changed"  # payload: unit_id=str, turn_disabled=bool
