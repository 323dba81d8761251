# Round counter value for a freshly created encounter.
DEFAULT_ROUND = 1

# Temp-turn stack tokens are serialized as "<prefix><id>".
UNIT_TOKEN_PREFIX = "unit:"
GROUP_TOKEN_PREFIX = "group:"

# Turn bar window. Keep it odd so the current slot sits in the middle
# once the rotation is longer than the window.
TURN_BAR_MAX_VISIBLE = 11

# Fallback labels shown when an entry has no usable name.
UNKNOWN_UNIT_LABEL = "unknown"
UNKNOWN_GROUP_LABEL = "group"
