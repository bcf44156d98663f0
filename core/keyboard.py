"""German QWERTZ keyboard layout and finger assignment."""

from .utils import fold_case

KEYBOARD_LAYOUT = [
    ['1', '2', '3', '4', '5', '6', '7', '8', '9', '0', 'ß'],
    ['Q', 'W', 'E', 'R', 'T', 'Z', 'U', 'I', 'O', 'P', 'Ü'],
    ['A', 'S', 'D', 'F', 'G', 'H', 'J', 'K', 'L', 'Ö', 'Ä'],
    ['Y', 'X', 'C', 'V', 'B', 'N', 'M', ',', '.'],
    [' '],  # Space bar
]

# Where each letter row splits into the left and right hand half
SPLIT_POINTS = [6, 5, 5, 5]
ROW_OFFSETS = [0, -30, -5, 20]

HOME_ROW_KEYS = ['A', 'S', 'D', 'F', 'G', 'H', 'J', 'K', 'L', 'Ö', 'Ä']

FINGER_COLORS = {
    'kleiner': '#FF6B6B',   # Pinky
    'ring': '#4ECDC4',
    'mittel': '#FFD166',    # Middle finger
    'zeige': '#1B98E0',     # Index finger
}

FINGER_MAP = {
    '1': 'kleiner', '2': 'ring', '3': 'mittel', '4': 'zeige',
    '5': 'zeige', '6': 'zeige', '7': 'zeige', '8': 'mittel', '9': 'ring',
    '0': 'kleiner', 'ß': 'kleiner',
    'Q': 'kleiner', 'W': 'ring', 'E': 'mittel', 'R': 'zeige', 'T': 'zeige',
    'Z': 'zeige', 'U': 'zeige', 'I': 'mittel', 'O': 'ring', 'P': 'kleiner',
    'Ü': 'kleiner',
    'A': 'kleiner', 'S': 'ring', 'D': 'mittel', 'F': 'zeige', 'G': 'zeige',
    'H': 'zeige', 'J': 'zeige', 'K': 'mittel', 'L': 'ring', 'Ö': 'kleiner',
    'Ä': 'kleiner',
    'Y': 'kleiner', 'X': 'ring', 'C': 'mittel', 'V': 'zeige',
    'B': 'zeige', 'N': 'zeige', 'M': 'zeige',
    ',': 'kleiner', '.': 'kleiner',
    ' ': 'zeige',
}

DEFAULT_FINGER = 'kleiner'


def finger_for(char: str) -> str:
    """Get the finger that types a character."""
    if not char:
        return DEFAULT_FINGER
    return FINGER_MAP.get(char) or FINGER_MAP.get(fold_case(char), DEFAULT_FINGER)


def is_key_enabled(key: str, enabled_keys: list | None, case_sensitive: bool = False) -> bool:
    """Check a typed key against a level's key subset. No subset means all keys."""
    if enabled_keys is None:
        return True
    if case_sensitive:
        return key in enabled_keys
    return fold_case(key) in {fold_case(k) for k in enabled_keys}


def keyboard_rows(enabled_keys: list | None = None) -> list[dict]:
    """Layout rows annotated for drawing: halves, offsets, finger, enabled state."""
    allowed = None
    if enabled_keys is not None:
        allowed = {fold_case(k) for k in enabled_keys}

    def describe(key):
        finger = finger_for(key)
        return {
            'key': key,
            'label': 'Leertaste' if key == ' ' else key,
            'finger': finger,
            'color': FINGER_COLORS[finger],
            'home': key in HOME_ROW_KEYS,
            'enabled': allowed is None or key in allowed,
        }

    rows = []
    for index, row in enumerate(KEYBOARD_LAYOUT):
        if row[0] == ' ':
            rows.append({'left': [describe(' ')], 'right': [], 'offset': 0})
            continue
        split = SPLIT_POINTS[index]
        rows.append({
            'left': [describe(k) for k in row[:split]],
            'right': [describe(k) for k in row[split:]],
            'offset': ROW_OFFSETS[index] if index < len(ROW_OFFSETS) else 0,
        })
    return rows
