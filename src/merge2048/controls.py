"""
Input mapping: keyboard keys and swipe displacements to move directions.
"""

from typing import Optional

# Minimum displacement (px) for a touch gesture to count as a swipe
SWIPE_THRESHOLD = 30

KEY_BINDINGS = {
    # Browser-style key names
    'ArrowUp': 'up',
    'ArrowRight': 'right',
    'ArrowDown': 'down',
    'ArrowLeft': 'left',
    # ANSI escape sequences emitted by terminals
    '\x1b[A': 'up',
    '\x1b[C': 'right',
    '\x1b[B': 'down',
    '\x1b[D': 'left',
    # WASD
    'w': 'up',
    'd': 'right',
    's': 'down',
    'a': 'left',
}


def direction_for_key(key: str) -> Optional[str]:
    """Return the direction bound to `key`, or None. Letter keys are case-insensitive."""
    if key in KEY_BINDINGS:
        return KEY_BINDINGS[key]
    if len(key) == 1:
        return KEY_BINDINGS.get(key.lower())
    return None


def classify_swipe(dx: float, dy: float, threshold: float = SWIPE_THRESHOLD) -> Optional[str]:
    """
    Classify a gesture by its total displacement.
    The dominant axis decides the direction; equal magnitudes count as vertical.
    """
    if max(abs(dx), abs(dy)) < threshold:
        return None
    if abs(dx) > abs(dy):
        return 'right' if dx > 0 else 'left'
    return 'down' if dy > 0 else 'up'
