"""Key and pointer handling for the timing plot."""

from __future__ import annotations

from typing import Callable

from .editor import OtoEditor

# Keys that set a timing field at the last pointer position
TIMING_KEYS: dict[str, str] = {
    "1": "offset",
    "2": "overlap",
    "3": "preutter",
    "4": "consonant",
    "5": "cutoff",
}

# Keys that only move the view or the selection
VIEW_KEYS: dict[str, str] = {
    "W": "zoom_in",
    "S": "zoom_out",
    "A": "pan_left",
    "D": "pan_right",
    "Q": "previous",
    "E": "next",
    "F": "fit",
}


class InputController:
    """Maps discrete key and pointer events onto an :class:`OtoEditor`.

    Pointer moves are remembered as a clamped ms value; the number keys
    apply the matching timing setter at that position.  View keys never
    touch the timing model.
    """

    def __init__(self, editor: OtoEditor):
        self._editor = editor
        self.last_pointer_ms: float = 0.0
        self._setters: dict[str, Callable[[float], None]] = {
            "offset": editor.set_offset,
            "overlap": editor.set_overlap,
            "preutter": editor.set_preutter,
            "consonant": editor.set_consonant,
            "cutoff": editor.set_cutoff,
        }
        self._view_actions: dict[str, Callable[[], None]] = {
            "zoom_in": lambda: editor.zoom(0.5),
            "zoom_out": lambda: editor.zoom(2.0),
            "pan_left": lambda: editor.pan(-0.5),
            "pan_right": lambda: editor.pan(0.5),
            "previous": lambda: editor.step_selection(-1),
            "next": lambda: editor.step_selection(1),
            "fit": editor.fit_view,
        }

    def on_pointer_moved(self, coord: float) -> float:
        """Record the pointer's x coordinate.  Returns the clamped ms value."""
        self.last_pointer_ms = self._editor.pointer_to_ms(coord)
        return self.last_pointer_ms

    def handle_key(self, key: str) -> bool:
        """Apply the action bound to *key*.  Returns False for unbound keys."""
        key = key.upper()
        field = TIMING_KEYS.get(key)
        if field is not None:
            self._setters[field](self.last_pointer_ms)
            return True
        action = VIEW_KEYS.get(key)
        if action is not None:
            self._view_actions[action]()
            return True
        return False
