"""
STYLEBOX - Shortcut Registry

Global keyboard accelerators, one 'styles/Apply <name>' entry per style.

The registry owns the style name attached to each label and hands it to
the bound callback on activation, so callers never keep closures around.
Views listen to the signals to create or drop the matching QShortcut.
"""

from typing import Callable, Dict, List, Optional

from PySide6.QtCore import QObject, Signal

STYLE_ACCEL_PREFIX = 'styles/Apply '


def style_accel_label(style_name: str) -> str:
    """Accelerator label for applying a style, e.g. 'styles/Apply sepia'."""
    return f"{STYLE_ACCEL_PREFIX}{style_name}"


class ShortcutRegistry(QObject):
    """Named accelerators with optional key sequences and callbacks."""

    shortcutRegistered = Signal(str)
    shortcutRemoved = Signal(str)

    def __init__(self):
        super().__init__()
        self._payloads: Dict[str, Optional[str]] = {}
        self._keys: Dict[str, str] = {}
        self._callbacks: Dict[str, Callable[[Optional[str]], None]] = {}

    def register(self, label: str, style_name: Optional[str] = None, key: str = ''):
        """Register an accelerator label, keeping style_name for activation."""
        self._payloads[label] = style_name
        if key:
            self._keys[label] = key
        self.shortcutRegistered.emit(label)

    def deregister(self, label: str):
        """Remove an accelerator and its callback. Unknown labels are ignored."""
        if label not in self._payloads:
            return
        del self._payloads[label]
        self._keys.pop(label, None)
        self._callbacks.pop(label, None)
        self.shortcutRemoved.emit(label)

    def bind(self, label: str, callback: Callable[[Optional[str]], None]):
        """Connect a callback to a registered label."""
        if label not in self._payloads:
            raise KeyError(f"Shortcut not registered: {label}")
        self._callbacks[label] = callback

    def activate(self, label: str) -> bool:
        """Run the callback bound to label. Returns False if nothing is bound."""
        callback = self._callbacks.get(label)
        if callback is None:
            return False
        callback(self._payloads.get(label))
        return True

    def is_registered(self, label: str) -> bool:
        return label in self._payloads

    def key_for(self, label: str) -> str:
        return self._keys.get(label, '')

    def labels(self) -> List[str]:
        return sorted(self._payloads)
