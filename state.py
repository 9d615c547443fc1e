"""
STYLEBOX - Shared State

Editor and notification state shared between the style engine and views.
"""

from typing import List, Optional

from PySide6.QtCore import QObject, Signal


class DevelopState(QObject):
    """State of the editing view: which image is open and how modules are grouped.

    The style engine only reads the open image and asks for reloads and
    redraws; views connect to the signals to refresh themselves.
    """

    # Signals for state changes
    imageOpened = Signal(int)  # image id, -1 when closed
    historyReloaded = Signal(int)  # image id
    moduleGroupChanged = Signal(str)  # group key
    redrawRequested = Signal()

    # Module groups shown in the editor: key -> display name
    MODULE_GROUPS = {
        'active': 'Active modules',
        'basic': 'Basic',
        'tone': 'Tone',
        'color': 'Color',
        'correct': 'Correction',
        'effect': 'Effects',
    }

    def __init__(self, storage=None):
        super().__init__()
        self._storage = storage
        self._image_id: Optional[int] = None
        group = storage.get_preference('module_group', 'active') if storage else 'active'
        self._module_group = group if group in self.MODULE_GROUPS else 'active'

    @property
    def image_id(self) -> Optional[int]:
        return self._image_id

    @image_id.setter
    def image_id(self, value: Optional[int]):
        if self._image_id != value:
            self._image_id = value
            self.imageOpened.emit(-1 if value is None else value)

    @property
    def module_group(self) -> str:
        return self._module_group

    @module_group.setter
    def module_group(self, value: str):
        if value in self.MODULE_GROUPS and self._module_group != value:
            self._module_group = value
            if self._storage:
                self._storage.set_preference('module_group', value)
            self.moduleGroupChanged.emit(value)

    def is_current_image(self, imgid: int) -> bool:
        """Check if imgid is the image open for editing."""
        return self._image_id is not None and self._image_id == imgid

    def reload_history(self):
        """Ask the editor to re-read the open image's history from the library."""
        if self._image_id is not None:
            self.historyReloaded.emit(self._image_id)

    def reapply_module_group(self):
        """Re-select the current module group so new history items show up."""
        self.moduleGroupChanged.emit(self._module_group)

    def request_redraw(self):
        """Request a redraw of the center view."""
        self.redrawRequested.emit()


class ControlLog(QObject):
    """User-facing message log (toast messages in the GUI)."""

    messageLogged = Signal(str)

    def __init__(self):
        super().__init__()
        self._messages: List[str] = []

    def log(self, message: str):
        self._messages.append(message)
        self.messageLogged.emit(message)

    @property
    def messages(self) -> List[str]:
        return list(self._messages)

    @property
    def last_message(self) -> Optional[str]:
        return self._messages[-1] if self._messages else None
