"""
STYLEBOX - Collaborator Interfaces

What the style engine needs from the rest of the application. The library
ships default implementations (history.HistoryStore, tags.TagRegistry,
thumbnails.ThumbnailCache, images.ImageLibrary, shortcuts.ShortcutRegistry,
state.ControlLog, state.DevelopState); a host application can pass its own.
"""

from typing import Callable, Iterable, List, Optional, Protocol

from models import HistoryEntry, StyleItem


class HistoryProvider(Protocol):
    def history_entries(self, imgid: int) -> List[HistoryEntry]: ...
    def append_history(self, imgid: int, entries: Iterable[StyleItem]) -> List[int]: ...
    def clear_history(self, imgid: int) -> int: ...
    def copy_history(self, source_imgid: int, target_imgid: int) -> List[int]: ...
    def is_currently_open(self, imgid: int) -> bool: ...
    def reload_history(self, imgid: int) -> None: ...


class TagProvider(Protocol):
    def ensure_tag(self, label: str) -> int: ...
    def attach(self, tag_id: int, imgid: int) -> None: ...


class ThumbnailProvider(Protocol):
    def invalidate(self, imgid: int) -> None: ...


class ViewProvider(Protocol):
    def request_redraw(self) -> None: ...


class ImageProvider(Protocol):
    def duplicate(self, imgid: int) -> int: ...
    def selected_ids(self) -> List[int]: ...
    def remove(self, imgid: int) -> bool: ...


class ShortcutProvider(Protocol):
    def register(self, label: str, style_name: Optional[str] = None, key: str = '') -> None: ...
    def deregister(self, label: str) -> None: ...
    def bind(self, label: str, callback: Callable[[Optional[str]], None]) -> None: ...


class Notifier(Protocol):
    def log(self, message: str) -> None: ...
