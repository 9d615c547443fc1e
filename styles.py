"""
STYLEBOX - Style Manager

Public entry point for everything styles: create, update, delete, list,
apply, remove, import and export.

Failures are reported as a single message to the user log and the method
returns a falsy value; nothing is raised to the caller. Every change to a
style's stored shape is followed by a backup file in the styles directory.
"""

from pathlib import Path
from typing import Callable, Iterable, List, Optional, Tuple

from collaborators import HistoryProvider, ImageProvider, Notifier, ShortcutProvider, TagProvider, ThumbnailProvider
from errors import StyleError, StyleExistsError, StyleNotFoundError
from history import HistoryStore
from history_bridge import ApplyMode, HistoryBridge
from images import ImageLibrary
from models import Style, StyleItem
from shortcuts import ShortcutRegistry, style_accel_label
from state import ControlLog, DevelopState
from storage import Storage
from style_file import StyleFileCodec
from style_store import StyleStore
from tags import TagRegistry
from thumbnails import ThumbnailCache

NO_SELECTION_MESSAGE = "no image selected!"


class StyleManager:
    """Coordinates the style store, the history bridge and style files."""

    def __init__(
        self,
        storage: Storage,
        develop: Optional[DevelopState] = None,
        history: Optional[HistoryProvider] = None,
        tags: Optional[TagProvider] = None,
        thumbnails: Optional[ThumbnailProvider] = None,
        images: Optional[ImageProvider] = None,
        shortcuts: Optional[ShortcutProvider] = None,
        log: Optional[Notifier] = None,
        styles_dir: Optional[Path] = None,
    ):
        """
        Initialize the manager. Collaborators left out get the library defaults.

        Args:
            storage: Library database shared by all components
            develop: Editor state (open image, module groups, redraws)
            history: Image history access
            tags: Tag registry used to mark styled images
            thumbnails: Thumbnail cache invalidated after history changes
            images: Image library (duplicates and selection)
            shortcuts: Global accelerator registry
            log: User message log
            styles_dir: Backup directory, defaults to <config dir>/styles
        """
        self.storage = storage
        self.develop = develop or DevelopState(storage)
        self.history = history or HistoryStore(storage, self.develop)
        self.tags = tags or TagRegistry(storage)
        self.thumbnails = thumbnails or ThumbnailCache(storage)
        self.images = images or ImageLibrary(storage)
        self.shortcuts = shortcuts or ShortcutRegistry()
        self.log = log or ControlLog()
        self.styles_dir = Path(styles_dir) if styles_dir else storage.styles_dir

        self.store = StyleStore(storage)
        self.bridge = HistoryBridge(storage, self.store, self.history, self.tags,
                                    self.thumbnails, self.develop)
        self.files = StyleFileCodec(self.store)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def exists(self, name: str) -> bool:
        return self.store.exists(name)

    def list(self, filter: str = '') -> List[Style]:
        return self.store.list(filter)

    def list_items(self, name: str, include_params: bool = True) -> List[StyleItem]:
        return self.store.list_items(name, include_params)

    def get_description(self, name: str) -> Optional[str]:
        return self.store.get_description(name)

    def item_list_as_string(self, name: str) -> Optional[str]:
        return self.store.item_list_as_string(name)

    # ------------------------------------------------------------------
    # Creating and changing styles
    # ------------------------------------------------------------------

    def create_from_image(self, name: str, description: str, imgid: int,
                          filter: Optional[Iterable[int]] = None) -> bool:
        """Create a style from an image's history (only entries whose num is in filter, if given)."""
        try:
            with self.storage.transaction():
                style_id = self.store.create_header(name, description)
                self.bridge.from_image(style_id, imgid, filter)
        except StyleError as e:
            self._report(e)
            return False

        self._backup(name)
        self._register_shortcut(name)
        self.log.log(f"style named '{name}' successfully created")
        return True

    def create_from_style(self, name: str, newname: str, description: str,
                          filter: Optional[Iterable[int]] = None) -> bool:
        """Create a style as a copy of another (only items whose num is in filter, if given)."""
        try:
            with self.storage.transaction():
                source_id = self.store.get_id(name)
                if source_id is None:
                    raise StyleNotFoundError(name)
                style_id = self.store.create_header(newname, description)
                self.bridge.from_style(style_id, source_id, filter)
        except StyleError as e:
            self._report(e)
            return False

        self._backup(newname)
        self._register_shortcut(newname)
        self.log.log(f"style named '{newname}' successfully created")
        return True

    def create_from_selection(
        self,
        name_for_image: Callable[[int], Optional[Tuple[str, str]]],
    ) -> List[str]:
        """Create one style per selected image.

        name_for_image is asked for a (name, description) pair for each image,
        typically by showing the style dialog; None skips the image.
        Returns the names of the created styles.
        """
        selected = self.images.selected_ids()
        if not selected:
            self.log.log(NO_SELECTION_MESSAGE)
            return []

        created = []
        for imgid in selected:
            answer = name_for_image(imgid)
            if not answer:
                continue
            name, description = answer
            if self.create_from_image(name, description, imgid):
                created.append(name)
        return created

    def update(self, name: str, newname: Optional[str] = None, description: Optional[str] = None,
               filter: Optional[Iterable[int]] = None) -> bool:
        """Rename/redescribe a style and prune it to the items whose num is in filter.

        A None filter keeps every item. On rename the apply accelerator
        moves to the new name.
        """
        newname = newname or name
        try:
            with self.storage.transaction():
                style_id = self.store.get_id(name)
                if style_id is None:
                    raise StyleNotFoundError(name)
                if newname != name and self.store.exists(newname):
                    raise StyleExistsError(newname)

                old_description = self.store.get_description(name) or ''
                if description is None:
                    description = old_description
                if newname != name or description != old_description:
                    self.store.update_header(style_id, newname, description)

                self.store.replace_items(style_id, filter)
        except StyleError as e:
            self._report(e)
            return False

        self._backup(newname)

        if newname != name:
            self.shortcuts.deregister(style_accel_label(name))
            self._register_shortcut(newname)
        return True

    def delete(self, name: str) -> bool:
        """Delete a style and its items, and drop its accelerator."""
        if not self.store.delete(name):
            self._report(StyleNotFoundError(name))
            return False
        self.shortcuts.deregister(style_accel_label(name))
        return True

    # ------------------------------------------------------------------
    # Applying styles to images
    # ------------------------------------------------------------------

    def apply_to_image(self, name: str, imgid: int, duplicate: Optional[bool] = None,
                       mode: Optional[ApplyMode] = None) -> Optional[int]:
        """Apply a style to one image.

        duplicate and mode default to the stored preferences. With duplicate
        the style lands on a new version of the image instead.

        Returns the id of the image that received the style, None on failure.
        """
        if duplicate is None:
            duplicate = self.storage.get_style_duplicate_on_apply()
        if mode is None:
            mode = ApplyMode(self.storage.get_style_apply_mode())

        if not self.store.exists(name):
            self._report(StyleNotFoundError(name))
            return None

        try:
            if duplicate:
                imgid = self.images.duplicate(imgid)
            self.bridge.apply(name, imgid, mode)
        except StyleError as e:
            self._report(e)
            return None
        return imgid

    def apply_to_selection(self, name: str, duplicate: Optional[bool] = None,
                           mode: Optional[ApplyMode] = None) -> List[int]:
        """Apply a style to every selected image. Returns the ids that received it."""
        selected = self.images.selected_ids()
        if not selected:
            self.log.log(NO_SELECTION_MESSAGE)
            return []

        applied = []
        for imgid in selected:
            target = self.apply_to_image(name, imgid, duplicate, mode)
            if target is not None:
                applied.append(target)
        return applied

    def remove_from_image(self, name: str, imgid: int) -> bool:
        """Remove a style's operations from an image (matched by operation name)."""
        try:
            self.bridge.remove(name, imgid)
        except StyleError as e:
            self._report(e)
            return False
        return True

    def preview_pair(self, name: str, imgid: int) -> Optional[Tuple[int, int]]:
        """Build 'before' and 'after' duplicates of an image for a style preview.

        Both duplicates start from the image's history; the style is removed
        from the first and applied to the second. The duplicates belong to
        the caller, who drops them with discard_preview() when done.
        """
        if not self.store.exists(name):
            self._report(StyleNotFoundError(name))
            return None

        try:
            before = self.images.duplicate(imgid)
            self.history.copy_history(imgid, before)
            self.bridge.remove(name, before)

            after = self.images.duplicate(imgid)
            self.history.copy_history(imgid, after)
            self.bridge.apply(name, after, ApplyMode.APPEND)
        except StyleError as e:
            self._report(e)
            return None
        return before, after

    def discard_preview(self, pair: Tuple[int, int]):
        """Remove the duplicates created by preview_pair()."""
        for imgid in pair:
            self.images.remove(imgid)

    # ------------------------------------------------------------------
    # Style files
    # ------------------------------------------------------------------

    def export_to_file(self, name: str, directory, overwrite: bool = False) -> Optional[Path]:
        """Export a style to <directory>/<name>.dtstyle."""
        try:
            path = self.files.save_to_file(name, directory, overwrite)
        except StyleError as e:
            self._report(e)
            return None
        self.log.log(f"style {name} was successfully saved")
        return path

    def import_from_file(self, path, name: Optional[str] = None) -> Optional[str]:
        """Import a style file, optionally under another name."""
        try:
            imported = self.files.import_from_file(path, name)
        except StyleError as e:
            self._report(e)
            return None

        self._backup(imported)
        self._register_shortcut(imported)
        self.log.log(f"style {imported} was successfully imported")
        return imported

    # ------------------------------------------------------------------
    # Accelerators
    # ------------------------------------------------------------------

    def register_shortcuts(self):
        """Register an apply accelerator for every stored style (start-up)."""
        for style in self.store.list(''):
            self._register_shortcut(style.name)

    def _register_shortcut(self, name: str):
        label = style_accel_label(name)
        self.shortcuts.register(label, name)
        self.shortcuts.bind(label, self._apply_from_shortcut)

    def _apply_from_shortcut(self, name: Optional[str]):
        if name:
            self.apply_to_selection(name, duplicate=False)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _backup(self, name: str):
        """Write the style's backup file, replacing any older one."""
        try:
            self.styles_dir.mkdir(mode=0o755, parents=True, exist_ok=True)
        except OSError as e:
            self.log.log(f"failed to create styles directory {self.styles_dir}: {e}")
            return
        try:
            self.files.save_to_file(name, self.styles_dir, overwrite=True)
        except StyleError as e:
            self._report(e)

    def _report(self, error: StyleError):
        self.log.log(str(error))
