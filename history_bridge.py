"""
STYLEBOX - History Bridge

Moves item rows between image histories and styles:
- history -> style_items when a style is created from an image or a style
- style_items -> history when a style is applied to an image
"""

from enum import Enum
from typing import Iterable, Optional, Union

from collaborators import HistoryProvider, TagProvider, ThumbnailProvider, ViewProvider
from errors import StyleNotFoundError
from storage import Storage
from style_store import HISTORY, STYLE_ITEMS, StyleStore, copy_item_rows
from tags import style_tag


class ApplyMode(Enum):
    """How a style's items merge into an image history."""
    APPEND = "append"    # On top of the existing stack
    REPLACE = "replace"  # Existing stack is discarded first


class HistoryBridge:
    """Copies style items to and from image histories."""

    def __init__(
        self,
        storage: Storage,
        store: StyleStore,
        history: HistoryProvider,
        tags: TagProvider,
        thumbnails: ThumbnailProvider,
        view: ViewProvider,
    ):
        self.storage = storage
        self.store = store
        self.history = history
        self.tags = tags
        self.thumbnails = thumbnails
        self.view = view

    def from_image(self, style_id: int, imgid: int, filter: Optional[Iterable[int]] = None) -> int:
        """Copy an image's history entries (only nums in filter, if given) into a style."""
        with self.storage.transaction() as conn:
            return copy_item_rows(conn, HISTORY, imgid, STYLE_ITEMS, style_id, filter)

    def from_style(self, new_style_id: int, source_style_id: int,
                   filter: Optional[Iterable[int]] = None) -> int:
        """Copy another style's items (only nums in filter, if given) into a style."""
        return self.store.copy_items(new_style_id, source_style_id, filter)

    def apply(self, style_name: str, imgid: int,
              mode: Union[ApplyMode, str] = ApplyMode.APPEND) -> int:
        """Merge a style into an image's history.

        In APPEND mode every item lands at num + (highest history num + 1).
        Existing entries keep their nums and no num collides, even when an
        earlier remove left gaps in the history.
        REPLACE clears the history first and keeps the style's own nums.

        After the copy the image is tagged, the editor reloads if the image is
        open, the thumbnail is dropped and a redraw is requested.

        Returns the number of history entries added.
        """
        mode = ApplyMode(mode)
        style_id = self.store.get_id(style_name)
        if style_id is None:
            raise StyleNotFoundError(style_name)

        with self.storage.transaction() as conn:
            if mode is ApplyMode.REPLACE:
                conn.execute("DELETE FROM history WHERE imgid = ?", (imgid,))
                offset = 0
            else:
                offset = conn.execute(
                    "SELECT COALESCE(MAX(num) + 1, 0) FROM history WHERE imgid = ?",
                    (imgid,)
                ).fetchone()[0]
            added = copy_item_rows(conn, STYLE_ITEMS, style_id, HISTORY, imgid, offset=offset)

        tag_id = self.tags.ensure_tag(style_tag(style_name))
        self.tags.attach(tag_id, imgid)

        if self.history.is_currently_open(imgid):
            self.history.reload_history(imgid)

        self.thumbnails.invalidate(imgid)
        self.view.request_redraw()
        return added

    def remove(self, style_name: str, imgid: int) -> int:
        """Remove a style's operations from an image's history.

        Matching is by operation name only: any history entry whose operation
        occurs in the style goes, including entries that did not come from
        the style. Returns the number of removed entries.
        """
        style_id = self.store.get_id(style_name)
        if style_id is None:
            raise StyleNotFoundError(style_name)

        with self.storage.transaction() as conn:
            removed = conn.execute("""
                DELETE FROM history
                WHERE imgid = ?
                  AND operation IN (SELECT operation FROM style_items WHERE styleid = ?)
            """, (imgid, style_id)).rowcount

        self.thumbnails.invalidate(imgid)
        self.view.request_redraw()
        return removed
