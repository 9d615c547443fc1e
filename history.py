"""
STYLEBOX - Image History

Read and write access to an image's non-destructive edit history.
"""

from typing import Iterable, List, Optional

from models import ITEM_COLUMNS, HistoryEntry, StyleItem
from state import DevelopState
from storage import Storage, placeholders

ITEM_SELECT = ", ".join(ITEM_COLUMNS)


class HistoryStore:
    """History rows of the library plus the hooks into the open editor."""

    def __init__(self, storage: Storage, develop: Optional[DevelopState] = None):
        self.storage = storage
        self.develop = develop

    def history_entries(self, imgid: int) -> List[HistoryEntry]:
        """Get the history of an image in stack order (lowest num first)."""
        with self.storage.transaction() as conn:
            cursor = conn.execute(
                f"SELECT {ITEM_SELECT} FROM history WHERE imgid = ? ORDER BY num",
                (imgid,)
            )
            rows = cursor.fetchall()
        entries = []
        for row in rows:
            entry = HistoryEntry.from_row(row)
            entry.imgid = imgid
            entries.append(entry)
        return entries

    def count(self, imgid: int) -> int:
        with self.storage.transaction() as conn:
            return conn.execute(
                "SELECT COUNT(num) FROM history WHERE imgid = ?",
                (imgid,)
            ).fetchone()[0]

    def next_num(self, imgid: int) -> int:
        """First free num on top of an image's history (0 when empty)."""
        with self.storage.transaction() as conn:
            return conn.execute(
                "SELECT COALESCE(MAX(num) + 1, 0) FROM history WHERE imgid = ?",
                (imgid,)
            ).fetchone()[0]

    def append_history(self, imgid: int, entries: Iterable[StyleItem]) -> List[int]:
        """Append entries on top of an image's history.

        Entries are renumbered to start above the highest existing num, keeping their
        relative order. Returns the assigned nums.
        """
        assigned = []
        with self.storage.transaction() as conn:
            offset = self.next_num(imgid)
            for index, entry in enumerate(sorted(entries, key=lambda e: e.num)):
                num = offset + index
                conn.execute(
                    f"INSERT INTO history (imgid, {ITEM_SELECT}) VALUES (?, {placeholders(len(ITEM_COLUMNS))})",
                    (
                        imgid,
                        num,
                        entry.module,
                        entry.operation,
                        bytes(entry.op_params or b''),
                        1 if entry.enabled else 0,
                        bytes(entry.blendop_params or b''),
                        entry.blendop_version,
                        entry.multi_priority,
                        entry.multi_name,
                    )
                )
                assigned.append(num)
        return assigned

    def clear_history(self, imgid: int) -> int:
        """Delete the whole history of an image. Returns the number of removed entries."""
        with self.storage.transaction() as conn:
            return conn.execute("DELETE FROM history WHERE imgid = ?", (imgid,)).rowcount

    def copy_history(self, source_imgid: int, target_imgid: int) -> List[int]:
        """Append the history of one image onto another."""
        return self.append_history(target_imgid, self.history_entries(source_imgid))

    def is_currently_open(self, imgid: int) -> bool:
        return self.develop is not None and self.develop.is_current_image(imgid)

    def reload_history(self, imgid: int):
        """Make the editor pick up library changes for the open image."""
        if not self.is_currently_open(imgid):
            return
        self.develop.reload_history()
        self.develop.reapply_module_group()
