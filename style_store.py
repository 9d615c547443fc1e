"""
STYLEBOX - Style Store

Relational persistence of style headers and their ordered items.
"""

from typing import Iterable, List, Optional

import blob_codec
from errors import StyleExistsError
from models import ITEM_COLUMNS, Style, StyleItem
from modules import item_label
from storage import Storage, batched, placeholders

ITEM_SELECT = ", ".join(ITEM_COLUMNS)

# (table, owner column) pairs that hold item rows
HISTORY = ('history', 'imgid')
STYLE_ITEMS = ('style_items', 'styleid')


def copy_item_rows(conn, source, source_id: int, target, target_id: int,
                   nums: Optional[Iterable[int]] = None, offset: int = 0) -> int:
    """Copy item rows between the history and style_items tables.

    Rows are copied verbatim (blobs stay binary) with num shifted by offset.
    When nums is given only rows whose num is in it are copied; the values
    are bound in batches so filters of any size are safe.

    Returns the number of rows copied.
    """
    source_table, source_key = source
    target_table, target_key = target
    insert = (
        f"INSERT INTO {target_table} ({target_key}, {ITEM_SELECT}) "
        f"SELECT ?, num + ?, {', '.join(ITEM_COLUMNS[1:])} "
        f"FROM {source_table} WHERE {source_key} = ?"
    )
    if nums is None:
        return conn.execute(insert + " ORDER BY num", (target_id, offset, source_id)).rowcount

    copied = 0
    for chunk in batched(sorted(set(nums))):
        query = insert + f" AND num IN ({placeholders(len(chunk))}) ORDER BY num"
        copied += conn.execute(query, (target_id, offset, source_id, *chunk)).rowcount
    return copied


class StyleStore:
    """CRUD over the styles and style_items tables."""

    def __init__(self, storage: Storage):
        self.storage = storage

    def create_header(self, name: str, description: str = '') -> int:
        """Insert a new style header and return its id.

        Raises StyleExistsError if a style with that name already exists;
        the existing row is left untouched.
        """
        with self.storage.transaction() as conn:
            if self.get_id(name) is not None:
                raise StyleExistsError(name)
            cursor = conn.execute(
                "INSERT INTO styles (name, description) VALUES (?, ?)",
                (name, description or '')
            )
            return cursor.lastrowid

    def update_header(self, style_id: int, name: str, description: str):
        """Rename and/or redescribe a style."""
        with self.storage.transaction() as conn:
            conn.execute(
                "UPDATE styles SET name = ?, description = ? WHERE id = ?",
                (name, description or '', style_id)
            )

    def exists(self, name: str) -> bool:
        return self.get_id(name) is not None

    def get_id(self, name: str) -> Optional[int]:
        """Get a style id by name. Legacy duplicates resolve to the newest row."""
        with self.storage.transaction() as conn:
            row = conn.execute(
                "SELECT id FROM styles WHERE name = ? ORDER BY id DESC LIMIT 1",
                (name,)
            ).fetchone()
            return row[0] if row else None

    def get_description(self, name: str) -> Optional[str]:
        style_id = self.get_id(name)
        if style_id is None:
            return None
        with self.storage.transaction() as conn:
            row = conn.execute(
                "SELECT description FROM styles WHERE id = ?",
                (style_id,)
            ).fetchone()
            return row[0] if row else None

    def list(self, filter: str = '') -> List[Style]:
        """List styles whose name or description contains filter, by name."""
        escaped = (filter or '').replace('\\', '\\\\').replace('%', '\\%').replace('_', '\\_')
        pattern = f"%{escaped}%"
        with self.storage.transaction() as conn:
            cursor = conn.execute("""
                SELECT name, description FROM styles
                WHERE name LIKE ?1 ESCAPE '\\' OR description LIKE ?1 ESCAPE '\\'
                ORDER BY name
            """, (pattern,))
            return [Style(name=row[0], description=row[1] or '') for row in cursor.fetchall()]

    def list_items(self, name: str, include_params: bool = True) -> List[StyleItem]:
        """List a style's items, highest num first.

        Without parameters the operation is replaced by a display label such
        as 'exposure (on)' and both blobs are None. Those items are for
        display only and are refused by save_item().
        """
        style_id = self.get_id(name)
        if style_id is None:
            return []
        with self.storage.transaction() as conn:
            cursor = conn.execute(
                f"SELECT {ITEM_SELECT} FROM style_items WHERE styleid = ? ORDER BY num DESC",
                (style_id,)
            )
            rows = cursor.fetchall()

        items = [StyleItem.from_row(row) for row in rows]
        if not include_params:
            for item in items:
                item.operation = item_label(item.operation, item.enabled)
                item.op_params = None
                item.blendop_params = None
        return items

    def item_list_as_string(self, name: str) -> Optional[str]:
        """Newline-separated item labels, or None if the style has no items."""
        items = self.list_items(name, include_params=False)
        if not items:
            return None
        return "\n".join(item.operation for item in items)

    def count_items(self, name: str) -> int:
        style_id = self.get_id(name)
        if style_id is None:
            return 0
        with self.storage.transaction() as conn:
            return conn.execute(
                "SELECT COUNT(*) FROM style_items WHERE styleid = ?",
                (style_id,)
            ).fetchone()[0]

    def item_nums(self, style_id: int) -> List[int]:
        with self.storage.transaction() as conn:
            cursor = conn.execute(
                "SELECT num FROM style_items WHERE styleid = ? ORDER BY num",
                (style_id,)
            )
            return [row[0] for row in cursor.fetchall()]

    def replace_items(self, style_id: int, keep_filter: Optional[Iterable[int]]) -> int:
        """Prune a style down to the items whose num is in keep_filter.

        None keeps every item; an empty filter removes them all.
        Returns the number of deleted rows.
        """
        if keep_filter is None:
            return 0
        keep = set(keep_filter)
        deleted = 0
        with self.storage.transaction() as conn:
            doomed = [num for num in self.item_nums(style_id) if num not in keep]
            for chunk in batched(doomed):
                deleted += conn.execute(
                    f"DELETE FROM style_items WHERE styleid = ? AND num IN ({placeholders(len(chunk))})",
                    (style_id, *chunk)
                ).rowcount
        return deleted

    def copy_items(self, target_id: int, source_id: int,
                   filter: Optional[Iterable[int]] = None) -> int:
        """Copy items of another style, only those whose num is in filter if given."""
        with self.storage.transaction() as conn:
            return copy_item_rows(conn, STYLE_ITEMS, source_id, STYLE_ITEMS, target_id, filter)

    def delete(self, name: str) -> bool:
        """Delete a style and its items. Returns False if it did not exist."""
        with self.storage.transaction() as conn:
            style_id = self.get_id(name)
            if style_id is None:
                return False
            conn.execute("DELETE FROM style_items WHERE styleid = ?", (style_id,))
            conn.execute("DELETE FROM styles WHERE id = ?", (style_id,))
            return True

    def save_item(self, style_id: int, item: StyleItem):
        """Insert one item row.

        Blob fields given as hex text (as read from a style file) are
        decoded back to binary; bytes are stored unchanged.
        """
        if item.is_display_only:
            raise ValueError(f"Style item {item.num} was read without parameters and cannot be saved")

        with self.storage.transaction() as conn:
            conn.execute(
                f"INSERT INTO style_items (styleid, {ITEM_SELECT}) VALUES (?, {placeholders(len(ITEM_COLUMNS))})",
                (
                    style_id,
                    item.num,
                    item.module,
                    item.operation,
                    _as_blob(item.op_params),
                    1 if item.enabled else 0,
                    _as_blob(item.blendop_params),
                    item.blendop_version,
                    item.multi_priority,
                    item.multi_name,
                )
            )


def _as_blob(value) -> bytes:
    if isinstance(value, str):
        return blob_codec.decode(value)
    return bytes(value)
