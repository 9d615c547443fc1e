"""
STYLEBOX - Image Library

Image records, duplicates (versions) and the current selection.
"""

from typing import Iterable, List, Optional

from errors import ImageNotFoundError
from storage import Storage


class ImageLibrary:
    """Images known to the library."""

    def __init__(self, storage: Storage):
        self.storage = storage

    def add_image(self, filename: str) -> int:
        """Register an image file and return its id."""
        with self.storage.transaction() as conn:
            cursor = conn.execute(
                "INSERT INTO images (filename, version) VALUES (?, 0)",
                (filename,)
            )
            imgid = cursor.lastrowid
            conn.execute("UPDATE images SET group_id = ? WHERE id = ?", (imgid, imgid))
            return imgid

    def exists(self, imgid: int) -> bool:
        with self.storage.transaction() as conn:
            return conn.execute("SELECT 1 FROM images WHERE id = ?", (imgid,)).fetchone() is not None

    def get_filename(self, imgid: int) -> Optional[str]:
        with self.storage.transaction() as conn:
            row = conn.execute("SELECT filename FROM images WHERE id = ?", (imgid,)).fetchone()
            return row[0] if row else None

    def get_version(self, imgid: int) -> Optional[int]:
        with self.storage.transaction() as conn:
            row = conn.execute("SELECT version FROM images WHERE id = ?", (imgid,)).fetchone()
            return row[0] if row else None

    def duplicate(self, imgid: int) -> int:
        """Create a new version of an image with an empty history.

        Returns the id of the duplicate. Raises ImageNotFoundError for unknown images.
        """
        with self.storage.transaction() as conn:
            row = conn.execute(
                "SELECT filename, group_id FROM images WHERE id = ?",
                (imgid,)
            ).fetchone()
            if row is None:
                raise ImageNotFoundError(imgid)
            filename, group_id = row
            version = conn.execute(
                "SELECT MAX(version) FROM images WHERE filename = ?",
                (filename,)
            ).fetchone()[0] or 0
            cursor = conn.execute(
                "INSERT INTO images (filename, version, group_id) VALUES (?, ?, ?)",
                (filename, version + 1, group_id or imgid)
            )
            return cursor.lastrowid

    def remove(self, imgid: int) -> bool:
        """Drop an image together with its history, tags, thumbnail and selection.

        Returns False if the image did not exist.
        """
        with self.storage.transaction() as conn:
            if conn.execute("DELETE FROM images WHERE id = ?", (imgid,)).rowcount == 0:
                return False
            conn.execute("DELETE FROM history WHERE imgid = ?", (imgid,))
            conn.execute("DELETE FROM tagged_images WHERE imgid = ?", (imgid,))
            conn.execute("DELETE FROM thumbnails WHERE imgid = ?", (imgid,))
            conn.execute("DELETE FROM selected_images WHERE imgid = ?", (imgid,))
            return True

    def selected_ids(self) -> List[int]:
        """Get the ids of the selected images, lowest id first."""
        with self.storage.transaction() as conn:
            cursor = conn.execute("SELECT imgid FROM selected_images ORDER BY imgid")
            return [row[0] for row in cursor.fetchall()]

    def select(self, imgids: Iterable[int]):
        with self.storage.transaction() as conn:
            for imgid in imgids:
                conn.execute("INSERT OR IGNORE INTO selected_images (imgid) VALUES (?)", (imgid,))

    def deselect(self, imgids: Iterable[int]):
        with self.storage.transaction() as conn:
            for imgid in imgids:
                conn.execute("DELETE FROM selected_images WHERE imgid = ?", (imgid,))

    def clear_selection(self):
        with self.storage.transaction() as conn:
            conn.execute("DELETE FROM selected_images")
