"""
STYLEBOX - Tags

Hierarchical image tags ('stylebox|style|sepia') stored in the library.
"""

from typing import List, Optional

from storage import Storage

TAG_PREFIX = 'stylebox'


def style_tag(style_name: str) -> str:
    """Tag recording that a style was applied to an image."""
    return f"{TAG_PREFIX}|style|{style_name}"


class TagRegistry:
    """Tag creation and attachment."""

    def __init__(self, storage: Storage):
        self.storage = storage

    def get_tag_id(self, label: str) -> Optional[int]:
        with self.storage.transaction() as conn:
            row = conn.execute("SELECT id FROM tags WHERE name = ?", (label,)).fetchone()
            return row[0] if row else None

    def ensure_tag(self, label: str) -> int:
        """Get the id of a tag, creating the tag if needed."""
        with self.storage.transaction() as conn:
            conn.execute("INSERT OR IGNORE INTO tags (name) VALUES (?)", (label,))
            return self.get_tag_id(label)

    def attach(self, tag_id: int, imgid: int):
        with self.storage.transaction() as conn:
            conn.execute(
                "INSERT OR IGNORE INTO tagged_images (tagid, imgid) VALUES (?, ?)",
                (tag_id, imgid)
            )

    def detach(self, tag_id: int, imgid: int):
        with self.storage.transaction() as conn:
            conn.execute(
                "DELETE FROM tagged_images WHERE tagid = ? AND imgid = ?",
                (tag_id, imgid)
            )

    def tags_for_image(self, imgid: int) -> List[str]:
        """Get the tag labels attached to an image, sorted."""
        with self.storage.transaction() as conn:
            cursor = conn.execute("""
                SELECT tags.name FROM tags
                JOIN tagged_images ON tagged_images.tagid = tags.id
                WHERE tagged_images.imgid = ?
                ORDER BY tags.name
            """, (imgid,))
            return [row[0] for row in cursor.fetchall()]
