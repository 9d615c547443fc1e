"""
STYLEBOX - Thumbnail Cache

JPEG thumbnails of developed images, stored in the library database.
A thumbnail is dropped whenever the image's history changes.
"""

from typing import Optional

import cv2
import numpy as np

from storage import Storage

# Thumbnail settings
THUMB_WIDTH = 100
THUMB_HEIGHT = 74
THUMB_QUALITY = 85  # JPEG quality


def encode_thumbnail(img: np.ndarray) -> bytes:
    """Scale a BGR image to thumbnail size and encode it as JPEG."""
    # Convert float32 (0-1) to uint8 (0-255) for thumbnail
    if img.dtype == np.float32:
        img = (np.clip(img, 0, 1) * 255).astype(np.uint8)

    h, w = img.shape[:2]
    scale = min(THUMB_WIDTH / w, THUMB_HEIGHT / h)
    new_w, new_h = max(1, int(w * scale)), max(1, int(h * scale))
    img_scaled = cv2.resize(img, (new_w, new_h), interpolation=cv2.INTER_AREA)

    ok, buffer = cv2.imencode('.jpg', img_scaled, [cv2.IMWRITE_JPEG_QUALITY, THUMB_QUALITY])
    if not ok:
        raise ValueError("Failed to encode thumbnail")
    return buffer.tobytes()


class ThumbnailCache:
    """Thumbnail cache keyed by image id."""

    def __init__(self, storage: Storage):
        self.storage = storage

    def save(self, imgid: int, img: np.ndarray):
        """Save a thumbnail for an image (as JPEG blob)."""
        if img is None:
            return
        blob = encode_thumbnail(img)
        with self.storage.transaction() as conn:
            conn.execute("""
                INSERT INTO thumbnails (imgid, thumbnail, updated_at)
                VALUES (?, ?, CURRENT_TIMESTAMP)
                ON CONFLICT(imgid) DO UPDATE SET
                    thumbnail = excluded.thumbnail,
                    updated_at = CURRENT_TIMESTAMP
            """, (imgid, blob))

    def load(self, imgid: int) -> Optional[np.ndarray]:
        """Load a thumbnail for an image. Returns BGR numpy array or None."""
        with self.storage.transaction() as conn:
            row = conn.execute(
                "SELECT thumbnail FROM thumbnails WHERE imgid = ?",
                (imgid,)
            ).fetchone()
        if row and row[0]:
            arr = np.frombuffer(row[0], dtype=np.uint8)
            return cv2.imdecode(arr, cv2.IMREAD_COLOR)
        return None

    def has(self, imgid: int) -> bool:
        with self.storage.transaction() as conn:
            row = conn.execute("SELECT 1 FROM thumbnails WHERE imgid = ?", (imgid,)).fetchone()
            return row is not None

    def invalidate(self, imgid: int):
        """Drop the cached thumbnail of an image."""
        with self.storage.transaction() as conn:
            conn.execute("DELETE FROM thumbnails WHERE imgid = ?", (imgid,))
