"""
SQLite-based library database for images, edit histories and styles.
"""

import sqlite3
import json
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Optional

# Library location
CONFIG_DIR = Path.home() / ".config" / "stylebox"
DB_FILE = CONFIG_DIR / "library.db"

# Largest number of bound parameters put into one IN (...) clause.
# SQLite builds before 3.32 cap a statement at 999 variables.
MAX_BATCH_PARAMS = 500

# Apply modes understood by the history bridge
APPLY_MODES = ('append', 'replace')


class Storage:
    """SQLite storage shared by every style engine component.

    A single instance is created by the application and passed to each
    component's constructor. Work is grouped with transaction(): nested
    calls reuse the outer connection, so a multi-step operation either
    commits as a whole or leaves the previous state untouched.
    """

    def __init__(self, db_path: Path = None, config_dir: Path = None):
        self.db_path = Path(db_path) if db_path else DB_FILE
        self.config_dir = Path(config_dir) if config_dir else self.db_path.parent
        self._conn: Optional[sqlite3.Connection] = None
        self._depth = 0
        self._ensure_dir()
        self._init_db()

    @property
    def styles_dir(self) -> Path:
        """Directory holding one backup file per style."""
        return self.config_dir / "styles"

    def _ensure_dir(self):
        """Ensure the database directory exists."""
        self.db_path.parent.mkdir(parents=True, exist_ok=True)

    def _init_db(self):
        """Initialize the database schema."""
        with self.transaction() as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS images (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    filename TEXT NOT NULL,
                    version INTEGER DEFAULT 0,
                    group_id INTEGER
                )
            """)
            # Non-destructive edit stack, one row per history entry
            conn.execute("""
                CREATE TABLE IF NOT EXISTS history (
                    imgid INTEGER,
                    num INTEGER,
                    module INTEGER,
                    operation TEXT,
                    op_params BLOB,
                    enabled INTEGER,
                    blendop_params BLOB,
                    blendop_version INTEGER,
                    multi_priority INTEGER,
                    multi_name TEXT
                )
            """)
            conn.execute("CREATE INDEX IF NOT EXISTS history_imgid_index ON history (imgid)")
            # Style headers; names are unique by convention, not by constraint,
            # so that libraries carrying legacy duplicates still open
            conn.execute("""
                CREATE TABLE IF NOT EXISTS styles (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    name TEXT NOT NULL,
                    description TEXT DEFAULT ''
                )
            """)
            conn.execute("""
                CREATE TABLE IF NOT EXISTS style_items (
                    styleid INTEGER REFERENCES styles (id) ON DELETE CASCADE,
                    num INTEGER,
                    module INTEGER,
                    operation TEXT,
                    op_params BLOB,
                    enabled INTEGER,
                    blendop_params BLOB,
                    blendop_version INTEGER,
                    multi_priority INTEGER,
                    multi_name TEXT
                )
            """)
            conn.execute("CREATE INDEX IF NOT EXISTS style_items_styleid_index ON style_items (styleid)")
            conn.execute("""
                CREATE TABLE IF NOT EXISTS tags (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    name TEXT UNIQUE NOT NULL
                )
            """)
            conn.execute("""
                CREATE TABLE IF NOT EXISTS tagged_images (
                    tagid INTEGER,
                    imgid INTEGER,
                    PRIMARY KEY (tagid, imgid)
                )
            """)
            conn.execute("""
                CREATE TABLE IF NOT EXISTS selected_images (
                    imgid INTEGER PRIMARY KEY
                )
            """)
            # Thumbnail cache (JPEG blobs)
            conn.execute("""
                CREATE TABLE IF NOT EXISTS thumbnails (
                    imgid INTEGER PRIMARY KEY,
                    thumbnail BLOB,
                    updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
                )
            """)
            # App-wide preferences table
            conn.execute("""
                CREATE TABLE IF NOT EXISTS preferences (
                    key TEXT PRIMARY KEY,
                    value TEXT
                )
            """)

    @contextmanager
    def transaction(self):
        """Yield a connection; commit on success, roll back on any error."""
        if self._conn is not None:
            self._depth += 1
            try:
                yield self._conn
            finally:
                self._depth -= 1
            return

        conn = sqlite3.connect(self.db_path)
        conn.execute("PRAGMA foreign_keys = ON")
        self._conn = conn
        self._depth = 1
        try:
            yield conn
            conn.commit()
        except BaseException:
            conn.rollback()
            raise
        finally:
            self._conn = None
            self._depth = 0
            conn.close()

    def get_preference(self, key: str, default: Any = None) -> Any:
        """Load a JSON preference value. Returns default if not set."""
        with self.transaction() as conn:
            cursor = conn.execute(
                "SELECT value FROM preferences WHERE key = ?",
                (key,)
            )
            row = cursor.fetchone()
            if row and row[0]:
                return json.loads(row[0])
            return default

    def set_preference(self, key: str, value: Any):
        """Save a JSON preference value."""
        with self.transaction() as conn:
            conn.execute("""
                INSERT INTO preferences (key, value)
                VALUES (?, ?)
                ON CONFLICT(key) DO UPDATE SET value = excluded.value
            """, (key, json.dumps(value)))

    def get_style_apply_mode(self) -> str:
        """Get how styles merge into a history: 'append' (default) or 'replace'."""
        mode = self.get_preference('style_apply_mode', 'append')
        return mode if mode in APPLY_MODES else 'append'

    def set_style_apply_mode(self, mode: str):
        """Save the style apply mode ('append' or 'replace')."""
        if mode not in APPLY_MODES:
            raise ValueError(f"Unknown apply mode: {mode}. Valid modes: {list(APPLY_MODES)}")
        self.set_preference('style_apply_mode', mode)

    def get_style_duplicate_on_apply(self) -> bool:
        """Get whether applying a style works on a duplicate. Defaults to False."""
        return bool(self.get_preference('style_duplicate_on_apply', False))

    def set_style_duplicate_on_apply(self, duplicate: bool):
        """Save whether applying a style works on a duplicate."""
        self.set_preference('style_duplicate_on_apply', bool(duplicate))


def batched(values, size: int = MAX_BATCH_PARAMS):
    """Split a sequence of filter values into chunks fit for bound IN (...) clauses."""
    values = list(values)
    for start in range(0, len(values), size):
        yield values[start:start + size]


def placeholders(count: int) -> str:
    """Return '?, ?, ...' for an IN clause of count bound values."""
    return ", ".join("?" * count)


# Global storage instance
_storage = None


def get_storage() -> Storage:
    """Get the global storage instance (command line entry point only)."""
    global _storage
    if _storage is None:
        _storage = Storage()
    return _storage
