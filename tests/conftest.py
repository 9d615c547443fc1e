"""Pytest configuration and fixtures

Every test gets its own library database and styles directory under tmp_path.
"""

import sys
from pathlib import Path

import pytest

# Add project root to sys.path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from PySide6.QtCore import QCoreApplication

from history import HistoryStore
from images import ImageLibrary
from models import StyleItem
from state import DevelopState
from storage import Storage
from style_store import StyleStore
from styles import StyleManager


@pytest.fixture(scope="session", autouse=True)
def qt_app():
    """One Qt core application for the whole session (signals need no event loop)."""
    app = QCoreApplication.instance() or QCoreApplication([])
    yield app


@pytest.fixture
def storage(tmp_path: Path) -> Storage:
    return Storage(tmp_path / "library.db")


@pytest.fixture
def store(storage: Storage) -> StyleStore:
    return StyleStore(storage)


@pytest.fixture
def develop(storage: Storage) -> DevelopState:
    return DevelopState(storage)


@pytest.fixture
def history(storage: Storage, develop: DevelopState) -> HistoryStore:
    return HistoryStore(storage, develop)


@pytest.fixture
def library(storage: Storage) -> ImageLibrary:
    return ImageLibrary(storage)


@pytest.fixture
def styles_dir(tmp_path: Path) -> Path:
    return tmp_path / "config" / "styles"


@pytest.fixture
def manager(storage: Storage, develop: DevelopState, history: HistoryStore,
            library: ImageLibrary, styles_dir: Path) -> StyleManager:
    return StyleManager(storage, develop=develop, history=history, images=library,
                        styles_dir=styles_dir)


@pytest.fixture
def make_item():
    """Factory for style items with recognisable blobs."""
    def _make(num: int, operation: str = 'exposure', **kwargs) -> StyleItem:
        values = dict(
            num=num,
            module=num + 1,
            operation=operation,
            op_params=bytes([num & 0xFF, 0xA0, 0xFF]),
            enabled=True,
            blendop_params=bytes([0x00, num & 0xFF, 0x7F]),
            blendop_version=7,
            multi_priority=0,
            multi_name='',
        )
        values.update(kwargs)
        return StyleItem(**values)
    return _make


@pytest.fixture
def add_style(store: StyleStore, make_item):
    """Create a style with the given operations as items 0..n-1."""
    def _add(name: str, operations=('exposure', 'colorout', 'sharpen'), description: str = '') -> int:
        style_id = store.create_header(name, description)
        for num, operation in enumerate(operations):
            store.save_item(style_id, make_item(num, operation))
        return style_id
    return _add


@pytest.fixture
def add_image(library: ImageLibrary, history: HistoryStore, make_item):
    """Register an image whose history holds the given operations."""
    def _add(operations=('exposure', 'colorout', 'sharpen'), filename: str = 'IMG_0001.CR2') -> int:
        imgid = library.add_image(filename)
        history.append_history(imgid, [
            make_item(num, operation, op_params=bytes([0x10 + num]))
            for num, operation in enumerate(operations)
        ])
        return imgid
    return _add
