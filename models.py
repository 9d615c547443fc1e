"""
STYLEBOX - Data Model

Plain value types shared by the store, the history bridge and the file codec.
"""

from dataclasses import dataclass, field
from typing import List, Optional, Union

# Columns shared by the history and style_items tables, in insert order
ITEM_COLUMNS = (
    'num', 'module', 'operation', 'op_params', 'enabled',
    'blendop_params', 'blendop_version', 'multi_priority', 'multi_name',
)


@dataclass
class Style:
    """Style header: a unique name and a free-text description."""
    name: str
    description: str = ''


@dataclass
class StyleItem:
    """One entry of a style's ordered operation list.

    op_params and blendop_params hold raw bytes when read with parameters.
    Items coming from a style file carry the hex text form instead, which
    StyleStore.save_item() decodes before storage. Display-only items
    (read without parameters) have both blobs set to None.
    """
    num: int
    module: int = 0
    operation: str = ''
    op_params: Optional[Union[bytes, str]] = b''
    enabled: bool = True
    blendop_params: Optional[Union[bytes, str]] = b''
    blendop_version: int = 0
    multi_priority: int = 0
    multi_name: str = ''

    @property
    def is_display_only(self) -> bool:
        return self.op_params is None or self.blendop_params is None

    @classmethod
    def from_row(cls, row) -> 'StyleItem':
        """Build an item from a row selected in ITEM_COLUMNS order."""
        return cls(
            num=row[0],
            module=row[1] or 0,
            operation=row[2] or '',
            op_params=bytes(row[3]) if row[3] is not None else b'',
            enabled=bool(row[4]),
            blendop_params=bytes(row[5]) if row[5] is not None else b'',
            blendop_version=row[6] or 0,
            multi_priority=row[7] or 0,
            multi_name=row[8] or '',
        )


@dataclass
class HistoryEntry(StyleItem):
    """One edit-stack record of an image; same shape as a style item."""
    imgid: int = 0

    def as_item(self) -> StyleItem:
        return StyleItem(
            num=self.num,
            module=self.module,
            operation=self.operation,
            op_params=self.op_params,
            enabled=self.enabled,
            blendop_params=self.blendop_params,
            blendop_version=self.blendop_version,
            multi_priority=self.multi_priority,
            multi_name=self.multi_name,
        )


@dataclass
class StyleData:
    """A style as read from a style file: header plus ordered plugins."""
    info: Style = field(default_factory=lambda: Style(name=''))
    plugins: List[StyleItem] = field(default_factory=list)
