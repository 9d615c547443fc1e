"""
STYLEBOX - Style Files

Reads and writes the portable XML style format:

    <?xml version='1.0' encoding='ISO-8859-1'?>
    <darktable_style version="1.0">
      <info><name>..</name><description>..</description></info>
      <style>
        <plugin>
          <num/><module/><operation/><op_params/><enabled/>
          <blendop_params/><blendop_version/><multi_priority/><multi_name/>
        </plugin>
      </style>
    </darktable_style>

Blobs are stored as hex text (see blob_codec). The root element name, the
version attribute and the legacy charset are kept for compatibility with
previously exported files.
"""

import os
import re
import tempfile
import xml.etree.ElementTree as ET
from enum import Enum
from pathlib import Path
from typing import Optional

import blob_codec
from errors import OverwriteRefusedError, StyleIOError, StyleNotFoundError, StyleParseError
from models import Style, StyleData, StyleItem
from style_store import StyleStore

STYLE_FILE_EXT = '.dtstyle'
ROOT_ELEMENT = 'darktable_style'
FORMAT_VERSION = '1.0'
FILE_ENCODING = 'ISO-8859-1'

READ_CHUNK_SIZE = 1024
FILE_MODE = 0o666

HEADER_FIELDS = ('name', 'description')
INT_FIELDS = ('num', 'module', 'enabled', 'blendop_version', 'multi_priority')
TEXT_FIELDS = ('operation', 'op_params', 'blendop_params', 'multi_name')
PLUGIN_FIELDS = INT_FIELDS + TEXT_FIELDS

_UNSAFE_FILENAME_CHARS = re.compile(r'[\\/:*?"<>|\x00-\x1f]')
_LEADING_INT = re.compile(r'\s*([+-]?\d+)')


def style_filename(style_name: str) -> str:
    """File name of a style's backup, e.g. 'sepia.dtstyle'."""
    return _UNSAFE_FILENAME_CHARS.sub('_', style_name) + STYLE_FILE_EXT


def _current_umask() -> int:
    mask = os.umask(0)
    os.umask(mask)
    return mask


def _discard(tmp_path: Optional[str]):
    if tmp_path and os.path.exists(tmp_path):
        os.unlink(tmp_path)


def parse_int(text: Optional[str]) -> int:
    """Parse a leading decimal integer; anything else gives 0."""
    match = _LEADING_INT.match(text or '')
    return int(match.group(1)) if match else 0


class ParseState(Enum):
    """Where the parser is in the document."""
    OUTSIDE = "outside"
    IN_HEADER_FIELD = "in_header_field"
    IN_PLUGIN = "in_plugin"
    IN_PLUGIN_FIELD = "in_plugin_field"


class StyleDocumentParser:
    """Event-driven style document reader.

    Element names are matched case-insensitively. name/description outside
    a plugin belong to the header; fields inside a plugin belong to the
    plugin being built.
    """

    def __init__(self):
        self.state = ParseState.OUTSIDE
        self.field: Optional[str] = None
        self.data = StyleData(info=Style(name='', description=''))
        self._plugin: Optional[StyleItem] = None
        self._parser = ET.XMLPullParser(events=('start', 'end'))

    def feed(self, chunk: bytes):
        self._parser.feed(chunk)
        self._dispatch()

    def close(self) -> StyleData:
        self._parser.close()
        self._dispatch()
        return self.data

    def _dispatch(self):
        for event, elem in self._parser.read_events():
            tag = elem.tag.lower()
            if event == 'start':
                self._start(tag)
            else:
                self._end(tag, elem.text)

    def _start(self, tag: str):
        if tag == 'plugin':
            self.state = ParseState.IN_PLUGIN
            self._plugin = StyleItem(num=0, op_params='', blendop_params='')
        elif self.state is ParseState.IN_PLUGIN and tag in PLUGIN_FIELDS:
            self.state = ParseState.IN_PLUGIN_FIELD
            self.field = tag
        elif self.state is ParseState.OUTSIDE and tag in HEADER_FIELDS:
            self.state = ParseState.IN_HEADER_FIELD
            self.field = tag

    def _end(self, tag: str, text: Optional[str]):
        if self.state is ParseState.IN_PLUGIN_FIELD and tag == self.field:
            self._set_plugin_field(tag, text or '')
            self.state = ParseState.IN_PLUGIN
            self.field = None
        elif self.state is ParseState.IN_HEADER_FIELD and tag == self.field:
            setattr(self.data.info, tag, text or '')
            self.state = ParseState.OUTSIDE
            self.field = None
        elif tag == 'plugin' and self._plugin is not None:
            self.data.plugins.append(self._plugin)
            self._plugin = None
            self.state = ParseState.OUTSIDE

    def _set_plugin_field(self, tag: str, text: str):
        plugin = self._plugin
        if tag == 'enabled':
            plugin.enabled = parse_int(text) != 0
        elif tag in INT_FIELDS:
            setattr(plugin, tag, parse_int(text))
        elif tag in ('op_params', 'blendop_params'):
            value = text.strip()
            if not blob_codec.is_valid(value):
                print(f"[StyleFile] Malformed {tag} in plugin {plugin.num}, decoding leniently")
            setattr(plugin, tag, value)
        else:
            setattr(plugin, tag, text)


class StyleFileCodec:
    """Exports styles from the store to files and imports them back."""

    def __init__(self, store: StyleStore):
        self.store = store

    def save_to_file(self, style_name: str, directory, overwrite: bool = False) -> Path:
        """Write a style to <directory>/<name>.dtstyle and return the path.

        The document is written to a temporary file in the same directory
        and renamed over the target, so an interrupted write never leaves a
        truncated file behind.
        """
        directory = Path(directory)
        path = directory / style_filename(style_name)

        if not self.store.exists(style_name):
            raise StyleNotFoundError(style_name)
        if path.exists() and not overwrite:
            raise OverwriteRefusedError(style_name, path)

        tree = self._build_document(style_name)

        tmp_path = None
        try:
            fd, tmp_path = tempfile.mkstemp(dir=directory, prefix='.' + path.name + '.', suffix='.tmp')
            with os.fdopen(fd, 'wb') as f:
                tree.write(f, encoding=FILE_ENCODING, xml_declaration=True,
                           short_empty_elements=False)
            # mkstemp creates 0600; give the file the usual umask-based mode
            os.chmod(tmp_path, FILE_MODE & ~_current_umask())
            os.replace(tmp_path, path)
        except OSError as e:
            _discard(tmp_path)
            raise StyleIOError(path, e.strerror or str(e)) from e
        except BaseException:
            _discard(tmp_path)
            raise
        return path

    def _build_document(self, style_name: str) -> ET.ElementTree:
        root = ET.Element(ROOT_ELEMENT, version=FORMAT_VERSION)

        info = ET.SubElement(root, 'info')
        ET.SubElement(info, 'name').text = style_name
        ET.SubElement(info, 'description').text = self.store.get_description(style_name) or ''

        style = ET.SubElement(root, 'style')
        for item in self.store.list_items(style_name, include_params=True):
            plugin = ET.SubElement(style, 'plugin')
            ET.SubElement(plugin, 'num').text = str(item.num)
            ET.SubElement(plugin, 'module').text = str(item.module)
            ET.SubElement(plugin, 'operation').text = item.operation
            ET.SubElement(plugin, 'op_params').text = blob_codec.encode(item.op_params)
            ET.SubElement(plugin, 'enabled').text = '1' if item.enabled else '0'
            ET.SubElement(plugin, 'blendop_params').text = blob_codec.encode(item.blendop_params)
            ET.SubElement(plugin, 'blendop_version').text = str(item.blendop_version)
            ET.SubElement(plugin, 'multi_priority').text = str(item.multi_priority)
            ET.SubElement(plugin, 'multi_name').text = item.multi_name

        tree = ET.ElementTree(root)
        ET.indent(tree)
        return tree

    def parse(self, path) -> StyleData:
        """Read a style file. Nothing of a malformed document is kept."""
        parser = StyleDocumentParser()
        try:
            with open(path, 'rb') as f:
                while True:
                    chunk = f.read(READ_CHUNK_SIZE)
                    if not chunk:
                        break
                    parser.feed(chunk)
            return parser.close()
        except OSError as e:
            raise StyleIOError(path, e.strerror or str(e)) from e
        except ET.ParseError as e:
            raise StyleParseError(path, str(e)) from e

    def import_from_file(self, path, name: Optional[str] = None) -> str:
        """Create a style from a file, optionally under another name.

        The header and all items are written in one transaction: a duplicate
        name (StyleExistsError) leaves the store unchanged.

        Returns the name of the imported style.
        """
        data = self.parse(path)
        if name:
            data.info.name = name
        if not data.info.name:
            raise StyleParseError(path, "missing style name")

        with self.store.storage.transaction():
            style_id = self.store.create_header(data.info.name, data.info.description)
            for plugin in data.plugins:
                self.store.save_item(style_id, plugin)
        return data.info.name
