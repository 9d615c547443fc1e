#!/usr/bin/env python3
"""
STYLEBOX - Command Line

Manage development styles of an image library from the shell:
list, show, create, copy, update, delete, apply, remove, export and import.
"""

import argparse
import sys
from pathlib import Path

from PySide6.QtCore import QCoreApplication

import storage
from history_bridge import ApplyMode
from styles import StyleManager


def parse_nums(value: str) -> list:
    """Parse a comma separated list of history/item numbers ('0,2,5')."""
    if not value:
        return []
    try:
        return [int(part) for part in value.split(',') if part.strip()]
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid item list: {value}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description='Stylebox style manager')
    parser.add_argument('--db', type=Path, help='Library database (default: ~/.config/stylebox/library.db)')
    parser.add_argument('--styles-dir', type=Path, help='Backup directory for style files')
    sub = parser.add_subparsers(dest='command', required=True)

    p = sub.add_parser('list', help='List styles')
    p.add_argument('filter', nargs='?', default='', help='Match name or description')

    p = sub.add_parser('show', help='Show the items of a style')
    p.add_argument('name')

    p = sub.add_parser('create', help="Create a style from an image's history")
    p.add_argument('name')
    p.add_argument('imgid', type=int)
    p.add_argument('-d', '--description', default='')
    p.add_argument('--items', type=parse_nums, help='History numbers to include (default: all)')

    p = sub.add_parser('copy', help='Create a style from another style')
    p.add_argument('name')
    p.add_argument('newname')
    p.add_argument('-d', '--description', default='')
    p.add_argument('--items', type=parse_nums, help='Item numbers to include (default: all)')

    p = sub.add_parser('update', help='Rename, redescribe or prune a style')
    p.add_argument('name')
    p.add_argument('--rename', help='New name')
    p.add_argument('-d', '--description', help='New description')
    p.add_argument('--keep', type=parse_nums, help='Item numbers to keep (default: all)')

    p = sub.add_parser('delete', help='Delete a style')
    p.add_argument('name')

    p = sub.add_parser('apply', help='Apply a style to images')
    p.add_argument('name')
    p.add_argument('imgids', type=int, nargs='*', help='Image ids (default: current selection)')
    p.add_argument('--duplicate', action='store_true', help='Apply to a duplicate of each image')
    p.add_argument('--replace', action='store_true', help='Replace the history instead of appending')

    p = sub.add_parser('remove', help="Remove a style's operations from an image")
    p.add_argument('name')
    p.add_argument('imgid', type=int)

    p = sub.add_parser('export', help='Export a style file')
    p.add_argument('name')
    p.add_argument('directory', type=Path)
    p.add_argument('--overwrite', action='store_true')

    p = sub.add_parser('import', help='Import style files')
    p.add_argument('paths', type=Path, nargs='+')
    p.add_argument('--name', help='Import under another name (single file only)')

    return parser


def run(args, manager: StyleManager) -> int:
    """Execute one parsed command. Returns the process exit code."""
    if args.command == 'list':
        for style in manager.list(args.filter):
            print(f"{style.name}\t{style.description}")
        return 0

    if args.command == 'show':
        if not manager.exists(args.name):
            print(f"Error: style '{args.name}' does not exist")
            return 1
        print(f"{args.name}: {manager.get_description(args.name) or ''}")
        for item in manager.list_items(args.name, include_params=False):
            print(f"  {item.num:3d}  {item.operation}")
        return 0

    if args.command == 'create':
        ok = manager.create_from_image(args.name, args.description, args.imgid, args.items)
        return 0 if ok else 1

    if args.command == 'copy':
        ok = manager.create_from_style(args.name, args.newname, args.description, args.items)
        return 0 if ok else 1

    if args.command == 'update':
        ok = manager.update(args.name, args.rename, args.description, args.keep)
        return 0 if ok else 1

    if args.command == 'delete':
        return 0 if manager.delete(args.name) else 1

    if args.command == 'apply':
        mode = ApplyMode.REPLACE if args.replace else None
        if not args.imgids:
            return 0 if manager.apply_to_selection(args.name, args.duplicate or None, mode) else 1
        failed = 0
        for imgid in args.imgids:
            if manager.apply_to_image(args.name, imgid, args.duplicate or None, mode) is None:
                failed += 1
        return 1 if failed else 0

    if args.command == 'remove':
        return 0 if manager.remove_from_image(args.name, args.imgid) else 1

    if args.command == 'export':
        return 0 if manager.export_to_file(args.name, args.directory, args.overwrite) else 1

    if args.command == 'import':
        if args.name and len(args.paths) > 1:
            print("Error: --name can only be used with a single file")
            return 2
        failed = 0
        for path in args.paths:
            if manager.import_from_file(path, args.name) is None:
                failed += 1
        return 1 if failed else 0

    return 2


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    app = QCoreApplication.instance() or QCoreApplication(sys.argv[:1])
    app.setApplicationName('stylebox')

    store = storage.Storage(args.db) if args.db else storage.get_storage()
    manager = StyleManager(store, styles_dir=args.styles_dir)
    manager.log.messageLogged.connect(lambda message: print(message))
    manager.register_shortcuts()

    return run(args, manager)


if __name__ == "__main__":
    sys.exit(main())
