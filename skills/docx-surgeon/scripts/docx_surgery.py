#!/usr/bin/env python3
"""
ABOUTME: Command-line surgery on .docx files
ABOUTME: Extract text, replace patterns (optionally as tracked changes), unlink fields, handle bookmarks
"""

import argparse
import logging
import sys
from pathlib import Path

from docx_surgeon import ChangeTracker, Surgeon
from docx_surgeon.common import DEFAULT_AUTHOR, format_text_preview


def _parts_for(surgeon: Surgeon, all_parts: bool):
    return list(surgeon.parts.values()) if all_parts else [surgeon.document]


def _default_output(docx_path: str) -> str:
    path = Path(docx_path)
    return str(path.with_name(f"{path.stem}_edited{path.suffix}"))


def cmd_text(surgeon: Surgeon, args) -> bool:
    for part in _parts_for(surgeon, args.all_parts):
        if args.all_parts:
            print(f"===== {part.part_name} =====")
        print(part.plain_text())
    return False


def cmd_replace(surgeon: Surgeon, args) -> bool:
    if args.track_changes:
        tracker = ChangeTracker(author=args.author, counter=surgeon.counter)
        replacement = tracker.callback(args.replacement)
    else:
        replacement = args.replacement

    cleanup_args = {'no_caps': True} if args.no_caps else True
    for part in _parts_for(surgeon, args.all_parts):
        before = part.plain_text()
        part.replace(args.pattern, replacement, cleanup_xml=cleanup_args)
        if args.verbose:
            print(f"  {part.part_name}: {format_text_preview(before)} -> "
                  f"{format_text_preview(part.plain_text())}")
    return True


def cmd_unlink_fields(surgeon: Surgeon, args) -> bool:
    for part in _parts_for(surgeon, args.all_parts):
        n_fields = len(part.list_fields())
        part.unlink_fields()
        print(f"  {part.part_name}: {n_fields} fields unlinked")
    return True


def cmd_reveal_fields(surgeon: Surgeon, args) -> bool:
    for part in _parts_for(surgeon, args.all_parts):
        part.reveal_fields()
    return True


def cmd_suppress_bookmarks(surgeon: Surgeon, args) -> bool:
    options = {}
    if args.full_range:
        options['full_range'] = args.full_range
    if args.markup_only:
        options['markup_only'] = args.markup_only
    for part in _parts_for(surgeon, args.all_parts):
        part.suppress_bookmarks(**options)
    return True


def cmd_reveal_bookmarks(surgeon: Surgeon, args) -> bool:
    for part in _parts_for(surgeon, args.all_parts):
        part.reveal_bookmarks(color=args.color)
    return True


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Regex-based surgery on Word documents"
    )
    parser.add_argument('-v', '--verbose', action='store_true',
                        help='Verbose output')

    common = argparse.ArgumentParser(add_help=False)
    common.add_argument('docx_file', help='Input .docx file')
    common.add_argument('--all-parts', action='store_true',
                        help='Also process headers, footers, footnotes and endnotes')

    writing = argparse.ArgumentParser(add_help=False, parents=[common])
    writing.add_argument('-o', '--output',
                         help='Output file path (default: <input>_edited.docx)')
    writing.add_argument('--dry-run', action='store_true',
                         help='Process only, do not save')

    subparsers = parser.add_subparsers(dest='command', required=True)

    p = subparsers.add_parser('text', parents=[common], help='Print the plain text')
    p.set_defaults(func=cmd_text)

    p = subparsers.add_parser('replace', parents=[writing], help='Replace a regex in the text')
    p.add_argument('pattern', help='Regular expression')
    p.add_argument('replacement', help='Replacement text')
    p.add_argument('--no-caps', action='store_true',
                   help='Upper-case runs with the caps property so that they can merge')
    p.add_argument('--track-changes', action='store_true',
                   help='Record replacements as tracked changes')
    p.add_argument('--author', default=DEFAULT_AUTHOR,
                   help=f'Author name for track changes (default: {DEFAULT_AUTHOR})')
    p.set_defaults(func=cmd_replace)

    p = subparsers.add_parser('unlink-fields', parents=[writing],
                              help='Replace fields by their current results')
    p.set_defaults(func=cmd_unlink_fields)

    p = subparsers.add_parser('reveal-fields', parents=[writing],
                              help='Show field codes as visible text')
    p.set_defaults(func=cmd_reveal_fields)

    p = subparsers.add_parser('suppress-bookmarks', parents=[writing],
                              help='Remove bookmarks (markup only by default)')
    p.add_argument('--full-range', action='append', metavar='NAME',
                   help='Bookmark whose contents are erased too (repeatable)')
    p.add_argument('--markup-only', action='append', metavar='NAME',
                   help='Bookmark whose markers only are erased (repeatable)')
    p.set_defaults(func=cmd_suppress_bookmarks)

    p = subparsers.add_parser('reveal-bookmarks', parents=[writing],
                              help='Insert visible marks at bookmark boundaries')
    p.add_argument('--color', default='yellow', help='Highlight color (default: yellow)')
    p.set_defaults(func=cmd_reveal_bookmarks)

    return parser


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format='%(name)s: %(message)s')

    try:
        surgeon = Surgeon(args.docx_file)
        if args.verbose:
            print(f"Source file: {surgeon.docx_path}")
            print(f"Parts: {', '.join(surgeon.parts)}")
            print("-" * 50)

        modified = args.func(surgeon, args)
        if not modified:
            return 0

        output_path = args.output or _default_output(args.docx_file)
        changed = [part.part_name for part in surgeon.parts.values() if part.contents_has_changed]
        if args.dry_run:
            print(f"[Dry run] {len(changed)} parts modified, nothing saved")
        else:
            surgeon.save_as(output_path)
            print(f"Saved to: {output_path} ({len(changed)} parts modified)")
        return 0

    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == '__main__':
    sys.exit(main())
