"""
ABOUTME: Container for a .docx file: zip members and the package parts within
ABOUTME: Parts are discovered from [Content_Types].xml; changed parts are written back on save
"""

import logging
import re
import zipfile
from collections import OrderedDict
from pathlib import Path
from typing import Dict, List, Optional

from defusedxml import ElementTree as ET
from docx.opc.constants import CONTENT_TYPE as CT

from .change import Change, RevisionCounter
from .common import CONTENT_TYPES_MEMBER, CONTENT_TYPES_NS, DEFAULT_AUTHOR
from .package_part import PackagePart
from .run import Run

logger = logging.getLogger(__name__)

# Main document of a .docm file
WML_DOCUMENT_MACRO_ENABLED_MAIN = 'application/vnd.ms-word.document.macroEnabled.main+xml'

PART_CONTENT_TYPES = {
    CT.WML_DOCUMENT_MAIN: 'document',
    WML_DOCUMENT_MACRO_ENABLED_MAIN: 'document',
    CT.WML_HEADER: 'header',
    CT.WML_FOOTER: 'footer',
    CT.WML_FOOTNOTES: 'footnotes',
    CT.WML_ENDNOTES: 'endnotes',
}

# /word/header1.xml -> header1
PART_NAME_PATTERN = re.compile(r'^/?word/([^/]+)\.xml$')


def _natural_key(name: str):
    return [int(chunk) if chunk.isdigit() else chunk for chunk in re.split(r'(\d+)', name)]


class Surgeon:
    """
    Opens a .docx file and gives access to its XML parts.

    Member contents are read once into memory; the source file is never
    modified except through overwrite().
    """

    def __init__(self, docx_path: str):
        self.docx_path = Path(docx_path)
        if not self.docx_path.exists():
            raise FileNotFoundError(f"Document not found: {self.docx_path}")

        # keeps the archive order so that save_as() writes entries the same way
        self._members: 'OrderedDict[str, bytes]' = OrderedDict()
        self._infos: Dict[str, zipfile.ZipInfo] = {}
        with zipfile.ZipFile(self.docx_path, 'r') as zf:
            for info in zf.infolist():
                self._infos[info.filename] = info
                self._members[info.filename] = zf.read(info.filename)
        self._original_members = dict(self._members)

        self._part_kinds = self._discover_parts()
        self._parts: Dict[str, PackagePart] = OrderedDict(
            (name, PackagePart(self, name)) for name in self._part_kinds
        )
        self.counter = RevisionCounter.from_markup(
            *(self.original_xml_member(part.zip_member_name) for part in self._parts.values())
        )
        logger.debug("[Surgeon] %s: parts %s", self.docx_path.name, ', '.join(self._parts))

    def __repr__(self):
        return f"Surgeon({str(self.docx_path)!r})"

    # ============================================================
    # Zip members
    # ============================================================

    def original_xml_member(self, member_name: str) -> str:
        """Contents of a zip member as found in the file, decoded as UTF-8."""
        try:
            return self._original_members[member_name].decode('utf-8')
        except KeyError:
            raise KeyError(f"no zip member '{member_name}' in {self.docx_path}") from None

    def xml_member(self, member_name: str, new_xml: Optional[str] = None) -> str:
        """
        Get or set the contents of a zip member.

        When a part is bound to the member, its current (possibly modified)
        contents are returned, and setting the member updates the part.
        """
        part = self._part_for_member(member_name)
        if new_xml is not None:
            if part is not None:
                part.contents = new_xml
            else:
                self._members[member_name] = new_xml.encode('utf-8')
            return new_xml
        if part is not None:
            return part.contents
        if member_name not in self._members:
            raise KeyError(f"no zip member '{member_name}' in {self.docx_path}")
        return self._members[member_name].decode('utf-8')

    def _part_for_member(self, member_name: str) -> Optional[PackagePart]:
        match = PART_NAME_PATTERN.match(member_name)
        if match:
            return self._parts.get(match.group(1))
        return None

    def _discover_parts(self) -> 'OrderedDict[str, str]':
        """part name -> kind, from the Override entries of [Content_Types].xml"""
        root = ET.fromstring(self.original_xml_member(CONTENT_TYPES_MEMBER))
        found = []
        for override in root.findall(f'{{{CONTENT_TYPES_NS}}}Override'):
            kind = PART_CONTENT_TYPES.get(override.get('ContentType'))
            match = PART_NAME_PATTERN.match(override.get('PartName', ''))
            if kind and match and f'word/{match.group(1)}.xml' in self._members:
                found.append((match.group(1), kind))

        if not any(kind == 'document' for _, kind in found):
            raise KeyError(f"no main document part declared in {CONTENT_TYPES_MEMBER}")

        found.sort(key=lambda item: (item[1] != 'document', _natural_key(item[0])))
        return OrderedDict(found)

    # ============================================================
    # Package parts
    # ============================================================

    @property
    def parts(self) -> Dict[str, PackagePart]:
        return self._parts

    @property
    def document(self) -> PackagePart:
        name = next(name for name, kind in self._part_kinds.items() if kind == 'document')
        return self._parts[name]

    @property
    def headers(self) -> List[PackagePart]:
        return [self._parts[name] for name, kind in self._part_kinds.items() if kind == 'header']

    @property
    def footers(self) -> List[PackagePart]:
        return [self._parts[name] for name, kind in self._part_kinds.items() if kind == 'footer']

    def all_parts_except_document(self) -> List[PackagePart]:
        document = self.document
        return [part for part in self._parts.values() if part is not document]

    def plain_text(self) -> str:
        """Plain text of the main document."""
        return self.document.plain_text()

    def change(self, matched: str, replacement: str = '', author: str = DEFAULT_AUTHOR,
               date: Optional[str] = None, run: Optional[Run] = None, xml_before: str = '') -> str:
        """Tracked change markup, numbered after all revisions already in the document."""
        kwargs = {'date': date} if date else {}
        change = Change(matched=matched, replacement=replacement, author=author,
                        run=run, xml_before=xml_before, **kwargs)
        return change.to_xml(self.counter)

    # ============================================================
    # Saving
    # ============================================================

    def _update_contents_in_zip(self) -> int:
        changed = 0
        for part in self._parts.values():
            if part.contents_has_changed:
                self._members[part.zip_member_name] = part.contents.encode('utf-8')
                changed += 1
        return changed

    def save_as(self, docx_path: str):
        """Write the package (with all changed parts) to a new file."""
        changed = self._update_contents_in_zip()
        with zipfile.ZipFile(docx_path, 'w', zipfile.ZIP_DEFLATED) as zf:
            for member_name, data in self._members.items():
                info = self._infos.get(member_name)
                if info is not None:
                    zf.writestr(info, data, compress_type=info.compress_type)
                else:
                    zf.writestr(member_name, data)
        logger.debug("[Surgeon] saved %s (%d changed parts)", docx_path, changed)

    def overwrite(self):
        """Save the package over the file it was read from."""
        self.save_as(str(self.docx_path))
