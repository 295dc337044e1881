"""
ABOUTME: Operations on a single part (document, header, footer...) of a docx package
ABOUTME: Holds the XML contents and lazily decomposed runs; workflows come from mixins
"""

import re
from typing import Iterable, List, Optional

from lxml import etree

from .boundary_mixin import BoundaryMixin
from .cleanup_mixin import CleanupMixin
from .common import EMBEDDED_FIELD_FORMAT
from .decomposer import decompose
from .errors import ConfigurationError
from .run import Run
from .xml_utils import decode_entities


class PackagePart(CleanupMixin, BoundaryMixin):
    """
    One XML part of a docx package.

    Either attached to a Surgeon (contents read lazily from the zip member
    word/<part_name>.xml) or standalone when contents are given directly.
    Assigning contents invalidates the decomposed runs.
    """

    def __init__(self, surgeon=None, part_name: str = 'document', contents: Optional[str] = None,
                 embedded_field_format: str = EMBEDDED_FIELD_FORMAT):
        if surgeon is None and contents is None:
            raise ConfigurationError("PackagePart needs either a surgeon or contents")
        self.surgeon = surgeon
        self.part_name = part_name
        self.embedded_field_format = embedded_field_format
        self._initial_contents = contents
        self._contents = contents
        self._runs: Optional[List[Run]] = None
        self.contents_has_changed = False
        self.was_cleaned_up = False

    def __repr__(self):
        return f"PackagePart({self.part_name!r})"

    # ============================================================
    # Contents
    # ============================================================

    @property
    def zip_member_name(self) -> str:
        return f'word/{self.part_name}.xml'

    def original_contents(self) -> str:
        """Contents as they were before any modification."""
        if self.surgeon is None:
            return self._initial_contents
        return self.surgeon.original_xml_member(self.zip_member_name)

    @property
    def contents(self) -> str:
        if self._contents is None:
            self._contents = self.surgeon.xml_member(self.zip_member_name)
        return self._contents

    @contents.setter
    def contents(self, new_contents: str):
        self._contents = new_contents
        self._runs = None
        self.contents_has_changed = True
        self.was_cleaned_up = False

    @property
    def runs(self) -> List[Run]:
        """Decomposition of the contents; joining their XML restores the contents."""
        if self._runs is None:
            self._runs = decompose(self.contents)
        return self._runs

    def _check_option_names(self, method: str, options: dict, valid_names: Iterable[str]):
        invalid = sorted(set(options) - set(valid_names))
        if invalid:
            raise ConfigurationError(f"{method}(): invalid option(s): {', '.join(invalid)}")

    # ============================================================
    # Contents restitution
    # ============================================================

    def plain_text(self) -> str:
        """
        Text contents without markup.

        Paragraphs and breaks become newlines, tab nodes become tabs,
        all other formatting is ignored.
        """
        txt = self.contents
        txt = re.sub(r'(<w:p[ >])', r'\n\1', txt)
        txt = txt.replace('<w:br/>', '\n')
        txt = re.sub(r'<w:tab(?!s)[^>]*>', '\t', txt)
        txt = re.sub(r'<[^>]+>', '', txt)
        return decode_entities(txt)

    def indented_contents(self) -> bytes:
        """Indented XML for inspection in a text editor (bytes, UTF-8 encoded)."""
        parser = etree.XMLParser(remove_blank_text=True)
        root = etree.fromstring(self.contents.encode('utf-8'), parser)
        return etree.tostring(root, pretty_print=True, xml_declaration=True,
                              encoding='UTF-8', standalone=True)
