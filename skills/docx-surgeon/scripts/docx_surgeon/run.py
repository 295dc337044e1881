"""
ABOUTME: Run entity: a formatting-scoped group of text leaves
ABOUTME: Serialization, merging of adjacent runs and removal of the caps property
"""

import copy
import re
from dataclasses import dataclass, field
from typing import List

from .errors import StructuralMismatchError
from .text import Text


# <w:caps/> or an explicit true value; w:val="false|0|off" leaves the run alone
CAPS_PROPERTY_PATTERN = re.compile(r'<w:caps(?: w:val="(?:true|1|on)")?/>')


@dataclass
class Run:
    """
    A <w:r> node decomposed into opaque prefix, raw properties and text leaves.

    A run without texts contributes only its xml_before to the output;
    its own <w:r> wrapper is not reproduced.
    """
    xml_before: str = ''
    props: str = ''
    texts: List[Text] = field(default_factory=list)

    def to_xml(self) -> str:
        xml = self.xml_before
        if self.texts:
            xml += '<w:r>'
            if self.props:
                xml += f'<w:rPr>{self.props}</w:rPr>'
            xml += ''.join(text.to_xml() for text in self.texts)
            xml += '</w:r>'
        return xml

    def literal_text(self) -> str:
        """Concatenation of all literal texts of this run."""
        return ''.join(text.literal_text for text in self.texts)

    def copy(self) -> 'Run':
        return copy.deepcopy(self)

    def can_absorb(self, next_run: 'Run') -> bool:
        """True if next_run has no markup before it and the same properties."""
        return not next_run.xml_before and next_run.props == self.props

    def merge(self, next_run: 'Run'):
        """
        Absorb the texts of next_run into this run.

        Texts without xml_before are glued onto the last literal; others are
        appended as new leaves so their opaque markup is kept.

        Raises:
            StructuralMismatchError: if properties differ or next_run has markup before it
        """
        if next_run.props != self.props:
            raise StructuralMismatchError(
                f"runs have different properties: '{self.props}' <> '{next_run.props}'"
            )
        if next_run.xml_before:
            raise StructuralMismatchError(
                f"cannot merge -- next run contains xml before the run: {next_run.xml_before}"
            )

        for text in next_run.texts:
            if self.texts and not text.xml_before:
                self.texts[-1].add_literal_text(text.literal_text)
            else:
                self.texts.append(text)

    def remove_caps_property(self) -> bool:
        """
        Strip the caps property and upper-case all literals instead.

        Returns:
            True if the property was present
        """
        new_props, count = CAPS_PROPERTY_PATTERN.subn('', self.props)
        if not count:
            return False
        self.props = new_props
        for text in self.texts:
            text.to_uppercase()
        return True
