"""
ABOUTME: Text leaf of a run: opaque markup before it plus one literal string
"""

from dataclasses import dataclass

from .xml_utils import encode_entities, maybe_preserve_spaces


@dataclass
class Text:
    """
    One <w:t> leaf and the opaque markup immediately preceding it inside a run.

    literal_text is stored decoded; it is re-encoded on serialization.
    """
    xml_before: str = ''
    literal_text: str = ''

    def add_literal_text(self, more_text: str):
        self.literal_text += more_text

    def to_uppercase(self):
        self.literal_text = self.literal_text.upper()

    def to_xml(self) -> str:
        xml = self.xml_before
        if self.literal_text:
            space_attr = maybe_preserve_spaces(self.literal_text)
            xml += f'<w:t{space_attr}>{encode_entities(self.literal_text)}</w:t>'
        return xml
