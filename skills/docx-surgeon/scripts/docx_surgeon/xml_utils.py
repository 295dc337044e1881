"""
ABOUTME: XML string helpers shared by the surgeon modules
ABOUTME: Entity encoding/decoding, xml:space handling and attribute parsing
"""

import re
from html import unescape
from typing import Dict


# Attribute pairs inside an opening tag, e.g. w:fldCharType="begin"
ATTR_PATTERN = re.compile(r'([a-zA-Z_][\w:.-]*)="([^"]*)"')

PRESERVE_SPACE_ATTR = ' xml:space="preserve"'


def sanitize_xml_string(text: str) -> str:
    """
    Remove control characters that are illegal in XML 1.0.

    XML 1.0 allows: #x9 (tab), #xA (LF), #xD (CR), and #x20-#xD7FF, #xE000-#xFFFD, #x10000-#x10FFFF
    This function removes all other control characters (0x00-0x08, 0x0B, 0x0C, 0x0E-0x1F).

    Args:
        text: Text that may contain control characters

    Returns:
        Sanitized text safe for XML. Returns input unchanged if not a non-empty string.
    """
    if not text or not isinstance(text, str):
        return text
    # Keep: \t (0x09), \n (0x0A), \r (0x0D)
    illegal_chars = ''.join(
        chr(c) for c in range(0x20)
        if c not in (0x09, 0x0A, 0x0D)
    )
    return text.translate(str.maketrans('', '', illegal_chars))


def encode_entities(text: str) -> str:
    """
    Escape literal text for insertion inside a <w:t> node.

    Only &, < and > are encoded: Word writes quotes and apostrophes verbatim
    in text nodes, and encoding them would break byte-exact round trips.
    """
    text = sanitize_xml_string(text)
    return (text
        .replace('&', '&amp;')
        .replace('<', '&lt;')
        .replace('>', '&gt;'))


def encode_attribute(text: str) -> str:
    """Escape a value for a double-quoted attribute such as w:author."""
    return encode_entities(text).replace('"', '&quot;')


def decode_entities(text: str) -> str:
    """Decode character and entity references found in text node contents."""
    if '&' not in text:
        return text
    return unescape(text)


def maybe_preserve_spaces(text: str) -> str:
    """
    Return the xml:space attribute needed for a literal, or an empty string.

    Word collapses leading/trailing whitespace of <w:t> nodes unless they
    carry xml:space="preserve".
    """
    if text[:1].isspace() or text[-1:].isspace():
        return PRESERVE_SPACE_ATTR
    return ''


def parse_attrs(attrs_xml: str) -> Dict[str, str]:
    """
    Parse the attribute list of an opening tag into a dict.

    Keys keep their namespace prefix ("w:instr"); values are entity-decoded.

    Examples:
        'w:fldCharType="begin" w:dirty="true"' -> {'w:fldCharType': 'begin', 'w:dirty': 'true'}
    """
    return {name: decode_entities(value) for name, value in ATTR_PATTERN.findall(attrs_xml or '')}
