"""
ABOUTME: Shared constants for the docx surgeon engine
ABOUTME: Namespace, quasi-parsing regexes and environment defaults
"""

import os
import re


# ============================================================
# Constants
# ============================================================

NS = {
    'w': 'http://schemas.openxmlformats.org/wordprocessingml/2006/main',
}

CONTENT_TYPES_MEMBER = '[Content_Types].xml'
CONTENT_TYPES_NS = 'http://schemas.openxmlformats.org/package/2006/content-types'

# Default author for tracked changes
DEFAULT_AUTHOR = os.getenv('DOCX_SURGEON_AUTHOR', 'AI')

# How an embedded field's code is shown inside its parent's code
# e.g. IF { DOCPROPERTY foo } = "bar" "yes" "no"
EMBEDDED_FIELD_FORMAT = os.getenv('DOCX_SURGEON_EMBEDDED_FIELD_FORMAT', '{%s}')

# Nesting guard for the field resolver stack
MAX_FIELD_DEPTH = 64

# ============================================================
# Quasi-parsing patterns
# ============================================================

# A run: optional properties block (group 1), run contents (group 2)
RUN_PATTERN = re.compile(
    r'<w:r>'
    r'(?:<w:rPr>(.*?)</w:rPr>)?'
    r'(.*?)'
    r'</w:r>',
    re.DOTALL
)

# A text node inside a run: literal contents (group 1)
TEXT_PATTERN = re.compile(
    r'<w:t(?: xml:space="preserve")?>'
    r'(.*?)'
    r'</w:t>',
    re.DOTALL
)

# A field node: kind Simple|Char (group 1), attributes (group 2), inner content (group 3)
FIELD_NODE_PATTERN = re.compile(
    r'<w:fld(Simple|Char)\b\s*([^>]*?)'
    r'(?:/>|>(.*?)</w:fld\1>)',
    re.DOTALL
)

# Instruction text of complex fields: contents (group 1)
INSTR_TEXT_PATTERN = re.compile(r'<w:instrText\b[^>]*?>(.*?)</w:instrText>', re.DOTALL)

# Name of the variable asked by an ASK field
ASK_FIELD_PATTERN = re.compile(r'<w:instrText[^>]*>\s+ASK\s+(\w+)')

# A bookmark boundary: kind Start|End (group 1), attributes (group 2)
BOOKMARK_NODE_PATTERN = re.compile(r'<w:bookmark(Start|End)\b([^>]*?)/>')

# Paragraph open/close tags, used when counting paragraph nesting
PARAGRAPH_TAG_PATTERN = re.compile(r'<(/)?w:p(?=[\s>/])[^>]*?(/)?>')

# Tracked change ids already present in a part
CHANGE_ID_PATTERN = re.compile(r'<w:(?:ins|del)\b[^>]*?\bw:id="(\d+)"')

# ISO date as accepted by w:date
ISO_DATE_PATTERN = re.compile(r'^\d{4}-\d{2}-\d{2}(?:T\d{2}:\d{2}(?::\d{2})?)?Z?$')


# ============================================================
# Helper Functions
# ============================================================

def format_text_preview(text: str, max_len: int = 30) -> str:
    """
    Format text for log output: remove newlines and truncate.

    Args:
        text: Text to format
        max_len: Maximum length before truncation

    Returns:
        Clean, truncated text with "..." suffix if truncated
    """
    clean = text.replace('\n', ' ').replace('\r', '').replace('\t', ' ')
    # Collapse multiple spaces
    while '  ' in clean:
        clean = clean.replace('  ', ' ')
    clean = clean.strip()
    if len(clean) > max_len:
        return clean[:max_len] + "..."
    return clean
