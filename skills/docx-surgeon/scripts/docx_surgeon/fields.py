"""
ABOUTME: Resolves Word fields (complex fldChar sequences and fldSimple nodes)
ABOUTME: Linear scan with an explicit stack; nested fields are folded into their parent
"""

import enum
import logging
from dataclasses import dataclass
from typing import Callable, Iterator, List, Optional

from .common import (
    ASK_FIELD_PATTERN,
    EMBEDDED_FIELD_FORMAT,
    FIELD_NODE_PATTERN,
    INSTR_TEXT_PATTERN,
    MAX_FIELD_DEPTH,
)
from .errors import StructuralMismatchError
from .xml_utils import decode_entities, encode_entities, maybe_preserve_spaces, parse_attrs

logger = logging.getLogger(__name__)

FieldTransform = Callable[[str, str], str]


class FieldNodeKind(enum.Enum):
    BEGIN = 'begin'
    SEPARATE = 'separate'
    END = 'end'
    SIMPLE = 'simple'
    TAIL = 'tail'       # markup after the last field node


class FieldStatus(enum.Enum):
    BEGIN = 'begin'         # collecting code
    SEPARATE = 'separate'   # collecting result
    END = 'end'             # closed


@dataclass
class FieldBoundaryNode:
    """One field marker found by the split, with the opaque markup before it"""
    kind: FieldNodeKind
    xml_before: str = ''
    instr: str = ''         # simple fields only
    content: str = ''       # simple fields only


@dataclass
class FieldRecord:
    """
    A resolved field.

    code is a plain string (entities decoded), e.g. ' IF {DOCPROPERTY foo} = "bar" "yes" "no" ';
    result is the markup of the currently displayed value.
    The record closing the list has is_field=False and only carries trailing markup.
    """
    xml_before: str = ''
    code: str = ''
    result: str = ''
    status: FieldStatus = FieldStatus.BEGIN
    is_field: bool = True


def _collect_instr_text(xml: str) -> str:
    return ''.join(decode_entities(instr) for instr in INSTR_TEXT_PATTERN.findall(xml))


def split_into_field_nodes(xml: str) -> Iterator[FieldBoundaryNode]:
    """Split XML into field boundary nodes; the last node is always a TAIL."""
    pos = 0
    for match in FIELD_NODE_PATTERN.finditer(xml):
        xml_before = xml[pos:match.start()]
        pos = match.end()
        field_kind, attrs_xml, content = match.group(1), match.group(2), match.group(3) or ''
        attrs = parse_attrs(attrs_xml)

        if field_kind == 'Simple':
            yield FieldBoundaryNode(FieldNodeKind.SIMPLE, xml_before,
                                    instr=attrs.get('w:instr', ''), content=content)
            continue

        char_type = attrs.get('w:fldCharType', '')
        try:
            kind = FieldNodeKind(char_type)
        except ValueError:
            kind = None
        if kind not in (FieldNodeKind.BEGIN, FieldNodeKind.SEPARATE, FieldNodeKind.END):
            raise StructuralMismatchError(
                f"unknown w:fldCharType '{char_type}' in {match.group(0)}"
            )
        yield FieldBoundaryNode(kind, xml_before)

    yield FieldBoundaryNode(FieldNodeKind.TAIL, xml[pos:])


class FieldResolver:
    """
    Stack machine turning field boundary nodes into top-level FieldRecords.

    Closed top-level fields stay on the stack; a field closed while its
    parent is still collecting code is shown inside the parent's code
    (embedded_field_format), and a field closed while its parent is
    collecting its result is merged into that result.
    """

    def __init__(self, embedded_field_format: str = EMBEDDED_FIELD_FORMAT,
                 max_depth: int = MAX_FIELD_DEPTH):
        self.embedded_field_format = embedded_field_format
        self.max_depth = max_depth
        self.stack: List[FieldRecord] = []
        self.open_count = 0

    def _top(self) -> Optional[FieldRecord]:
        return self.stack[-1] if self.stack else None

    def _open_parent(self) -> Optional[FieldRecord]:
        top = self._top()
        if top is not None and top.status is not FieldStatus.END:
            return top
        return None

    def _fold_into_parent(self, parent: FieldRecord, child: FieldRecord):
        if parent.status is FieldStatus.BEGIN:
            # embedded within the "code" part of the parent
            parent.code += self.embedded_field_format % child.code
        else:
            # embedded within the "result" part of the parent
            parent.result += child.xml_before + child.result

    def _begin(self, node: FieldBoundaryNode):
        if self.open_count >= self.max_depth:
            raise StructuralMismatchError(
                f"fields nested deeper than {self.max_depth} levels"
            )
        parent = self._open_parent()
        if parent is not None and parent.status is FieldStatus.BEGIN:
            # instructions of the parent written before this nested field
            parent.code += _collect_instr_text(node.xml_before)
        self.stack.append(FieldRecord(xml_before=node.xml_before))
        self.open_count += 1

    def _separate(self, node: FieldBoundaryNode):
        current = self._top()
        if current is None or current.status is not FieldStatus.BEGIN:
            raise StructuralMismatchError(
                'met <w:fldChar w:fldCharType="separate"> without an open w:fldCharType="begin"'
            )
        current.code += _collect_instr_text(node.xml_before)
        current.status = FieldStatus.SEPARATE

    def _end(self, node: FieldBoundaryNode):
        current = self._top()
        if current is None or current.status is FieldStatus.END:
            raise StructuralMismatchError(
                'met <w:fldChar w:fldCharType="end"> without an open w:fldCharType="begin"'
            )
        if current.status is FieldStatus.BEGIN:
            # field without a separator: everything seen was instructions
            current.code += _collect_instr_text(node.xml_before)
        else:
            current.result += node.xml_before
        current.status = FieldStatus.END
        self.open_count -= 1

        if len(self.stack) >= 2 and self.stack[-2].status is not FieldStatus.END:
            child = self.stack.pop()
            self._fold_into_parent(self.stack[-1], child)

    def _simple(self, node: FieldBoundaryNode):
        record = FieldRecord(xml_before=node.xml_before, code=node.instr,
                             result=node.content, status=FieldStatus.END)
        parent = self._open_parent()
        if parent is None:
            self.stack.append(record)
            return
        if parent.status is FieldStatus.BEGIN:
            parent.code += _collect_instr_text(node.xml_before)
        self._fold_into_parent(parent, record)

    def feed(self, node: FieldBoundaryNode):
        if node.kind is FieldNodeKind.BEGIN:
            self._begin(node)
        elif node.kind is FieldNodeKind.SEPARATE:
            self._separate(node)
        elif node.kind is FieldNodeKind.END:
            self._end(node)
        elif node.kind is FieldNodeKind.SIMPLE:
            self._simple(node)
        else:
            if self.open_count:
                raise StructuralMismatchError(
                    f"{self.open_count} field(s) not terminated by w:fldCharType=\"end\""
                )
            self.stack.append(FieldRecord(xml_before=node.xml_before,
                                          status=FieldStatus.END, is_field=False))

    def resolve(self, xml: str) -> List[FieldRecord]:
        self.stack = []
        self.open_count = 0
        for node in split_into_field_nodes(xml):
            self.feed(node)
        logger.debug("[Fields] %d top-level fields", sum(1 for f in self.stack if f.is_field))
        return self.stack


def resolve_fields(xml: str, embedded_field_format: str = EMBEDDED_FIELD_FORMAT) -> List[FieldRecord]:
    """
    Resolve all fields of the XML contents into top-level records.

    Returns:
        List of FieldRecord in document order; the last one (is_field=False)
        holds the markup after the last field
    """
    return FieldResolver(embedded_field_format).resolve(xml)


def rewrite_fields(xml: str, field_transform: FieldTransform,
                   embedded_field_format: str = EMBEDDED_FIELD_FORMAT) -> str:
    """
    Replace every top-level field by field_transform(code, result).

    The callback should return markup suitable to be inserted within a run.
    Markup around fields is passed through unchanged.
    """
    parts = []
    for record in resolve_fields(xml, embedded_field_format):
        parts.append(record.xml_before)
        if record.is_field:
            parts.append(field_transform(record.code, record.result))
    return ''.join(parts)


def unlink_fields(xml: str, embedded_field_format: str = EMBEDDED_FIELD_FORMAT) -> str:
    """Replace each field by its current result (like Ctrl-Shift-F9 in Word)."""
    return rewrite_fields(xml, lambda code, result: result, embedded_field_format)


def reveal_fields(xml: str, embedded_field_format: str = EMBEDDED_FIELD_FORMAT) -> str:
    """Replace each field by a visible text node showing its code in curly braces."""
    def revealer(code: str, result: str) -> str:
        shown = f'{{{code}}}'
        return f'<w:t{maybe_preserve_spaces(shown)}>{encode_entities(shown)}</w:t>'
    return rewrite_fields(xml, revealer, embedded_field_format)


def ask_field_names(xml: str) -> List[str]:
    """Names of the variables of all ASK fields, e.g. ' ASK client "Name?" ' -> ['client']"""
    return ASK_FIELD_PATTERN.findall(xml)
