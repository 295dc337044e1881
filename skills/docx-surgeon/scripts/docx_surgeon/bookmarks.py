"""
ABOUTME: Bookmark suppression and revelation on raw part XML
ABOUTME: Single pass correlating bookmarkStart/bookmarkEnd markers by id
"""

import enum
import logging
import re
from dataclasses import dataclass, field
from typing import Callable, Dict, Iterable, List, Optional, Union

from .common import BOOKMARK_NODE_PATTERN, PARAGRAPH_TAG_PATTERN
from .errors import ConfigurationError, StructuralMismatchError
from .xml_utils import encode_entities, parse_attrs

logger = logging.getLogger(__name__)

HIGHLIGHT_COLORS = frozenset([
    'black', 'blue', 'cyan', 'darkBlue', 'darkCyan', 'darkGray', 'darkGreen',
    'darkMagenta', 'darkRed', 'darkYellow', 'green', 'lightGray', 'magenta',
    'none', 'red', 'white', 'yellow',
])

PolicyLike = Union[None, str, re.Pattern, Callable[[str], bool], Iterable]


class BookmarkKind(enum.Enum):
    START = 'Start'
    END = 'End'
    TAIL = ''           # markup after the last bookmark node


@dataclass
class BookmarkBoundary:
    """
    A bookmark marker and the XML before it.

    name is only recorded on Start nodes. Clearing node_xml erases the
    marker; clearing xml_before erases the content before it.
    """
    kind: BookmarkKind
    id: str = ''
    name: str = ''
    xml_before: str = ''
    node_xml: str = ''

    def prepend_xml(self, more_xml: str):
        self.node_xml = more_xml + self.node_xml

    def append_xml(self, more_xml: str):
        self.node_xml += more_xml


def split_into_bookmark_nodes(xml: str) -> List[BookmarkBoundary]:
    """Split XML into bookmark nodes; the last node is always a TAIL carrying trailing markup."""
    nodes = []
    pos = 0
    for match in BOOKMARK_NODE_PATTERN.finditer(xml):
        attrs = parse_attrs(match.group(2))
        kind = BookmarkKind(match.group(1))
        nodes.append(BookmarkBoundary(
            kind=kind,
            id=attrs.get('w:id', ''),
            name=attrs.get('w:name', '') if kind is BookmarkKind.START else '',
            xml_before=xml[pos:match.start()],
            node_xml=match.group(0),
        ))
        pos = match.end()
    nodes.append(BookmarkBoundary(kind=BookmarkKind.TAIL, xml_before=xml[pos:]))
    return nodes


def join_bookmark_nodes(nodes: List[BookmarkBoundary]) -> str:
    return ''.join(node.xml_before + node.node_xml for node in nodes)


# ============================================================
# Name policies
# ============================================================

@dataclass
class NamePolicy:
    """
    Predicate over bookmark names.

    Built from None (matches nothing), an exact name, a compiled regex
    (searched), a callable, or an iterable of any of those.
    """
    predicates: List[Callable[[str], bool]] = field(default_factory=list)

    @classmethod
    def build(cls, policy: PolicyLike) -> 'NamePolicy':
        if isinstance(policy, NamePolicy):
            return policy
        if policy is None:
            return cls()
        if isinstance(policy, str):
            return cls([lambda name, exact=policy: name == exact])
        if isinstance(policy, re.Pattern):
            return cls([lambda name, rx=policy: rx.search(name) is not None])
        if callable(policy):
            return cls([lambda name, func=policy: bool(func(name))])
        if isinstance(policy, (list, tuple, set, frozenset)):
            predicates = []
            for item in policy:
                if item is None or isinstance(item, (list, tuple, set, frozenset)):
                    raise ConfigurationError(f"invalid item in bookmark name policy: {item!r}")
                predicates.extend(cls.build(item).predicates)
            return cls(predicates)
        raise ConfigurationError(f"invalid bookmark name policy: {policy!r}")

    def matches(self, name: str) -> bool:
        return any(predicate(name) for predicate in self.predicates)


# ============================================================
# Suppression
# ============================================================

MATCH_ANY_NAME = re.compile(r'.')


def suppress_bookmarks(xml: str,
                       full_range: PolicyLike = None,
                       markup_only: PolicyLike = None,
                       strict_orphans: bool = False,
                       **unknown_options) -> str:
    """
    Erase bookmarks from XML contents.

    Args:
        xml: XML contents
        full_range: names whose markers AND inner content are erased
        markup_only: names whose markers are erased, keeping inner content
        strict_orphans: raise on a bookmarkEnd without a recorded start
            instead of silently clearing it

    With neither policy given, the markup of every named bookmark is erased.

    Raises:
        ConfigurationError: invalid policy or unknown option name
        StructuralMismatchError: duplicate start id, or a full-range erasure
            that would cut through another bookmark
    """
    if unknown_options:
        raise ConfigurationError(
            f"suppress_bookmarks(): invalid option(s): {', '.join(sorted(unknown_options))}"
        )
    if full_range is None and markup_only is None:
        markup_only = MATCH_ANY_NAME
    full_range_policy = NamePolicy.build(full_range)
    markup_only_policy = NamePolicy.build(markup_only)

    nodes = split_into_bookmark_nodes(xml)
    start_ix_by_id: Dict[str, int] = {}
    name_by_id: Dict[str, str] = {}
    n_erased = 0

    for ix, node in enumerate(nodes):
        if node.kind is BookmarkKind.START:
            if node.id in start_ix_by_id:
                raise StructuralMismatchError(
                    f"duplicate bookmarkStart with w:id=\"{node.id}\" (bookmark '{node.name}')"
                )
            start_ix_by_id[node.id] = ix
            name_by_id[node.id] = node.name

        elif node.kind is BookmarkKind.END:
            start_ix = start_ix_by_id.pop(node.id, None)
            if start_ix is None:
                # the start was within a range already erased (e.g. an unlinked field)
                if strict_orphans:
                    raise StructuralMismatchError(
                        f"bookmarkEnd with w:id=\"{node.id}\" has no matching bookmarkStart"
                    )
                logger.debug("[Bookmarks] clearing orphan end w:id=%s", node.id)
                node.node_xml = ''
                continue

            start_node = nodes[start_ix]
            bookmark_name = start_node.name
            should_erase_range = full_range_policy.matches(bookmark_name)
            if not should_erase_range and not markup_only_policy.matches(bookmark_name):
                continue

            node.node_xml = ''
            start_node.node_xml = ''
            n_erased += 1

            if should_erase_range:
                for inner_node in nodes[start_ix + 1:ix + 1]:
                    if inner_node.node_xml:
                        inner_name = inner_node.name or name_by_id.get(inner_node.id, '')
                        raise StructuralMismatchError(
                            f"cannot erase contents of bookmark '{bookmark_name}' "
                            f"because it contains the {inner_node.kind.value.lower()} "
                            f"of bookmark '{inner_name}'"
                        )
                    inner_node.xml_before = ''

    logger.debug("[Bookmarks] %d bookmarks erased", n_erased)
    return join_bookmark_nodes(nodes)


# ============================================================
# Revelation
# ============================================================

class ParagraphTracker:
    """Counts paragraph nesting so that inserted runs get a <w:p> when needed"""

    def __init__(self):
        self.depth = 0

    def count_paragraphs(self, xml: str):
        for match in PARAGRAPH_TAG_PATTERN.finditer(xml):
            if match.group(2):
                continue  # self-closing <w:p/> doesn't change depth
            self.depth += -1 if match.group(1) else 1

    def maybe_add_paragraph(self, xml: str) -> str:
        if xml and self.depth <= 0:
            return f'<w:p>{xml}</w:p>'
        return xml


@dataclass
class BookmarkMarker:
    """
    Builds the visible runs shown around bookmarks.

    start/end are %-format templates receiving the bookmark name; props is a
    template for the run properties receiving the color. Bookmarks whose
    name matches ignore (default: technical names like _GoBack) are skipped.
    """
    color: str = 'yellow'
    props: str = '<w:highlight w:val="%s"/>'
    start: str = '<%s>'
    end: str = '</%s>'
    ignore: Optional[re.Pattern] = re.compile(r'^_')

    def __post_init__(self):
        if self.color not in HIGHLIGHT_COLORS:
            raise ConfigurationError(
                f"invalid color: {self.color} (expected one of {', '.join(sorted(HIGHLIGHT_COLORS))})"
            )

    def mark(self, bookmark_name: str, is_end_node: bool) -> str:
        if self.ignore is not None and self.ignore.search(bookmark_name):
            return ''
        template = self.end if is_end_node else self.start
        text = template % bookmark_name if '%s' in template else template
        props = self.props % self.color if '%s' in self.props else self.props
        return f'<w:r><w:rPr>{props}</w:rPr><w:t>{encode_entities(text)}</w:t></w:r>'


def reveal_bookmarks(xml: str, **marking_args) -> str:
    """
    Insert a visible run before each bookmark start and after each bookmark end.

    Args:
        xml: XML contents
        **marking_args: color, props, start, end, ignore (see BookmarkMarker)
    """
    try:
        marker = BookmarkMarker(**marking_args)
    except TypeError as e:
        raise ConfigurationError(f"reveal_bookmarks: {e}") from e
    tracker = ParagraphTracker()
    name_by_id: Dict[str, str] = {}

    nodes = split_into_bookmark_nodes(xml)
    for node in nodes:
        tracker.count_paragraphs(node.xml_before)
        if node.kind is BookmarkKind.START:
            name_by_id[node.id] = node.name
            node.prepend_xml(tracker.maybe_add_paragraph(marker.mark(node.name, False)))
        elif node.kind is BookmarkKind.END:
            name = name_by_id.get(node.id, '')
            node.append_xml(tracker.maybe_add_paragraph(marker.mark(name, True)))

    return join_bookmark_nodes(nodes)
