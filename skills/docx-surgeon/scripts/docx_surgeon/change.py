"""
ABOUTME: Tracked change markup (w:del / w:ins) for replacement callbacks
ABOUTME: Revision ids come from an explicit counter object, never from global state
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Callable, Optional, Union

from .common import CHANGE_ID_PATTERN, DEFAULT_AUTHOR, ISO_DATE_PATTERN
from .errors import ConfigurationError
from .run import Run
from .xml_utils import encode_attribute, encode_entities, maybe_preserve_spaces


class RevisionCounter:
    """Monotonic source of w:id values for tracked changes"""

    def __init__(self, next_id: int = 1):
        self.next_id = next_id

    @classmethod
    def from_markup(cls, *xml_parts: str) -> 'RevisionCounter':
        """Start after the highest id used by existing <w:ins>/<w:del> nodes."""
        max_id = 0
        for xml in xml_parts:
            for cid in CHANGE_ID_PATTERN.findall(xml or ''):
                max_id = max(max_id, int(cid))
        return cls(max_id + 1)

    def next(self) -> str:
        """Get next track change ID and increment counter"""
        cid = str(self.next_id)
        self.next_id += 1
        return cid


def _iso_now() -> str:
    return datetime.now(timezone.utc).strftime('%Y-%m-%dT%H:%M:%SZ')


def _check_date(date: str) -> str:
    if not ISO_DATE_PATTERN.match(date):
        raise ConfigurationError(f"{date} is not a date in ISO format yyyy-mm-ddThh:mm:ss")
    return date


@dataclass
class Change:
    """
    One tracked replacement of matched text.

    If a run is given, its properties are copied onto the generated runs.
    xml_before is the opaque markup owed by the text leaf; it is kept in a
    run of its own before the deletion.
    """
    matched: str
    replacement: str = ''
    author: str = DEFAULT_AUTHOR
    date: str = field(default_factory=_iso_now)
    run: Optional[Run] = None
    xml_before: str = ''

    def __post_init__(self):
        _check_date(self.date)

    def to_xml(self, counter: RevisionCounter) -> str:
        rev_id = counter.next()
        props = f'<w:rPr>{self.run.props}</w:rPr>' if self.run and self.run.props else ''
        attrs = f'w:id="{rev_id}" w:author="{encode_attribute(self.author)}" w:date="{self.date}"'

        xml = f'<w:r>{props}{self.xml_before}</w:r>' if self.xml_before else ''

        old = encode_entities(self.matched)
        xml += (f'<w:del {attrs}>'
                f'<w:r>{props}<w:delText{maybe_preserve_spaces(self.matched)}>{old}</w:delText></w:r>'
                f'</w:del>')

        if self.replacement:
            new = encode_entities(self.replacement)
            xml += (f'<w:ins {attrs}>'
                    f'<w:r>{props}<w:t{maybe_preserve_spaces(self.replacement)}>{new}</w:t></w:r>'
                    f'</w:ins>')
        return xml


class ChangeTracker:
    """
    Produces replacement callbacks that record matches as tracked changes.

    Example:
        tracker = ChangeTracker(author='Reviewer')
        part.replace(r'colour', tracker.callback('color'))
    """

    def __init__(self, author: str = DEFAULT_AUTHOR, date: Optional[str] = None,
                 counter: Optional[RevisionCounter] = None):
        self.author = author
        self.date = _check_date(date) if date else _iso_now()
        self.counter = counter or RevisionCounter()

    def change(self, matched: str, replacement: str = '', run: Optional[Run] = None,
               xml_before: str = '') -> str:
        return Change(matched=matched, replacement=replacement, author=self.author,
                      date=self.date, run=run, xml_before=xml_before).to_xml(self.counter)

    def callback(self, replacement: Union[str, Callable[[str], str]]) -> Callable[..., str]:
        """
        Build a TextReplacer callback.

        Args:
            replacement: new text, or a function computing it from the matched text
        """
        def track_change(matched: str, xml_before: str = '', run: Optional[Run] = None, **context) -> str:
            new_text = replacement(matched) if callable(replacement) else replacement
            return self.change(matched, new_text, run=run, xml_before=xml_before)
        return track_change
