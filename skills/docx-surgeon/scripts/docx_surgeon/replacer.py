"""
ABOUTME: Pattern-based replacement inside text leaves with inline markup splicing
ABOUTME: Literal fragments are rebuilt as minimal runs; callback markup is spliced verbatim
"""

import enum
import logging
import re
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Union

from .errors import ConfigurationError
from .run import Run
from .text import Text

logger = logging.getLogger(__name__)

ReplacementCallback = Callable[..., str]


class EmitLevel(enum.Enum):
    """Where the next emitted fragment lands"""
    INSIDE_RUN = 'inside_run'   # within the enclosing run: bare <w:t> leaves are legal
    RUN_LEVEL = 'run_level'     # a complete run was just emitted: text must get its own <w:r>


@dataclass
class ReplacedFragment:
    """XML produced for one text leaf, and the level at which it ends"""
    xml: str
    level: EmitLevel


@dataclass
class _FragmentBuilder:
    """Accumulates the output for one text leaf"""
    run: Run
    xml_before: str                # owed opaque markup; consumed at most once
    xml: str = ''
    pending_text: str = ''
    level: EmitLevel = EmitLevel.INSIDE_RUN

    def flush_as_run(self):
        """Emit the pending literal as a new single-text run with the enclosing run's properties"""
        if not self.pending_text:
            return
        new_run = Run(props=self.run.props,
                      texts=[Text(xml_before=self.xml_before, literal_text=self.pending_text)])
        self.xml += new_run.to_xml()
        self.xml_before = ''
        self.pending_text = ''
        self.level = EmitLevel.RUN_LEVEL

    def splice_markup(self, markup: str):
        self.flush_as_run()
        self.xml += markup
        self.xml_before = ''
        self.level = EmitLevel.RUN_LEVEL

    def finish(self) -> ReplacedFragment:
        if self.level is EmitLevel.RUN_LEVEL:
            self.flush_as_run()
        elif self.pending_text or self.xml_before:
            # nothing structural was emitted: stay a bare leaf inside the enclosing run
            self.xml += Text(xml_before=self.xml_before, literal_text=self.pending_text).to_xml()
            self.xml_before = ''
            self.pending_text = ''
        return ReplacedFragment(self.xml, self.level)


@dataclass
class TextReplacer:
    """
    Replace matches of a pattern within the literal text of runs.

    The replacement is either a plain string (always literal text) or a
    callback invoked for each match as::

        replacement(matched=..., xml_before=..., run=..., **context)

    where xml_before is the opaque markup preceding the text leaf, passed
    only to the first fragment of the leaf (empty otherwise). A callback
    result starting with '<' is spliced as raw run-level markup and then
    owns that xml_before; any other result is literal text.

    Matches never cross text leaves, so runs should normally be merged first.
    """
    pattern: Union[str, re.Pattern]
    replacement: Union[str, ReplacementCallback]
    context: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        if isinstance(self.pattern, str):
            try:
                self.pattern = re.compile(self.pattern)
            except re.error as e:
                raise ConfigurationError(f"invalid replacement pattern {self.pattern!r}: {e}") from e
        elif not isinstance(self.pattern, re.Pattern):
            raise ConfigurationError(
                f"pattern should be a string or a compiled regex, got {type(self.pattern).__name__}"
            )
        if not isinstance(self.replacement, str) and not callable(self.replacement):
            raise ConfigurationError(
                f"replacement should be a string or a callable, got {type(self.replacement).__name__}"
            )
        reserved = {'matched', 'xml_before', 'run'} & set(self.context)
        if reserved:
            raise ConfigurationError(
                f"replacement context cannot override: {', '.join(sorted(reserved))}"
            )

    def _replacement_for(self, matched: str, xml_before: str, run: Run) -> str:
        if isinstance(self.replacement, str):
            return self.replacement
        return self.replacement(matched=matched, xml_before=xml_before, run=run, **self.context)

    def replace_text(self, text: Text, run: Run) -> ReplacedFragment:
        """
        Apply the replacement to one text leaf of the given run.

        With no match the result is exactly text.to_xml() at INSIDE_RUN level.
        """
        literal = text.literal_text
        if not literal:
            return ReplacedFragment(text.to_xml(), EmitLevel.INSIDE_RUN)

        builder = _FragmentBuilder(run=run, xml_before=text.xml_before)
        pos = 0
        for match in self.pattern.finditer(literal):
            matched = match.group(0)
            if not matched:
                continue
            builder.pending_text += literal[pos:match.start()]
            pos = match.end()

            if isinstance(self.replacement, str):
                builder.pending_text += self.replacement
                continue

            is_first_fragment = not builder.xml and not builder.pending_text
            offered_xml_before = builder.xml_before if is_first_fragment else ''
            replacement = self._replacement_for(matched, offered_xml_before, run)
            if replacement is None:
                replacement = ''
            if replacement.startswith('<'):
                if offered_xml_before:
                    builder.xml_before = ''
                builder.splice_markup(replacement)
            else:
                builder.pending_text += replacement

        builder.pending_text += literal[pos:]
        return builder.finish()

    def replace_run(self, run: Run) -> str:
        """
        Apply the replacement to every text leaf of a run.

        Consecutive bare leaves are wrapped in one <w:r> carrying the run's
        properties; run-level fragments are spliced between those wrappers.
        With no match the result is exactly run.to_xml().
        """
        xml = run.xml_before
        bare_leaves = ''

        def flush_bare_leaves():
            nonlocal xml, bare_leaves
            if bare_leaves:
                xml += _wrap_in_run(bare_leaves, run.props)
                bare_leaves = ''

        for text in run.texts:
            fragment = self.replace_text(text, run)
            if fragment.level is EmitLevel.INSIDE_RUN:
                bare_leaves += fragment.xml
            else:
                flush_bare_leaves()
                xml += fragment.xml
        flush_bare_leaves()
        return xml

    def replace_runs(self, runs: List[Run]) -> str:
        """Apply the replacement to all runs and return the new XML contents."""
        xml = ''.join(self.replace_run(run) for run in runs)
        logger.debug("[Replace] pattern %r over %d runs", self.pattern.pattern, len(runs))
        return xml


def _wrap_in_run(inner_xml: str, props: str) -> str:
    xml = '<w:r>'
    if props:
        xml += f'<w:rPr>{props}</w:rPr>'
    return xml + inner_xml + '</w:r>'


def replace(text: Text,
            pattern: Union[str, re.Pattern],
            replacement: Union[str, ReplacementCallback],
            run: Optional[Run] = None,
            **context) -> str:
    """
    Replace matches within a single text leaf and return the XML fragment.

    Args:
        text: The text leaf
        pattern: Regex (string or compiled)
        replacement: Literal string or callback
        run: Enclosing run, whose properties are copied onto new runs
        **context: Extra keyword arguments passed to the callback

    Returns:
        XML fragment; equal to text.to_xml() when there is no match
    """
    replacer = TextReplacer(pattern, replacement, context)
    return replacer.replace_text(text, run or Run()).xml
