"""
ABOUTME: String-in/string-out entry points of the engine
ABOUTME: decompose -> merge -> replace -> reconstruct
"""

from typing import Any, Dict, List, Mapping, Optional, Union

from .decomposer import decompose, serialize
from .merger import MergeOptions, merge_all
from .replacer import ReplacementCallback, TextReplacer
from .run import Run

MergeOptionsArg = Union[MergeOptions, Mapping[str, Any], None]


def decompose_only(xml: str, keep_empty_runs: bool = False) -> List[Run]:
    """Decompose XML into runs without any further processing."""
    return decompose(xml, keep_empty_runs=keep_empty_runs)


def merge_only(xml: str, merge_options: MergeOptionsArg = None) -> str:
    """Merge adjacent compatible runs and return the new XML."""
    if not isinstance(merge_options, MergeOptions):
        merge_options = MergeOptions.from_dict(merge_options)
    return serialize(merge_all(decompose(xml), merge_options))


def transform(xml: str, pattern, replacement: Union[str, ReplacementCallback],
              merge_options: MergeOptionsArg = None,
              context: Optional[Dict[str, Any]] = None) -> str:
    """
    Merge runs, then replace pattern matches in their texts.

    All arguments are validated before the XML is decomposed; the input
    string is never modified, the new XML is returned.

    Args:
        xml: XML contents
        pattern: Regex (string or compiled) searched within each text leaf
        replacement: Literal string or callback (see TextReplacer)
        merge_options: MergeOptions or mapping, e.g. {'no_caps': True}
        context: Extra keyword arguments passed to the callback
    """
    if not isinstance(merge_options, MergeOptions):
        merge_options = MergeOptions.from_dict(merge_options)
    replacer = TextReplacer(pattern, replacement, dict(context or {}))
    runs = merge_all(decompose(xml), merge_options)
    return replacer.replace_runs(runs)
