"""
This mixin class implements the run-level workflows of a package part: noise reduction, run merging, cleanup and text replacement.
"""

import logging
import re
from typing import Any, Dict, Union

from .bookmarks import MATCH_ANY_NAME, suppress_bookmarks
from .decomposer import decompose, serialize
from .errors import ConfigurationError
from .fields import ask_field_names, unlink_fields
from .merger import MergeOptions, merge_all
from .noise import noise_reduction_pattern, reduce_noise, NOISE_REDUCTION_LIST
from .replacer import ReplacementCallback, TextReplacer

logger = logging.getLogger(__name__)


class CleanupMixin:
    def reduce_noise(self, *noises: Union[str, re.Pattern]):
        """Remove matches of builtin pattern names or compiled regexes from the contents."""
        self.contents = reduce_noise(self.contents, *noises)

    def noise_reduction_pattern(self, name: str) -> re.Pattern:
        return noise_reduction_pattern(name)

    def reduce_all_noises(self):
        self.reduce_noise(*NOISE_REDUCTION_LIST)

    def merge_runs(self, **options):
        """
        Merge adjacent runs having the same properties and no markup in between.

        This is a prerequisite for replacements, because Word often splits
        runs across sentences or even in the middle of words.

        Args:
            no_caps: if true, runs with the caps property are upper-cased and
                the property removed, which makes more merges possible
        """
        merge_options = MergeOptions.from_dict(options)
        self.contents = serialize(merge_all(self.runs, merge_options))

    def cleanup_xml(self, **merge_args):
        """
        Remove unnecessary nodes so that replacements work better.

        Successively reduces noise, unlinks fields, suppresses bookmarks
        (erasing the ranges of ASK bookmarks, which Word never displays) and
        merges runs. Done only once per contents.
        """
        if self.was_cleaned_up:
            return
        merge_options = MergeOptions.from_dict(merge_args)

        xml = reduce_noise(self.contents, *NOISE_REDUCTION_LIST)
        ask_names = ask_field_names(xml)
        xml = unlink_fields(xml)
        xml = suppress_bookmarks(xml, full_range=ask_names, markup_only=MATCH_ANY_NAME)
        self.contents = serialize(merge_all(decompose(xml), merge_options))

        logger.debug("[Cleanup] part '%s' cleaned up (%d ASK fields)", self.part_name, len(ask_names))
        self.was_cleaned_up = True

    def replace(self, pattern, replacement: Union[str, ReplacementCallback],
                cleanup_xml: Union[bool, Dict[str, Any]] = True,
                dont_overwrite_contents: bool = False,
                **context) -> str:
        """
        Replace all matches of pattern within the text nodes.

        Args:
            pattern: Regex (string or compiled); matches never cross text nodes
            replacement: Literal string, or callback receiving matched,
                xml_before, run and the extra context arguments
            cleanup_xml: True to call cleanup_xml() first, a dict of merge
                args for it, or False to keep the XML as is
            dont_overwrite_contents: only return the new XML
            **context: passed to the callback

        Returns:
            The new XML contents
        """
        replacer = TextReplacer(pattern, replacement, context)

        if cleanup_xml:
            cleanup_args = {} if cleanup_xml is True else cleanup_xml
            if not isinstance(cleanup_args, dict):
                raise ConfigurationError(
                    f"replace(): arg 'cleanup_xml' should be a bool or a dict, got {cleanup_xml!r}"
                )
            self.cleanup_xml(**cleanup_args)

        xml = replacer.replace_runs(self.runs)
        if not dont_overwrite_contents:
            self.contents = xml
        return xml
