"""
ABOUTME: Removes cosmetic markup that fragments runs without changing the rendering
"""

import logging
import re
from typing import Dict, Union

from .errors import ConfigurationError

logger = logging.getLogger(__name__)

NOISE_REDUCTION_PATTERNS: Dict[str, re.Pattern] = {
    'proof_checking': re.compile(r'<w:(?:proofErr[^>]+|noProof/)>'),
    'revision_ids': re.compile(r'\sw:rsid\w+="[^"]+"'),
    'complex_script_bold': re.compile(r'<w:bCs/>'),
    'page_breaks': re.compile(r'<w:lastRenderedPageBreak/>'),
    'language': re.compile(r'<w:lang w:val="[^/>]+/>'),
    'empty_run_props': re.compile(r'<w:rPr></w:rPr>'),
    'soft_hyphens': re.compile(r'<w:softHyphen/>'),
}

# Order matters: empty_run_props must come after the removals that empty them
NOISE_REDUCTION_LIST = [
    'proof_checking', 'revision_ids', 'complex_script_bold', 'page_breaks',
    'language', 'empty_run_props', 'soft_hyphens',
]


def noise_reduction_pattern(name: str) -> re.Pattern:
    """Return the builtin pattern registered under name."""
    try:
        return NOISE_REDUCTION_PATTERNS[name]
    except KeyError:
        raise ConfigurationError(f"noise_reduction_pattern('{name}'): unknown pattern name") from None


def reduce_noise(xml: str, *noises: Union[str, re.Pattern]) -> str:
    """
    Remove all matches of the given patterns from XML contents.

    Patterns are builtin names or compiled regexes. A regex with a capturing
    group is replaced by its first group instead of being removed.
    """
    patterns = [noise if isinstance(noise, re.Pattern) else noise_reduction_pattern(noise)
                for noise in noises]

    for pattern in patterns:
        if pattern.groups:
            xml = pattern.sub(lambda m: m.group(1) or '', xml)
        else:
            xml = pattern.sub('', xml)
    logger.debug("[Noise] applied %d patterns", len(patterns))
    return xml


def reduce_all_noises(xml: str) -> str:
    return reduce_noise(xml, *NOISE_REDUCTION_LIST)
