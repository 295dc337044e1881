"""
ABOUTME: Decomposes part XML into Run/Text entities and serializes them back
ABOUTME: Quasi-parsing by regex; everything not understood is kept as opaque markup
"""

import logging
from typing import List

from .common import RUN_PATTERN, TEXT_PATTERN
from .run import Run
from .text import Text
from .xml_utils import decode_entities

logger = logging.getLogger(__name__)


def _decompose_texts(run_contents: str) -> List[Text]:
    """Split the interior of one run into Text leaves."""
    texts = []
    pos = 0
    for match in TEXT_PATTERN.finditer(run_contents):
        xml_before = run_contents[pos:match.start()]
        literal = decode_entities(match.group(1))
        if xml_before or literal:
            texts.append(Text(xml_before=xml_before, literal_text=literal))
        pos = match.end()

    # markup after the last <w:t> (e.g. <w:tab/>, <w:br/>) stays inside the run
    tail = run_contents[pos:]
    if tail:
        texts.append(Text(xml_before=tail, literal_text=''))
    return texts


def decompose(xml: str, keep_empty_runs: bool = False) -> List[Run]:
    """
    Split XML contents into a list of Run objects.

    Each run owns the opaque markup found before it. Markup after the last
    run is returned as a final run without texts, so that serialize() can
    restore the complete contents.

    Text nodes are rebuilt from their decoded literals, so the round trip is
    exact only for canonical <w:t> markup: xml:space="preserve" is kept only
    where the literal has leading or trailing whitespace, and references
    other than &amp; &lt; &gt; come back as plain characters
    (&quot; -> ", &#233; -> é).

    Args:
        xml: XML contents of one package part (or any fragment of it)
        keep_empty_runs: if True, runs without any text leaf are kept verbatim
            as opaque markup instead of being dropped

    Returns:
        List of Run objects in document order
    """
    runs = []
    pos = 0
    pending_xml = ''
    for match in RUN_PATTERN.finditer(xml):
        xml_before = pending_xml + xml[pos:match.start()]
        pending_xml = ''
        pos = match.end()

        texts = _decompose_texts(match.group(2) or '')
        if not texts and keep_empty_runs:
            pending_xml = xml_before + match.group(0)
            continue
        if not xml_before and not texts:
            continue
        runs.append(Run(xml_before=xml_before, props=match.group(1) or '', texts=texts))

    tail = pending_xml + xml[pos:]
    if tail:
        runs.append(Run(xml_before=tail))

    logger.debug("[Decompose] %d runs from %d chars", len(runs), len(xml))
    return runs


def serialize(runs: List[Run]) -> str:
    """Reassemble runs into XML contents; left inverse of decompose()."""
    return ''.join(run.to_xml() for run in runs)
