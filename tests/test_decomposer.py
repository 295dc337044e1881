#!/usr/bin/env python3
"""
ABOUTME: Tests decomposition of part XML into runs and its reconstruction.
"""

import sys
from pathlib import Path

import pytest

TESTS_DIR = Path(__file__).parent
sys.path.insert(0, str(TESTS_DIR))

from _surgeon_helpers import bookmark_end, bookmark_start, w_p, w_r  # noqa: E402

from docx_surgeon.decomposer import decompose, serialize  # noqa: E402
from docx_surgeon.run import Run  # noqa: E402
from docx_surgeon.text import Text  # noqa: E402
from docx_surgeon.xml_utils import (  # noqa: E402
    decode_entities,
    encode_attribute,
    encode_entities,
    maybe_preserve_spaces,
    parse_attrs,
    sanitize_xml_string,
)


class TestRoundTrip:
    """serialize(decompose(xml)) == xml"""

    @pytest.mark.parametrize('xml', [
        '',
        '<w:body/>',
        w_p(w_r('Hello')),
        w_p(w_r('Hello ', props='<w:b/>'), w_r('world', props='<w:i/>')),
        w_p(w_r('a', 'b')),
        w_p(bookmark_start(1, 'X'), w_r('inside'), bookmark_end(1)) + w_p(w_r(' spaced ')),
        w_p('<w:r><w:t>one</w:t><w:tab/><w:t>two</w:t><w:br/></w:r>'),
        w_p('<w:r><w:rPr><w:b/></w:rPr><w:tab/></w:r>'),
        w_p(w_r('Tom &amp; Jerry &lt;3')),
        '<w:p>\n  ' + w_r('multi\nline') + '\n</w:p>',
    ])
    def test_round_trip(self, xml):
        """Markup with only well-formed run/text pairs is restored byte for byte"""
        assert serialize(decompose(xml)) == xml

    def test_trailing_markup_kept(self):
        """Markup after the last run becomes a final run without texts"""
        runs = decompose(w_r('x') + '</w:p><w:sectPr/>')
        assert runs[-1].texts == []
        assert runs[-1].xml_before == '</w:p><w:sectPr/>'

    def test_text_nodes_normalized(self):
        """Non-canonical <w:t> markup comes back in canonical form"""
        assert serialize(decompose(w_p('<w:r><w:t xml:space="preserve">abc</w:t></w:r>'))) == w_p(w_r('abc'))
        assert serialize(decompose(w_p(w_r('say &quot;hi&quot; &#233;')))) == w_p(w_r('say "hi" é'))

    def test_markup_without_runs(self):
        """A fragment with no run is kept entirely as opaque markup"""
        runs = decompose('<w:p><w:pPr/></w:p>')
        assert len(runs) == 1
        assert runs[0].xml_before == '<w:p><w:pPr/></w:p>'


class TestDecompose:
    """Structure of decomposed runs"""

    def test_props_and_texts(self):
        """Properties and literal texts are captured"""
        runs = decompose(w_p(w_r('Hello', props='<w:b/>')))
        assert runs[0].xml_before == '<w:p>'
        assert runs[0].props == '<w:b/>'
        assert [t.literal_text for t in runs[0].texts] == ['Hello']

    def test_entities_decoded(self):
        """Literal texts are stored decoded"""
        runs = decompose(w_r('a &amp; b &lt; c'))
        assert runs[0].literal_text() == 'a & b < c'

    def test_inner_markup_is_xml_before(self):
        """Markup between text nodes is the xml_before of the next text"""
        runs = decompose('<w:r><w:t>one</w:t><w:tab/><w:t>two</w:t></w:r>')
        texts = runs[0].texts
        assert texts[0].xml_before == ''
        assert texts[1].xml_before == '<w:tab/>'
        assert texts[1].literal_text == 'two'

    def test_empty_run_dropped(self):
        """A run with no text and no preceding markup is dropped"""
        xml = w_r('a') + '<w:r></w:r>' + w_r('b')
        runs = decompose(xml)
        assert [r.literal_text() for r in runs] == ['a', 'b']
        assert serialize(runs) == w_r('a') + w_r('b')

    def test_empty_run_with_props_loses_wrapper(self):
        """The wrapper of an empty run is not reproduced, only its xml_before"""
        xml = '<w:p><w:r><w:rPr><w:b/></w:rPr></w:r></w:p>'
        assert serialize(decompose(xml)) == '<w:p></w:p>'

    def test_keep_empty_runs(self):
        """keep_empty_runs keeps empty runs as opaque markup"""
        xml = '<w:p><w:r><w:rPr><w:b/></w:rPr></w:r>' + w_r('x') + '</w:p>'
        runs = decompose(xml, keep_empty_runs=True)
        assert serialize(runs) == xml
        assert runs[0].xml_before == '<w:p><w:r><w:rPr><w:b/></w:rPr></w:r>'


class TestTextSerialization:
    """Text.to_xml and whitespace handling"""

    @pytest.mark.parametrize('literal', [' foo', 'foo ', ' foo '])
    def test_preserve_attribute_when_spaces(self, literal):
        """Leading or trailing whitespace adds the preserve attribute"""
        assert Text(literal_text=literal).to_xml() == f'<w:t xml:space="preserve">{literal}</w:t>'

    def test_no_preserve_attribute(self):
        """Plain literal has no xml:space attribute"""
        assert Text(literal_text='foo').to_xml() == '<w:t>foo</w:t>'

    def test_empty_literal_only_xml_before(self):
        """An empty literal emits no <w:t> node"""
        assert Text(xml_before='<w:tab/>').to_xml() == '<w:tab/>'

    def test_entities_encoded(self):
        """&, < and > are encoded; quotes are not"""
        assert Text(literal_text='"a" & <b>').to_xml() == '<w:t>"a" &amp; &lt;b&gt;</w:t>'

    def test_run_without_props(self):
        """Run without properties has no <w:rPr>"""
        run = Run(xml_before='<w:p>', texts=[Text(literal_text='x')])
        assert run.to_xml() == '<w:p><w:r><w:t>x</w:t></w:r>'


class TestXmlUtils:
    """Entity and attribute helpers"""

    def test_encode_strips_control_characters(self):
        """Characters illegal in XML 1.0 are removed before encoding"""
        assert encode_entities('a\x00b\x0bc') == 'abc'

    def test_sanitize_keeps_whitespace(self):
        """Tab, LF and CR survive sanitizing"""
        assert sanitize_xml_string('a\tb\nc\rd') == 'a\tb\nc\rd'

    def test_encode_attribute_quotes(self):
        """Attribute values also get their double quotes encoded"""
        assert encode_attribute('O"Brien & Co') == 'O&quot;Brien &amp; Co'
        assert encode_entities('O"Brien') == 'O"Brien'

    def test_decode_numeric_references(self):
        """Numeric character references are decoded"""
        assert decode_entities('&#233;t&#xE9;') == 'été'

    def test_maybe_preserve_spaces_on_empty(self):
        """Empty literal needs no attribute"""
        assert maybe_preserve_spaces('') == ''

    def test_parse_attrs(self):
        """Attributes keep their prefix and are decoded"""
        attrs = parse_attrs('w:instr=" IF a &gt; b " w:dirty="true"')
        assert attrs == {'w:instr': ' IF a > b ', 'w:dirty': 'true'}
