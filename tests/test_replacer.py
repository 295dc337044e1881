#!/usr/bin/env python3
"""
ABOUTME: Tests pattern replacement inside text leaves.
ABOUTME: Covers literal replacements, callback markup splicing and xml_before ownership.
"""

import re
import sys
from pathlib import Path

import pytest

TESTS_DIR = Path(__file__).parent
sys.path.insert(0, str(TESTS_DIR))

from _surgeon_helpers import assert_well_formed, w_p, w_r, wrap_body  # noqa: E402

from docx_surgeon.decomposer import decompose, serialize  # noqa: E402
from docx_surgeon.errors import ConfigurationError  # noqa: E402
from docx_surgeon.pipeline import transform  # noqa: E402
from docx_surgeon.replacer import EmitLevel, TextReplacer, replace  # noqa: E402
from docx_surgeon.run import Run  # noqa: E402
from docx_surgeon.text import Text  # noqa: E402

BOLD_RUN = Run(props='<w:b/>', texts=[Text(literal_text='Hello world')])


def highlight(matched, **kwargs):
    return f'<w:r><w:rPr><w:highlight w:val="yellow"/></w:rPr><w:t>{matched}</w:t></w:r>'


class TestConservation:
    """No match means no change"""

    @pytest.mark.parametrize('replacement', ['XXX', highlight])
    def test_no_match_text(self, replacement):
        """replace() without match returns the serialized node"""
        text = Text(xml_before='<w:tab/>', literal_text=' Hello ')
        assert replace(text, r'absent', replacement, run=BOLD_RUN) == text.to_xml()

    def test_no_match_document(self):
        """Replacing over all runs without match reproduces serialize()"""
        xml = w_p(w_r('one', props='<w:b/>'), '<w:proofErr w:type="spellStart"/>', w_r('two '))
        runs = decompose(xml)
        replacer = TextReplacer(r'zzz', highlight)
        assert replacer.replace_runs(runs) == serialize(runs)


class TestLiteralReplacement:
    """String replacements are literal text"""

    def test_stays_inside_run(self):
        """Literal replacement keeps a bare leaf inside the enclosing run"""
        fragment = TextReplacer(r'world', 'there').replace_text(BOLD_RUN.texts[0], BOLD_RUN)
        assert fragment.level is EmitLevel.INSIDE_RUN
        assert fragment.xml == '<w:t>Hello there</w:t>'

    def test_replace_run(self):
        """replace_run rewraps the leaf with the run properties"""
        xml = TextReplacer(r'world', 'there').replace_run(BOLD_RUN)
        assert xml == '<w:r><w:rPr><w:b/></w:rPr><w:t>Hello there</w:t></w:r>'

    def test_string_starting_with_bracket_is_literal(self):
        """A string replacement is never spliced as markup"""
        xml = TextReplacer(r'world', '<b>').replace_run(BOLD_RUN)
        assert '<w:t>Hello &lt;b&gt;</w:t>' in xml

    def test_whitespace_becomes_preserved(self):
        """Trailing whitespace left by a replacement is preserved"""
        run = Run(texts=[Text(literal_text='Hello x')])
        xml = TextReplacer(r'x', '').replace_run(run)
        assert xml == '<w:r><w:t xml:space="preserve">Hello </w:t></w:r>'

    def test_capturing_group_allowed(self):
        """Capturing groups do not break the replacement"""
        run = Run(texts=[Text(literal_text='a1b2')])
        xml = TextReplacer(re.compile(r'(\d)'), '#').replace_run(run)
        assert xml == '<w:r><w:t>a#b#</w:t></w:r>'


class TestCallbackReplacement:
    """Callback replacements"""

    def test_markup_result_spliced(self):
        """Markup from the callback lands at run level between split runs"""
        xml = TextReplacer(r'world', highlight).replace_run(BOLD_RUN)
        assert xml == (
            '<w:r><w:rPr><w:b/></w:rPr><w:t xml:space="preserve">Hello </w:t></w:r>'
            '<w:r><w:rPr><w:highlight w:val="yellow"/></w:rPr><w:t>world</w:t></w:r>'
        )
        assert_well_formed(wrap_body(w_p(xml)))

    def test_text_after_markup_gets_own_run(self):
        """Text following spliced markup is wrapped in a new run"""
        run = Run(props='<w:i/>', texts=[Text(literal_text='a world b')])
        xml = TextReplacer(r'world', highlight).replace_run(run)
        assert xml.endswith('<w:r><w:rPr><w:i/></w:rPr><w:t xml:space="preserve"> b</w:t></w:r>')
        assert xml.count('<w:r>') == 3

    def test_literal_result(self):
        """A callback result not starting with '<' is literal text"""
        xml = TextReplacer(r'world', lambda matched, **kw: matched.upper()).replace_run(BOLD_RUN)
        assert xml == '<w:r><w:rPr><w:b/></w:rPr><w:t>Hello WORLD</w:t></w:r>'

    def test_context_and_run_passed(self):
        """Callback receives matched, xml_before, run and extra context"""
        calls = []

        def callback(matched, xml_before, run, **context):
            calls.append((matched, xml_before, run.props, context))
            return matched

        TextReplacer(r'o', callback, {'who': 'me'}).replace_run(BOLD_RUN)
        assert [c[0] for c in calls] == ['o', 'o']
        assert calls[0][2] == '<w:b/>'
        assert calls[0][3] == {'who': 'me'}

    def test_bare_leaves_grouped_around_run_level_fragment(self):
        """Bare leaves before and after a run-level fragment are wrapped separately"""
        run = Run(props='<w:b/>', texts=[
            Text(literal_text='one'),
            Text(xml_before='<w:tab/>', literal_text='X'),
            Text(xml_before='<w:tab/>', literal_text='two'),
        ])
        xml = TextReplacer(r'X', highlight).replace_run(run)
        assert_well_formed(wrap_body(w_p(xml)))
        assert xml.startswith('<w:r><w:rPr><w:b/></w:rPr><w:t>one</w:t></w:r>')
        assert xml.endswith('<w:r><w:rPr><w:b/></w:rPr><w:tab/><w:t>two</w:t></w:r>')


class TestXmlBeforeOwnership:
    """The owed xml_before is offered once and consumed by markup"""

    def test_offered_on_first_fragment_only(self):
        """Only the first fragment of the leaf receives xml_before"""
        received = []

        def callback(matched, xml_before, **kwargs):
            received.append(xml_before)
            return matched

        text = Text(xml_before='<w:tab/>', literal_text='aXbX')
        replace(text, r'X', callback)
        assert received == ['', '']

        received.clear()
        text = Text(xml_before='<w:tab/>', literal_text='XaX')
        replace(text, r'X', callback)
        assert received == ['<w:tab/>', '']

    def test_markup_consumes_xml_before(self):
        """Spliced markup owns the xml_before it was offered"""
        text = Text(xml_before='<w:tab/>', literal_text='X')
        xml = replace(text, r'X', lambda matched, xml_before, **kw: f'<w:r>{xml_before}</w:r>')
        assert xml == '<w:r><w:tab/></w:r>'

    def test_literal_result_keeps_xml_before(self):
        """With a literal result, xml_before stays before the text"""
        text = Text(xml_before='<w:tab/>', literal_text='X')
        xml = replace(text, r'X', lambda matched, **kw: 'Y')
        assert xml == '<w:tab/><w:t>Y</w:t>'


class TestTransform:
    """The transform() pipeline and argument validation"""

    def test_transform_merges_then_replaces(self):
        """A word split over runs is found after merging"""
        xml = w_p(w_r('Hello wo'), w_r('rld'))
        assert transform(xml, r'world', 'there') == w_p(w_r('Hello there'))

    def test_transform_no_caps(self):
        """merge_options are applied before replacing"""
        xml = w_p(w_r('abc', props='<w:caps/>'), w_r('def'))
        assert transform(xml, r'ABCdef', 'ok', merge_options={'no_caps': True}) == w_p(w_r('ok'))

    def test_input_unchanged(self):
        """transform() returns a new string"""
        xml = w_p(w_r('Hello'))
        transform(xml, r'Hello', 'Bye')
        assert xml == w_p(w_r('Hello'))

    def test_invalid_pattern(self):
        """Uncompilable patterns raise ConfigurationError"""
        with pytest.raises(ConfigurationError):
            transform(w_p(w_r('x')), r'(', 'y')

    def test_invalid_replacement(self):
        """Replacement must be a string or callable"""
        with pytest.raises(ConfigurationError):
            TextReplacer(r'x', 42)

    def test_reserved_context(self):
        """Context cannot override callback arguments"""
        with pytest.raises(ConfigurationError, match='matched'):
            transform(w_p(w_r('x')), r'x', highlight, context={'matched': 'y'})
