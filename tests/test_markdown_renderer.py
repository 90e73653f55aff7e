"""Tests for markdown conversion and code highlighting."""

import asyncio

from pagewright_pkg.markdown_renderer import Highlighter, MarkdownRenderer, heading_anchor


class TestMarkdownRenderer:
    """Test cases for MarkdownRenderer."""

    def test_basic_conversion(self):
        html = MarkdownRenderer().convert('Some *emphasis* and **strong** text.')

        assert '<em>emphasis</em>' in html
        assert '<strong>strong</strong>' in html

    def test_fenced_code_is_highlighted(self):
        """Test that a language tag routes code through Pygments."""
        html = MarkdownRenderer().convert('```python\nprint("hello")\n```\n')

        assert '<div class="highlight">' in html
        assert '<span class="nb">print</span>' in html

    def test_unknown_language_falls_back_to_plain_text(self):
        html = MarkdownRenderer().convert('```nosuchlanguage\nx < y\n```\n')

        assert '<div class="highlight">' in html
        assert 'x &lt; y' in html

    def test_code_without_language_is_escaped(self):
        html = MarkdownRenderer().convert('```\n<b>bold</b>\n```\n')

        assert '<pre><code>&lt;b&gt;bold&lt;/b&gt;\n</code></pre>' in html
        assert 'highlight' not in html

    def test_heading_anchors(self):
        html = MarkdownRenderer().convert('# Hello World\n')

        assert '<h1 id="hello-world">Hello World</h1>' in html

    def test_heading_anchors_disabled(self):
        html = MarkdownRenderer(anchors=False).convert('## Plain\n')

        assert 'id=' not in html
        assert '<h2>Plain</h2>' in html

    def test_gfm_extensions(self):
        """Test tables and strikethrough with GitHub flavoured markdown on."""
        text = '| a | b |\n|---|---|\n| 1 | 2 |\n\n~~gone~~\n'

        html = MarkdownRenderer().convert(text)

        assert '<table>' in html
        assert '<del>gone</del>' in html

    def test_gfm_disabled(self):
        html = MarkdownRenderer(gfm=False).convert('~~kept~~\n')

        assert '<del>' not in html
        assert '~~kept~~' in html

    def test_async_render(self):
        renderer = MarkdownRenderer()

        html = asyncio.run(renderer.render('# Title\n'))

        assert html == renderer.convert('# Title\n')


class TestHelpers:
    """Test cases for the highlighter and anchor helpers."""

    def test_heading_anchor(self):
        assert heading_anchor('Hello, World!') == 'hello-world-'
        assert heading_anchor('<code>API</code> notes') == 'api-notes'

    def test_stylesheet(self):
        css = Highlighter(cssclass='code').stylesheet

        assert '.code' in css
