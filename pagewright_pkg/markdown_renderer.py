"""Markdown to HTML conversion with Pygments highlighting for fenced code."""

import asyncio
import re

import mistune
from pygments import highlight
from pygments.formatters import HtmlFormatter
from pygments.lexers import get_lexer_by_name
from pygments.util import ClassNotFound

GFM_PLUGINS = ['table', 'strikethrough', 'task_lists', 'url']
ANCHOR_PATTERN = re.compile(r'[^\w]+')
TAG_PATTERN = re.compile(r'<[^>]+>')


class Highlighter:
    """Pygments-backed syntax highlighter for fenced code blocks."""

    def __init__(self, style='default', cssclass='highlight'):
        self.formatter = HtmlFormatter(style=style, cssclass=cssclass)

    @property
    def stylesheet(self):
        return self.formatter.get_style_defs('.' + self.formatter.cssclass)

    def highlight(self, code, language):
        try:
            lexer = get_lexer_by_name(language)
        except ClassNotFound:
            lexer = get_lexer_by_name('text')
        return highlight(code, lexer, self.formatter)


def heading_anchor(text):
    """Heading id: lower-cased text with runs of non-word characters as hyphens."""
    plain = TAG_PATTERN.sub('', text)
    return ANCHOR_PATTERN.sub('-', plain.lower())


class MarkdownRenderer:
    """
    Convert markdown bodies to HTML.

    ``gfm`` switches on tables, strikethrough, task lists and bare URL
    autolinks. ``anchors`` gives every heading an ``id`` so posts can be
    deep-linked.
    """

    def __init__(self, highlighter=None, gfm=True, anchors=True):
        self.highlighter = highlighter or Highlighter()
        self.gfm = gfm
        self.anchors = anchors

    def create_markdown_parser(self):
        """Create a Mistune markdown parser with a custom renderer."""
        highlighter = self.highlighter
        anchors = self.anchors

        class CustomRenderer(mistune.HTMLRenderer):
            def __init__(self):
                super().__init__(escape=False)

            def block_code(self, code, info=None):
                language = info.strip().split(None, 1)[0] if info and info.strip() else None
                if language:
                    return highlighter.highlight(code, language)
                return '<pre><code>{}</code></pre>\n'.format(mistune.escape(code))

            def heading(self, text, level, **attrs):
                if not anchors:
                    return super().heading(text, level, **attrs)
                return '<h{0} id="{1}">{2}</h{0}>\n'.format(level, heading_anchor(text), text)

        return mistune.create_markdown(
            renderer=CustomRenderer(),
            plugins=GFM_PLUGINS if self.gfm else []
        )

    def convert(self, text):
        """Convert markdown text to HTML."""
        # Parsers keep per-call state, so each conversion gets its own.
        return self.create_markdown_parser()(text)

    async def render(self, text):
        """Convert off the event loop; highlighting runs inside the conversion."""
        return await asyncio.to_thread(self.convert, text)
