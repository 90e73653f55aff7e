"""
Pagewright - a static page generator for markdown posts.

Pagewright reads a directory of posts (a metadata block plus a markdown
body), renders them through Jinja2 layouts, renders an optional tree of
extra pages against the same post collection, and can split the posts into
a paginated index.
"""

__version__ = "1.0.0"

from .core import Pagewright
from .documents import Document, parse_document
from .settings import PagewrightSettings, TaskConfig

__all__ = ['Pagewright', 'Document', 'parse_document', 'PagewrightSettings', 'TaskConfig']
