"""
Template engines keyed by file extension, and the shared render context.

An engine compiles template text into a render function taking a context
mapping. The layout's extension picks the engine, so a site can mix engines
as long as each extension is registered.
"""

import os
from types import MappingProxyType

from jinja2 import Environment, FileSystemLoader

from .errors import UnknownTemplateEngine


class TemplateEngine:
    """Interface every template engine implements."""

    name = None

    def compile(self, text, pretty=True, filename=None):
        """Return a callable mapping a context dict to rendered text."""
        raise NotImplementedError


class Jinja2Engine(TemplateEngine):
    """Jinja2 templates; includes and extends resolve beside the template file."""

    name = 'jinja2'

    def __init__(self, **env_options):
        self.env_options = env_options

    def create_environment(self, pretty, filename):
        search_path = os.path.dirname(os.path.abspath(filename)) if filename else os.getcwd()
        return Environment(
            loader=FileSystemLoader(search_path),
            trim_blocks=pretty,
            lstrip_blocks=pretty,
            **self.env_options
        )

    def compile(self, text, pretty=True, filename=None):
        template = self.create_environment(pretty, filename).from_string(text)

        def render(context):
            return template.render(**context)

        return render


TEMPLATE_ENGINES = {
    'html': Jinja2Engine(),
    'htm': Jinja2Engine(),
    'j2': Jinja2Engine(),
    'jinja': Jinja2Engine(),
    'jinja2': Jinja2Engine(),
}


def template_extension(path):
    return os.path.splitext(path)[1][1:].lower()


def register_engine(extension, engine):
    """Make ``engine`` handle templates whose extension is ``extension``."""
    TEMPLATE_ENGINES[extension.lstrip('.').lower()] = engine


def get_engine(path):
    """Look up the engine for a template path by its extension."""
    try:
        return TEMPLATE_ENGINES[template_extension(path)]
    except KeyError:
        raise UnknownTemplateEngine(path) from None


def compile_template(path, pretty=True, engine=None):
    """
    Read a template from disk and compile it.

    ``engine`` defaults to the one registered for the file's extension.
    """
    engine = engine or get_engine(path)
    with open(path, 'r', encoding='utf-8') as f:
        text = f.read()
    return engine.compile(text, pretty=pretty, filename=path)


class TemplateContext:
    """
    Data shared by every render in one build.

    The base mapping is read-only; ``view`` hands each render a fresh dict
    with its per-render values (the current post or page) merged in.
    """

    def __init__(self, posts, data=None):
        base = {'posts': posts}
        if data is not None:
            base['data'] = data
        self.base = MappingProxyType(base)

    def view(self, **extra):
        context = dict(self.base)
        context.update(extra)
        return context
