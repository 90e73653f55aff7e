"""
Output path arithmetic for posts and paginated list pages.

URL templates are slash separated. Any segment containing a colon is
dynamic: the text after the colon names a metadata key whose value replaces
``:key``, e.g. ``blog/:year/post-:slug``.
"""

import os
import re

from .errors import InvalidListPagePath, MissingUrlSegment

DYNAMIC_MARKER = ':'
UNSAFE_URL_CHARS = re.compile(r'[^a-zA-Z0-9]')


def dynamic_segments(url_template):
    """Return the metadata keys referenced by a URL template, in order."""
    return [
        segment[segment.index(DYNAMIC_MARKER) + 1:]
        for segment in url_template.split('/')
        if DYNAMIC_MARKER in segment
    ]


def slug_value(value):
    """Replace every character outside [a-zA-Z0-9] with a hyphen."""
    return UNSAFE_URL_CHARS.sub('-', str(value))


def resolve_destination(url_template, document, dest=''):
    """
    Map a post onto its output file.

    Args:
        url_template: URL template such as ``blog/posts/:title``
        document: Document (or plain metadata mapping) supplying dynamic values
        dest: Destination root the path is prefixed with

    Returns:
        Output path ending in ``.html``

    Raises:
        MissingUrlSegment: A referenced key is absent from the metadata
    """
    metadata = getattr(document, 'metadata', document)
    source_path = getattr(document, 'source_path', None)

    segments = []
    for segment in url_template.strip('/').split('/'):
        if DYNAMIC_MARKER in segment:
            prefix, key = segment.split(DYNAMIC_MARKER, 1)
            if key not in metadata:
                raise MissingUrlSegment(key, source_path)
            segment = prefix + slug_value(metadata[key])
        segments.append(segment)

    return os.path.join(dest, *segments) + '.html'


def url_from_destination(dest, destination):
    """Path of ``destination`` relative to the destination root, slash separated."""
    return os.path.relpath(destination, dest).replace(os.sep, '/')


def _relative_list_page(list_page, page_src):
    try:
        relative = os.path.relpath(os.path.abspath(list_page), os.path.abspath(page_src))
    except ValueError as e:
        # Different drives on Windows
        raise InvalidListPagePath(list_page, page_src) from e
    if relative == os.pardir or relative.startswith(os.pardir + os.sep) or os.path.isabs(relative):
        raise InvalidListPagePath(list_page, page_src)
    return relative


def list_page_destination(dest, list_page, page_number, page_src=None):
    """
    Output path for one page of the paginated index.

    Without a page source tree the first page is ``<dest>/index.html`` and
    page ``n`` is ``<dest>/page/<n>/index.html``. With one, the list page
    keeps its position relative to ``page_src``: page 0 swaps the extension
    for ``.html`` and page ``n`` replaces the file name with
    ``page/<n>/index.html``.
    """
    if page_src:
        base = os.path.join(dest, _relative_list_page(list_page, page_src))
        if page_number == 0:
            return os.path.splitext(base)[0] + '.html'
        return os.path.join(os.path.dirname(base), 'page', str(page_number), 'index.html')

    if page_number == 0:
        return os.path.join(dest, 'index.html')
    return os.path.join(dest, 'page', str(page_number), 'index.html')


def list_page_url(dest, destination):
    """Directory URL of a list page relative to the site root, with a trailing slash."""
    directory = os.path.relpath(os.path.dirname(destination), dest)
    if directory == os.curdir:
        return '/'
    return '/' + directory.replace(os.sep, '/') + '/'
