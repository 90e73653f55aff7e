"""
Source documents: a metadata block followed by a markdown body.

Two metadata encodings are accepted. A file that starts with ``{`` carries
a literal mapping header (JSON, or a YAML flow mapping) that ends at the
matching closing brace. A file that starts with ``----`` is split on that
delimiter; the second section is YAML and everything after it is the body.
"""

import json
import os
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from typing import Any, Dict, Optional

import yaml

from .errors import EmptyDocument, MalformedMetadata

YAML_DELIMITER = '----'
DATE_FORMATS = ['%Y-%m-%dT%H:%M:%S', '%Y-%m-%d %H:%M:%S', '%Y-%m-%d', '%b %d, %Y']
LEADING_NOISE = '\ufeff \t\r\n'


def is_eligible(path):
    """Drafts (leading underscore) and dotfiles are never built."""
    name = os.path.basename(path)
    return not (name.startswith('_') or name.startswith('.'))


def parse_date(value):
    """Parse a date value into a naive datetime, or None when it can't be read."""
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    elif isinstance(value, str):
        text = value.strip()
        if text.endswith('Z'):
            text = text[:-1] + '+00:00'
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            parsed = None
            for fmt in DATE_FORMATS:
                try:
                    parsed = datetime.strptime(text, fmt)
                    break
                except ValueError:
                    continue
        if parsed is None:
            return None
    else:
        return None
    # Aware and naive datetimes can't be compared, so everything sorts in UTC.
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


@dataclass
class Document:
    """
    One source post.

    ``markdown`` holds the raw body until rendering completes; afterwards
    ``content`` holds the HTML and ``markdown`` is cleared. ``url`` is set
    by the build once every post in the batch is known.
    """

    metadata: Dict[str, Any] = field(default_factory=dict)
    markdown: Optional[str] = None
    content: Optional[str] = None
    url: Optional[str] = None
    source_path: Optional[str] = None

    @property
    def date(self):
        value = self.metadata.get('date')
        return value if isinstance(value, datetime) else datetime.min

    def attach_content(self, html):
        """Store rendered HTML and drop the raw markdown body."""
        self.content = html
        self.markdown = None

    def get(self, key, default=None):
        return self.metadata.get(key, default)

    def __getitem__(self, key):
        # Lets templates write ``post.title`` for metadata keys.
        return self.metadata[key]

    def __contains__(self, key):
        return key in self.metadata


def _split_literal_header(text, path):
    """Return the first balanced ``{...}`` block and the text after it."""
    depth = 0
    quote = None
    escaped = False
    for index, char in enumerate(text):
        if quote:
            if escaped:
                escaped = False
            elif char == '\\':
                escaped = True
            elif char == quote:
                quote = None
            continue
        if char in '"\'':
            quote = char
        elif char == '{':
            depth += 1
        elif char == '}':
            depth -= 1
            if depth == 0:
                return text[:index + 1], text[index + 1:]
    raise MalformedMetadata(path, 'unbalanced braces in metadata block')


def _load_literal_header(header, path):
    try:
        return json.loads(header)
    except json.JSONDecodeError:
        pass
    try:
        return yaml.safe_load(header)
    except yaml.YAMLError as e:
        raise MalformedMetadata(path, str(e)) from e


def _load_yaml_header(section, path):
    try:
        metadata = yaml.safe_load(section)
    except yaml.YAMLError as e:
        raise MalformedMetadata(path, str(e)) from e
    return {} if metadata is None else metadata


def parse_document(text, path=None):
    """
    Parse raw file text into a Document.

    Args:
        text: Full contents of the source file
        path: Source path, used in error messages

    Returns:
        Document with ``metadata`` and ``markdown`` populated

    Raises:
        MalformedMetadata: The header matches neither encoding or doesn't parse
        EmptyDocument: Nothing meaningful follows the metadata block
    """
    stripped = text.lstrip(LEADING_NOISE)

    if stripped.startswith('{'):
        header, markdown = _split_literal_header(stripped, path)
        metadata = _load_literal_header(header, path)
    elif stripped.startswith(YAML_DELIMITER):
        sections = stripped.split(YAML_DELIMITER)
        metadata = _load_yaml_header(sections[1], path)
        markdown = YAML_DELIMITER.join(sections[2:])
    else:
        raise MalformedMetadata(path)

    if not isinstance(metadata, dict):
        raise MalformedMetadata(path, 'metadata must be a mapping')

    if 'date' in metadata:
        parsed = parse_date(metadata['date'])
        if parsed is None:
            raise MalformedMetadata(path, f"unrecognised date {metadata['date']!r}")
        metadata['date'] = parsed

    if len(markdown) <= 1:
        raise EmptyDocument(path)

    return Document(metadata=metadata, markdown=markdown, source_path=path)


def parse_post_file(filepath):
    """Read a source file from disk and parse it."""
    try:
        with open(filepath, 'r', encoding='utf-8') as f:
            text = f.read()
    except UnicodeDecodeError as e:
        raise MalformedMetadata(filepath, str(e)) from e
    return parse_document(text, filepath)
