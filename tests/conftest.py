"""Test configuration and fixtures for Pagewright tests."""

import pytest
import tempfile
import shutil
import os
import json
import logging
from pathlib import Path

from pagewright_pkg.settings import PaginationConfig, TaskConfig


POST_LAYOUT = """<html><head><title>{{ post.title }}</title></head>
<body>
<article>{{ post.content|safe }}</article>
<nav>{% for other in posts %}<a href="/{{ other.url }}">{{ other.title }}</a>{% endfor %}</nav>
{% if data %}<footer>{{ data.site }}</footer>{% endif %}
</body></html>
"""

LIST_PAGE = """<ul class="posts">{% for post in posts %}<li>{{ post.title }}</li>{% endfor %}</ul>
<ol class="pages">{% for page in pages %}<li{% if page.currentPage %} class="current"{% endif %}>{{ page.url }}</li>{% endfor %}</ol>
"""


@pytest.fixture
def temp_dir():
    """Create a temporary directory for tests."""
    temp_dir = tempfile.mkdtemp()
    yield temp_dir
    shutil.rmtree(temp_dir, ignore_errors=True)


def write_post(posts_dir, filename, title, date, body="Some content for this post."):
    path = Path(posts_dir) / filename
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(f'{{"title": "{title}", "date": "{date}"}}\n{body}\n', encoding='utf-8')
    return str(path)


@pytest.fixture
def mock_site_dir(temp_dir):
    """Create a site tree with posts, a layout, pages and a data file."""
    site = Path(temp_dir) / 'site'
    posts_dir = site / 'posts'
    templates_dir = site / 'templates'
    pages_dir = site / 'pages'
    data_dir = site / 'data'

    for directory in (posts_dir, templates_dir, pages_dir, data_dir):
        directory.mkdir(parents=True)

    write_post(posts_dir, 'first.md', 'First Post', '2021-01-01')
    write_post(posts_dir, 'second.md', 'Second Post', '2023-01-01')
    (posts_dir / 'third.md').write_text("""----
title: Third Post
date: 2022-01-01
tags: [python, web]
----
# Third

```python
print("hello")
```
""", encoding='utf-8')

    # Never built
    write_post(posts_dir, '_draft.md', 'Draft', '2024-01-01')
    (posts_dir / '.hidden').write_text('not a post', encoding='utf-8')

    (templates_dir / 'post.html').write_text(POST_LAYOUT, encoding='utf-8')
    (pages_dir / 'about.html').write_text(
        "<h1>About</h1><p>{{ currentPage }}</p><p>{{ posts|length }} posts</p>",
        encoding='utf-8'
    )
    (pages_dir / 'archive').mkdir()
    (pages_dir / 'archive' / 'all.html').write_text(
        "{% for post in posts %}<a href=\"/{{ post.url }}\">{{ post.title }}</a>{% endfor %}",
        encoding='utf-8'
    )
    (pages_dir / 'index.html').write_text(LIST_PAGE, encoding='utf-8')
    (pages_dir / '.DS_Store').write_text('', encoding='utf-8')
    (pages_dir / 'notes.txt').write_text('plain notes', encoding='utf-8')

    (data_dir / 'site.json').write_text(json.dumps({'site': 'Example Site'}), encoding='utf-8')

    return site


@pytest.fixture
def mock_output_dir(temp_dir):
    """Output directory path; not created up front."""
    return os.path.join(temp_dir, 'output')


@pytest.fixture
def make_task(mock_site_dir, mock_output_dir):
    """Factory building a TaskConfig rooted in the mock site."""
    def _make_task(**overrides):
        values = {
            'src': str(mock_site_dir / 'posts'),
            'dest': mock_output_dir,
            'url': 'blog/:title',
            'layout': str(mock_site_dir / 'templates' / 'post.html'),
        }
        values.update(overrides)
        return TaskConfig(**values)
    return _make_task


@pytest.fixture
def paginated_task(make_task, mock_site_dir):
    """Task with pages, data and two posts per list page."""
    return make_task(
        data=str(mock_site_dir / 'data' / 'site.json'),
        page_src=str(mock_site_dir / 'pages'),
        template_engine='html',
        pagination=PaginationConfig(
            posts_per_page=2,
            list_page=str(mock_site_dir / 'pages' / 'index.html'),
        ),
    )


@pytest.fixture(autouse=True)
def reset_logger():
    """Drop handlers bound to a previous test's captured streams."""
    yield
    logger = logging.getLogger('Pagewright')
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
