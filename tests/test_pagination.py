"""Tests for splitting posts into list pages."""

import os
import pytest

from pagewright_pkg.pagination import build_page_groups, navigation_for, partition


class TestPartition:
    """Test cases for partition."""

    def test_last_group_is_shorter(self):
        """Test seven posts split three per page."""
        groups = partition(list(range(7)), 3)

        assert [len(group) for group in groups] == [3, 3, 1]
        assert groups[0] == [0, 1, 2]
        assert groups[2] == [6]

    def test_exact_multiple(self):
        assert partition(list(range(4)), 2) == [[0, 1], [2, 3]]

    def test_no_posts(self):
        assert partition([], 3) == []

    def test_rejects_non_positive_size(self):
        with pytest.raises(ValueError):
            partition([1, 2], 0)


class TestBuildPageGroups:
    """Test cases for build_page_groups."""

    def test_destinations_and_urls(self):
        """Test the first page is the index and later pages nest under page/."""
        groups = build_page_groups(list('abcde'), 2, 'dist', 'list.html')

        assert [group.number for group in groups] == [0, 1, 2]
        assert groups[0].destination == os.path.join('dist', 'index.html')
        assert groups[1].destination == os.path.join('dist', 'page', '1', 'index.html')
        assert [group.url for group in groups] == ['/', '/page/1/', '/page/2/']
        assert groups[2].posts == ['e']

    def test_inside_page_src(self, temp_dir):
        """Test list pages keep their directory inside the page tree."""
        page_src = os.path.join(temp_dir, 'pages')
        list_page = os.path.join(page_src, 'blog', 'index.html')

        groups = build_page_groups(list('abc'), 2, 'dist', list_page, page_src)

        assert groups[0].destination == os.path.join('dist', 'blog', 'index.html')
        assert groups[1].destination == os.path.join('dist', 'blog', 'page', '1', 'index.html')
        assert groups[1].url == '/blog/page/1/'


class TestNavigation:
    """Test cases for navigation_for."""

    def test_only_current_entry_is_flagged(self):
        groups = build_page_groups(list('abcde'), 2, 'dist', 'list.html')

        pages = navigation_for(groups, 1)

        assert [page['url'] for page in pages] == ['/', '/page/1/', '/page/2/']
        assert [page.get('currentPage', False) for page in pages] == [False, True, False]

    def test_flag_does_not_leak_between_renders(self):
        """Test each render gets its own entries."""
        groups = build_page_groups(list('abcd'), 2, 'dist', 'list.html')

        first = navigation_for(groups, 0)
        second = navigation_for(groups, 1)

        assert first[0] == {'url': '/', 'currentPage': True}
        assert first[1] == {'url': '/page/1/'}
        assert second[0] == {'url': '/'}
        assert second[1] == {'url': '/page/1/', 'currentPage': True}
