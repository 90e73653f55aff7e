"""Split the sorted post collection into index pages and build their navigation."""

from dataclasses import dataclass
from typing import Any, List

from .destinations import list_page_destination, list_page_url


@dataclass
class PageGroup:
    """One page of the paginated index."""

    number: int
    posts: List[Any]
    destination: str
    url: str


def partition(posts, posts_per_page):
    """Contiguous slices of ``posts_per_page`` posts; the last may be shorter."""
    if posts_per_page < 1:
        raise ValueError(f"posts_per_page must be at least 1, got {posts_per_page}")
    return [posts[i:i + posts_per_page] for i in range(0, len(posts), posts_per_page)]


def build_page_groups(posts, posts_per_page, dest, list_page, page_src=None):
    """Partition ``posts`` and work out where each group is written."""
    groups = []
    for number, group in enumerate(partition(posts, posts_per_page)):
        destination = list_page_destination(dest, list_page, number, page_src)
        groups.append(PageGroup(
            number=number,
            posts=group,
            destination=destination,
            url=list_page_url(dest, destination),
        ))
    return groups


def navigation_for(groups, current):
    """
    Navigation entries for rendering group ``current``.

    A new list is built for every render, so the ``currentPage`` flag only
    ever appears on that group's own entry in that one render.
    """
    pages = []
    for group in groups:
        entry = {'url': group.url}
        if group.number == current:
            entry['currentPage'] = True
        pages.append(entry)
    return pages
