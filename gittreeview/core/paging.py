"""Paging protocol shared by every node that caps its child count.

A paging node materializes at most ``limit`` domain children and, when more
exist, appends a pager sentinel. Activating the pager sends a
``PageRequest`` back through the owning explorer, which replaces the node's
page limit and re-renders it.
"""

import logging
from dataclasses import dataclass
from typing import Any, List, Optional, Sequence, Tuple, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar('T')

# Page limit value meaning "no cap"
UNLIMITED = 0


@dataclass(frozen=True)
class PageRequest:
    """New page limit for a node (0 = no cap, None = back to the default)."""
    max_count: Optional[int] = None

    @property
    def unlimited(self) -> bool:
        return self.max_count == UNLIMITED


def effective_limit(node: Any, default: int) -> int:
    """Return the page limit in force for ``node``.

    Args:
        node: Node carrying an optional ``max_count``
        default: Configured default page limit

    Returns:
        The limit to apply; 0 means unlimited
    """
    max_count = getattr(node, 'max_count', None)
    return default if max_count is None else max_count


def query_limit(limit: int) -> Optional[int]:
    """Translate a page limit into a data-layer ``max_count`` (None = all)."""
    return None if limit == UNLIMITED else limit


def paginate(entries: Sequence[T], limit: int) -> Tuple[List[T], bool]:
    """Cap ``entries`` at ``limit``.

    Returns:
        Tuple of (page, truncated)
    """
    entries = list(entries)
    if limit == UNLIMITED or len(entries) <= limit:
        return entries, False
    return entries[:limit], True


def apply_page_request(node: Any, request: Optional[PageRequest]) -> bool:
    """Apply ``request`` to ``node`` if it supports paging.

    The node's cache is invalidated so the next expansion queries again with
    the new limit.

    Returns:
        True if the limit was applied, False if the request was ignored
    """
    if request is None:
        return False

    if not getattr(node, 'supports_paging', False):
        logger.debug(f"Ignoring page request {request} for non-paging node {node!r}")
        return False

    node.max_count = request.max_count
    node.refresh()
    return True
