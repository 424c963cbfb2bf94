"""Core abstractions for explorer trees.

This module defines the node contract, the locator every node carries, and
the paging protocol shared by nodes that cap their child count.
"""

from .locator import GitLocator
from .node import (
    CollapsibleState,
    ExplorerNode,
    MessageNode,
    NodeCommand,
    PagerNode,
    dispose_all,
    ResourceType,
    ShowAllNode,
    TreeItem,
)
from .paging import (
    UNLIMITED,
    PageRequest,
    apply_page_request,
    effective_limit,
    paginate,
    query_limit,
)

__all__ = [
    # Locator
    'GitLocator',
    # Nodes
    'ExplorerNode',
    'MessageNode',
    'PagerNode',
    'ShowAllNode',
    'dispose_all',
    # Descriptors
    'TreeItem',
    'NodeCommand',
    'CollapsibleState',
    'ResourceType',
    # Paging
    'UNLIMITED',
    'PageRequest',
    'apply_page_request',
    'effective_limit',
    'paginate',
    'query_limit',
]
