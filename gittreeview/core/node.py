"""Explorer node abstraction.

Defines the interface for every element of an explorer tree, plus the
sentinel variants (message and pager) that carry no domain data.

Nodes are created on demand when a parent enumerates its children or when an
explorer resolves a new root, and are destroyed when their parent is
disposed, when the explorer replaces the root, or when a result is cleared.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any, List, Optional, Sequence, Tuple

from ..constants import SHOW_ALL_SUFFIX
from .locator import GitLocator
from .paging import PageRequest

if TYPE_CHECKING:
    from ..explorers.base import Explorer

logger = logging.getLogger(__name__)


class CollapsibleState(Enum):
    """Expansion hint handed to the rendering host."""
    NONE = 0
    COLLAPSED = 1
    EXPANDED = 2


class ResourceType(Enum):
    """Context tag the host uses to pick menus and icons for a node."""
    BRANCHES = 'gittreeview:branches'
    BRANCHES_WITH_REMOTES = 'gittreeview:branches:remotes'
    BRANCH_HISTORY = 'gittreeview:branch-history'
    BRANCH_HISTORY_WITH_TRACKING = 'gittreeview:branch-history:tracking'
    CURRENT_BRANCH_HISTORY = 'gittreeview:current-branch-history'
    CURRENT_BRANCH_HISTORY_WITH_TRACKING = 'gittreeview:current-branch-history:tracking'
    REMOTE_BRANCH_HISTORY = 'gittreeview:remote-branch-history'
    COMMIT = 'gittreeview:commit'
    COMMIT_ON_CURRENT_BRANCH = 'gittreeview:commit:current'
    COMMIT_FILE = 'gittreeview:commit-file'
    COMMITS = 'gittreeview:commits'
    FILE_HISTORY = 'gittreeview:file-history'
    HISTORY = 'gittreeview:history'
    MESSAGE = 'gittreeview:message'
    PAGER = 'gittreeview:pager'
    REPOSITORIES = 'gittreeview:repositories'
    REPOSITORY = 'gittreeview:repository'
    RESULTS = 'gittreeview:results'
    STATUS_FILE = 'gittreeview:status-file'
    STATUS_FILES = 'gittreeview:status-files'
    STATUS_FILE_COMMITS = 'gittreeview:status-file-commits'


@dataclass
class NodeCommand:
    """Command bound to a tree item, invoked by the host on activation."""
    title: str
    command: str
    arguments: Tuple[Any, ...] = ()


@dataclass
class TreeItem:
    """Render-agnostic description of a node.

    The host maps ``context_value`` to icons and menus; nothing here knows
    how the item is drawn.
    """
    label: str
    collapsible_state: CollapsibleState = CollapsibleState.NONE
    context_value: Optional[ResourceType] = None
    command: Optional[NodeCommand] = None
    description: Optional[str] = None
    tooltip: Optional[str] = None
    extra: dict = field(default_factory=dict)


class ExplorerNode(ABC):
    """Abstract base class for explorer nodes.

    Subclasses implement ``_fetch_children`` and ``get_tree_item``.
    Variants with ``cache_children`` set keep their children until
    ``refresh``; the others fetch again on every ``get_children`` call.
    """

    supports_paging: bool = False
    cache_children: bool = False

    def __init__(self, locator: Optional[GitLocator] = None):
        self.locator = locator if locator is not None else GitLocator()
        self.children: Optional[List['ExplorerNode']] = None
        self._max_count: Optional[int] = None
        self._disposed = False
        # Bumped whenever cached children are dropped
        self._epoch = 0

    @property
    def max_count(self) -> Optional[int]:
        """Page limit: None for the configured default, 0 for unlimited."""
        return self._max_count

    @max_count.setter
    def max_count(self, value: Optional[int]) -> None:
        if not self.supports_paging:
            logger.debug(f"{self!r} does not support paging; ignoring max_count={value}")
            return
        self._max_count = value

    @property
    def disposed(self) -> bool:
        return self._disposed

    async def get_children(self) -> List['ExplorerNode']:
        """Get the children of this node.

        Never returns None; an empty list is a valid leaf result. A disposed
        node returns [] without fetching. A fetch that completes after the
        node was refreshed is dropped and fetched again, so results computed
        under an old page limit are never adopted.
        """
        while not self._disposed:
            if self.cache_children and self.children is not None:
                return self.children

            epoch = self._epoch
            children = await self._fetch_children()
            if epoch == self._epoch:
                return self._materialize(children)

            logger.debug(f"{self!r} changed while fetching children; dropping {len(children)} result(s)")
            dispose_all(children)
        return []

    async def _fetch_children(self) -> Sequence['ExplorerNode']:
        """Build this node's children from the data layer. Leaves keep the default."""
        return []

    @abstractmethod
    async def get_tree_item(self) -> TreeItem:
        """Describe this node for the rendering host."""
        pass

    def get_command(self) -> Optional[NodeCommand]:
        return None

    def refresh(self) -> None:
        """Drop cached child and label data.

        Materialized children are disposed and any fetch still in flight is
        discarded; the node itself keeps its identity and is re-expanded on
        the next query.
        """
        self.reset_children()

    def reset_children(self) -> None:
        """Dispose materialized children and forget them."""
        self._epoch += 1
        children, self.children = self.children, None
        if children:
            dispose_all(children)

    def dispose(self) -> None:
        """Dispose this node and its materialized children.

        Safe to call any number of times, and on nodes that were never
        expanded. Never raises.
        """
        self._disposed = True
        self.reset_children()

    def _materialize(self, children: Sequence['ExplorerNode']) -> List['ExplorerNode']:
        """Adopt freshly fetched ``children`` as this node's children.

        Previously materialized children that are not part of the new list
        are disposed. If this node was disposed while the children were
        being fetched, the new children are disposed too and nothing is
        returned.
        """
        children = list(children)
        if self._disposed:
            logger.debug(f"{self!r} was disposed while fetching children; dropping {len(children)} result(s)")
            dispose_all(children)
            return []

        previous, self.children = self.children, children
        if previous:
            dispose_all([c for c in previous if not any(c is n for n in children)])
        return children

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.locator})"


def dispose_all(nodes: Sequence[ExplorerNode]) -> None:
    """Best-effort disposal: one failure never stops its siblings."""
    for node in nodes:
        try:
            node.dispose()
        except Exception:
            logger.warning(f"Failed to dispose {node!r}", exc_info=True)


class MessageNode(ExplorerNode):
    """Leaf showing a literal message (empty and error states)."""

    def __init__(self, message: str):
        super().__init__()
        self.message = message

    async def get_tree_item(self) -> TreeItem:
        return TreeItem(self.message, CollapsibleState.NONE, ResourceType.MESSAGE)

    def __repr__(self) -> str:
        return f"MessageNode({self.message!r})"


class PagerNode(ExplorerNode):
    """Leaf that re-expands ``node`` with a different page limit."""

    def __init__(self, message: str, node: ExplorerNode, explorer: 'Explorer',
                 page_request: Optional[PageRequest] = None):
        super().__init__()
        self.message = message
        self.node = node
        self.explorer = explorer
        self.page_request = page_request if page_request is not None else PageRequest()

    async def get_tree_item(self) -> TreeItem:
        return TreeItem(self.message, CollapsibleState.NONE, ResourceType.PAGER,
                        command=self.get_command())

    def get_command(self) -> Optional[NodeCommand]:
        return NodeCommand(
            title='Refresh',
            command=self.explorer.get_qualified_command('refreshNode'),
            arguments=(self.node, self.page_request),
        )

    async def activate(self) -> None:
        """Replace the target's page limit and re-render the target."""
        await self.explorer.refresh_node(self.node, self.page_request)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r})"


class ShowAllNode(PagerNode):
    """Pager that lifts the cap entirely."""

    def __init__(self, message: str, node: ExplorerNode, explorer: 'Explorer'):
        super().__init__(f"{message}{SHOW_ALL_SUFFIX}", node, explorer, PageRequest(max_count=0))
        self.title = message
