"""Multi-root explorer holding a stack of published results."""

import logging
from typing import Awaitable, Callable, List, Optional

from ..config import ResultsExplorerConfig, WorkspaceState, WorkspaceStateKey
from ..core.node import ExplorerNode, MessageNode, dispose_all
from ..core.paging import PageRequest, apply_page_request
from ..error_policies import ErrorPolicy
from ..events import RefreshReason
from ..git.models import GitLog
from ..git.service import GitService
from ..nodes.results import SearchCommitsResultsNode
from .base import Explorer

logger = logging.getLogger(__name__)

NO_RESULTS_MESSAGE = "No results"


class ResultsExplorer(Explorer):
    """Explorer whose roots are result nodes, newest first.

    Unless results are kept, publishing a result replaces every earlier one.
    """

    command_prefix = 'gittreeview.resultsExplorer'

    def __init__(self, git: GitService, config: Optional[ResultsExplorerConfig] = None,
                 workspace_state: Optional[WorkspaceState] = None,
                 error_policy: Optional[ErrorPolicy] = None):
        super().__init__(git, config if config is not None else ResultsExplorerConfig(), error_policy)
        self.workspace_state = workspace_state if workspace_state is not None else WorkspaceState()
        self._roots: List[ExplorerNode] = []
        self.visible = False

        self.register_command('clearResultsNode', self.clear_results_node)
        self.register_command('close', self.close)
        self.register_command('refresh', self.refresh_nodes)
        self.register_command('refreshNode', self.refresh_node)
        self.register_command('setKeepResultsToOn', lambda: self.set_keep_results(True))
        self.register_command('setKeepResultsToOff', lambda: self.set_keep_results(False))

    @property
    def roots(self) -> List[ExplorerNode]:
        return list(self._roots)

    @property
    def keep_results(self) -> bool:
        return bool(self.workspace_state.get(WorkspaceStateKey.RESULTS_EXPLORER_KEEP_RESULTS, False))

    def set_keep_results(self, enabled: bool) -> None:
        self.workspace_state.update(WorkspaceStateKey.RESULTS_EXPLORER_KEEP_RESULTS, enabled)

    async def get_children(self, node: Optional[ExplorerNode] = None) -> List[ExplorerNode]:
        if node is not None:
            return await self._get_node_children(node)

        if not self._roots:
            return [MessageNode(NO_RESULTS_MESSAGE)]
        return list(self._roots)

    async def refresh(self, reason: Optional[RefreshReason] = None) -> None:
        reason = reason or RefreshReason.COMMAND
        logger.info(f"ResultsExplorer.refresh reason='{reason.value}'")
        await self._fire_tree_changed()

    async def refresh_node(self, node: ExplorerNode, page_request: Optional[PageRequest] = None) -> None:
        if not apply_page_request(node, page_request):
            node.refresh()

        if self._is_root(node):
            await self.refresh(RefreshReason.NODE_COMMAND)
        else:
            await self._fire_tree_changed(node)

    async def refresh_nodes(self) -> None:
        """Refresh every root, then re-render once."""
        for root in self._roots:
            root.refresh()
        await self.refresh(RefreshReason.COMMAND)

    async def add_results(self, node: ExplorerNode) -> bool:
        """Publish ``node`` as the newest result.

        Returns:
            False if ``node`` is already published
        """
        if self._is_root(node):
            logger.debug(f"{node!r} is already published")
            return False

        if not self.keep_results:
            self._clear()

        self._roots.insert(0, node)
        await self.refresh_node(node)
        return True

    async def clear_results_node(self, node: ExplorerNode) -> None:
        """Remove one published result and dispose it."""
        index = self._index_of(node)
        if index is None:
            logger.debug(f"{node!r} is not a published result")
            return

        del self._roots[index]
        node.dispose()
        await self._fire_tree_changed()

    async def clear_results(self) -> None:
        """Remove and dispose every result."""
        if self._clear():
            await self._fire_tree_changed()

    async def close(self) -> None:
        """Clear every result and hide the explorer."""
        await self.clear_results()
        self.visible = False

    async def show_commit_search_results(
        self,
        search: str,
        results: Optional[GitLog],
        query_fn: Callable[[Optional[int]], Awaitable[Optional[GitLog]]],
        repo_path: Optional[str] = None,
    ) -> SearchCommitsResultsNode:
        """Publish search results that were already computed.

        The node's first query answers with ``results``; later queries
        (refresh, show all) go through ``query_fn``.
        """
        first = True

        async def log_fn(max_count: Optional[int]) -> Optional[GitLog]:
            nonlocal first
            if first:
                first = False
                return results
            return await query_fn(max_count)

        if repo_path is None:
            repo_path = results.repo_path
        node = SearchCommitsResultsNode(search, repo_path, log_fn, self)
        await self.add_results(node)
        self.visible = True
        return node

    async def on_configuration_changed(self, config: ResultsExplorerConfig) -> None:
        errors = config.validate()
        if errors:
            raise ValueError(f"Invalid configuration: {', '.join(errors)}")

        self._config = config
        if self._roots:
            await self.refresh(RefreshReason.CONFIGURATION_CHANGED)

    def dispose(self) -> None:
        self._clear()
        super().dispose()

    def _clear(self) -> bool:
        roots, self._roots = self._roots, []
        dispose_all(roots)
        return bool(roots)

    def _index_of(self, node: ExplorerNode) -> Optional[int]:
        for index, root in enumerate(self._roots):
            if root is node:
                return index
        return None

    def _is_root(self, node: ExplorerNode) -> bool:
        return self._index_of(node) is not None
