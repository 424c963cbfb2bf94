"""Result roots published to the results explorer."""

import logging
from typing import TYPE_CHECKING, Any, Dict, List, Optional

from ..core.locator import GitLocator
from ..core.node import CollapsibleState, ExplorerNode, MessageNode, ResourceType, TreeItem
from ..git.models import GitLog
from .base import PagingNode
from .commits import CommitNode, LogQuery

if TYPE_CHECKING:
    from ..explorers.base import Explorer

logger = logging.getLogger(__name__)


class SearchCommitsResultsNode(PagingNode):
    """Commits matching a search.

    The query runs at most once per cache lifetime; the label and the
    children both come from the same cached log. ``refresh`` drops the
    cache so the next render queries again (with the current page limit).
    """

    cache_children = True
    show_all_title = 'Show All Results'

    def __init__(self, search: str, repo_path: str, log_fn: LogQuery, explorer: 'Explorer'):
        super().__init__(GitLocator.for_repository(repo_path), explorer)
        self.search = search
        self.repo_path = repo_path
        self.log_fn = log_fn
        self._cache: Optional[Dict[str, Any]] = None

    async def _fetch_children(self) -> List[ExplorerNode]:
        log = (await self._get_cache())['log']
        if log is None or not log.commits:
            return [MessageNode('No results found')]

        return self._page_children(log, lambda c: CommitNode(c, self.explorer))

    async def get_tree_item(self) -> TreeItem:
        label = (await self._get_cache())['label']
        return TreeItem(label, CollapsibleState.EXPANDED, ResourceType.RESULTS,
                        description=self.repo_path)

    def refresh(self) -> None:
        self._cache = None
        super().refresh()

    async def _get_cache(self) -> Dict[str, Any]:
        if self._cache is not None:
            return self._cache

        epoch = self._epoch
        log = await self.log_fn(self.query_max_count)
        cache = {'label': self._format_label(log), 'log': log}
        # A refresh during the query means a different page limit may apply
        if epoch == self._epoch and not self.disposed:
            self._cache = cache
        return cache

    def _format_label(self, log: Optional[GitLog]) -> str:
        if log is None or log.count is None:
            return f"Results for {self.search}"

        count = log.count
        if count == 0:
            return f"No results for {self.search}"
        more = '+' if log.truncated else ''
        return f"{count}{more} result{'' if count == 1 and not more else 's'} for {self.search}"

    def __repr__(self) -> str:
        return f"SearchCommitsResultsNode({self.search!r})"
