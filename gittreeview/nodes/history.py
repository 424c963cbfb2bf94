"""History view nodes: the root for the active document and its commit list."""

import logging
import posixpath
from typing import TYPE_CHECKING, List

from ..core.locator import GitLocator
from ..core.node import CollapsibleState, ExplorerNode, MessageNode, ResourceType, TreeItem
from ..git.models import GitStatusFile, Repository
from .base import PagingNode
from .commit_file import CommitFileNode, CommitFileNodeDisplayAs

if TYPE_CHECKING:
    from ..explorers.base import Explorer

logger = logging.getLogger(__name__)


class HistoryNode(ExplorerNode):
    """Root of the history view: the tracked file in its repository."""

    cache_children = True

    def __init__(self, locator: GitLocator, repo: Repository, explorer: 'Explorer'):
        super().__init__(locator)
        self.repo = repo
        self.explorer = explorer

    async def _fetch_children(self) -> List[ExplorerNode]:
        return [FileHistoryNode(self.locator, self.explorer)]

    async def get_tree_item(self) -> TreeItem:
        label = f"{self.repo.name}: {posixpath.basename(self.locator.relative_path)}"
        return TreeItem(label, CollapsibleState.EXPANDED, ResourceType.HISTORY,
                        tooltip=self.locator.full_path)


class FileHistoryNode(PagingNode):
    """Commits touching one file, newest first."""

    def __init__(self, locator: GitLocator, explorer: 'Explorer'):
        super().__init__(locator, explorer)

    async def _fetch_children(self) -> List[ExplorerNode]:
        log = await self.explorer.git.get_history(self.locator, max_count=self.query_max_count)
        if log is None or not log.commits:
            return [MessageNode('No commits found')]

        def make_child(commit):
            status = GitStatusFile(commit.file_name or self.locator.file_name, 'M', commit.previous_file_name)
            return CommitFileNode(status, commit, self.explorer, CommitFileNodeDisplayAs.COMMIT)

        return self._page_children(log, make_child)

    async def get_tree_item(self) -> TreeItem:
        return TreeItem('History', CollapsibleState.EXPANDED, ResourceType.FILE_HISTORY,
                        tooltip=f"History of {self.locator.relative_path}")
