"""Branch nodes of the repository view."""

import logging
from typing import TYPE_CHECKING, List

from ..constants import GlyphChars
from ..core.locator import GitLocator
from ..core.node import CollapsibleState, ExplorerNode, MessageNode, ResourceType, TreeItem
from ..git.models import GitBranch
from .base import PagingNode
from .commits import CommitNode

if TYPE_CHECKING:
    from ..explorers.base import Explorer

logger = logging.getLogger(__name__)


class BranchesNode(ExplorerNode):
    """Local branches of a repository, current branch first."""

    def __init__(self, locator: GitLocator, explorer: 'Explorer'):
        super().__init__(locator)
        self.explorer = explorer
        self.repo_path = locator.repo_path

    async def _fetch_children(self) -> List[ExplorerNode]:
        branches = await self.explorer.git.get_branches(self.repo_path)
        local = [b for b in branches if not b.remote]
        local.sort(key=lambda b: (not b.current, b.name))

        return [BranchHistoryNode(b, GitLocator.for_repository(self.repo_path), self.explorer)
                for b in local]

    async def get_tree_item(self) -> TreeItem:
        remotes = await self.explorer.git.get_remotes(self.repo_path)
        return TreeItem(
            'Branches',
            CollapsibleState.COLLAPSED,
            ResourceType.BRANCHES_WITH_REMOTES if remotes else ResourceType.BRANCHES,
        )


class BranchHistoryNode(PagingNode):
    """History of one branch, capped at the page limit."""

    def __init__(self, branch: GitBranch, locator: GitLocator, explorer: 'Explorer'):
        super().__init__(locator.with_sha(branch.name), explorer)
        self.branch = branch
        self.repo_path = locator.repo_path

    async def _fetch_children(self) -> List[ExplorerNode]:
        log = await self.explorer.git.get_history(self.locator, max_count=self.query_max_count)
        if log is None or not log.commits:
            return [MessageNode('No commits yet')]

        return self._page_children(log, lambda c: CommitNode(c, self.explorer, self.branch))

    async def get_tree_item(self) -> TreeItem:
        name = self.branch.get_name()
        if self.branch.current:
            name = f"{GlyphChars.Check} {name}"

        show_tracking = getattr(self.explorer.config, 'show_tracking_branch', True)
        if show_tracking and self.branch.tracking:
            name = f"{name} {GlyphChars.ArrowLeftRight} {self.branch.tracking}"

        return TreeItem(name, CollapsibleState.COLLAPSED, self.resource_type,
                        extra={'icon': 'branch-current' if self.branch.current else 'branch'})

    @property
    def resource_type(self) -> ResourceType:
        if self.branch.remote:
            return ResourceType.REMOTE_BRANCH_HISTORY
        if self.branch.current:
            return (ResourceType.CURRENT_BRANCH_HISTORY_WITH_TRACKING if self.branch.tracking
                    else ResourceType.CURRENT_BRANCH_HISTORY)
        return (ResourceType.BRANCH_HISTORY_WITH_TRACKING if self.branch.tracking
                else ResourceType.BRANCH_HISTORY)

    def __repr__(self) -> str:
        return f"BranchHistoryNode({self.branch.name!r})"
