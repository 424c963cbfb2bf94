"""Commit nodes: one commit with its changed files, and generic commit lists."""

import logging
from typing import TYPE_CHECKING, Awaitable, Callable, List, Optional

from ..core.locator import GitLocator
from ..core.node import CollapsibleState, ExplorerNode, MessageNode, ResourceType, TreeItem
from ..git.models import GitBranch, GitCommit, GitLog
from .base import PagingNode
from .commit_file import CommitFileNode, CommitFileNodeDisplayAs

if TYPE_CHECKING:
    from ..explorers.base import Explorer

logger = logging.getLogger(__name__)

LogQuery = Callable[[Optional[int]], Awaitable[Optional[GitLog]]]


class CommitNode(ExplorerNode):
    """A commit, expanding to the files it changed.

    A commit's file list never changes for a given sha, so it is cached
    until an explicit ``refresh``.
    """

    cache_children = True

    def __init__(self, commit: GitCommit, explorer: 'Explorer', branch: Optional[GitBranch] = None):
        super().__init__(commit.locator)
        self.commit = commit
        self.explorer = explorer
        self.branch = branch
        self.repo_path = commit.repo_path

    async def _fetch_children(self) -> List[ExplorerNode]:
        files = await self.explorer.git.get_commit_files(self.repo_path, self.commit.sha)
        files = sorted(files, key=lambda f: f.file_name)
        return [
            CommitFileNode(f, self.commit, self.explorer, CommitFileNodeDisplayAs.FILE, self.branch)
            for f in files
        ]

    async def get_tree_item(self) -> TreeItem:
        config = self.explorer.config
        current = self.branch is not None and self.branch.current
        return TreeItem(
            self.commit.format(config.commit_format, config.date_format),
            CollapsibleState.COLLAPSED,
            ResourceType.COMMIT_ON_CURRENT_BRANCH if current else ResourceType.COMMIT,
            tooltip=f"{self.commit.author}, {self.commit.date.strftime(config.date_format)}\n\n{self.commit.message}",
        )


class CommitsNode(PagingNode):
    """Paged list of commits produced by ``log_fn``.

    ``log_fn`` is called with the data-layer ``max_count`` (None = all) on
    every expansion.
    """

    def __init__(self, repo_path: str, log_fn: LogQuery, explorer: 'Explorer',
                 label: str = 'Commits', branch: Optional[GitBranch] = None):
        super().__init__(GitLocator.for_repository(repo_path), explorer)
        self.repo_path = repo_path
        self.log_fn = log_fn
        self.label = label
        self.branch = branch

    async def _fetch_children(self) -> List[ExplorerNode]:
        log = await self.log_fn(self.query_max_count)
        if log is None or not log.commits:
            return [MessageNode('No commits')]

        return self._page_children(log, lambda c: CommitNode(c, self.explorer, self.branch))

    async def get_tree_item(self) -> TreeItem:
        return TreeItem(self.label, CollapsibleState.COLLAPSED, ResourceType.COMMITS)
