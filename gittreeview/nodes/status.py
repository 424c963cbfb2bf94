"""Working tree status nodes."""

from typing import TYPE_CHECKING, List, Optional, Sequence

from ..core.locator import GitLocator
from ..core.node import CollapsibleState, ExplorerNode, MessageNode, NodeCommand, ResourceType, TreeItem
from ..git.models import GitBranch, GitCommit, GitStatusFile
from .base import format_status_file
from .commit_file import CommitFileNode, CommitFileNodeDisplayAs

if TYPE_CHECKING:
    from ..explorers.base import Explorer


class StatusFilesNode(ExplorerNode):
    """Files changed in the working tree. Re-queried on every expansion."""

    def __init__(self, locator: GitLocator, explorer: 'Explorer', branch: Optional[GitBranch] = None):
        super().__init__(locator)
        self.explorer = explorer
        self.branch = branch
        self.repo_path = locator.repo_path

    async def _fetch_children(self) -> List[ExplorerNode]:
        files = await self.explorer.git.get_status(self.repo_path)
        if not files:
            return [MessageNode('No changes')]

        return [
            StatusFileCommitsNode(self.repo_path, f, [GitCommit.uncommitted(self.repo_path, f.file_name)],
                                  self.explorer, self.branch)
            for f in sorted(files, key=lambda f: f.file_name)
        ]

    async def get_tree_item(self) -> TreeItem:
        files = await self.explorer.git.get_status(self.repo_path)
        count = len(files)
        label = f"{count} file{'' if count == 1 else 's'} changed" if count else 'No changes'
        return TreeItem(label, CollapsibleState.COLLAPSED if count else CollapsibleState.NONE,
                        ResourceType.STATUS_FILES)


class StatusFileCommitsNode(ExplorerNode):
    """One changed file and the commits (or pseudo-commits) that touch it."""

    def __init__(self, repo_path: str, status: GitStatusFile, commits: Sequence[GitCommit],
                 explorer: 'Explorer', branch: Optional[GitBranch] = None):
        super().__init__(GitLocator(repo_path=repo_path, file_name=status.file_name))
        self.repo_path = repo_path
        self.status = status
        self.commits = list(commits)
        self.explorer = explorer
        self.branch = branch

    async def _fetch_children(self) -> List[ExplorerNode]:
        return [
            CommitFileNode(self.status, c, self.explorer, CommitFileNodeDisplayAs.COMMIT, self.branch)
            for c in self.commits
        ]

    async def get_tree_item(self) -> TreeItem:
        label = format_status_file(self.explorer.config.status_file_format, self.status)
        if self._on_uncommitted_only:
            return TreeItem(label, CollapsibleState.NONE, ResourceType.STATUS_FILE,
                            command=self.get_command(),
                            extra={'icon': f'status:{self.status.status}'})

        return TreeItem(label, CollapsibleState.COLLAPSED, ResourceType.STATUS_FILE_COMMITS,
                        extra={'icon': f'status:{self.status.status}'})

    @property
    def _on_uncommitted_only(self) -> bool:
        return len(self.commits) == 1 and self.commits[0].is_uncommitted

    def get_command(self) -> Optional[NodeCommand]:
        if not self._on_uncommitted_only:
            return None
        # Same command the single child would carry
        return CommitFileNode(self.status, self.commits[0], self.explorer,
                              CommitFileNodeDisplayAs.FILE, self.branch).get_command()
