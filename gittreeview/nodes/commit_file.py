"""Leaf node for one file changed by one commit."""

import logging
from enum import IntFlag
from typing import TYPE_CHECKING, Optional

from ..core.locator import GitLocator
from ..core.node import CollapsibleState, ExplorerNode, NodeCommand, ResourceType, TreeItem
from ..git.models import GitBranch, GitCommit, GitCommitType, GitStatusFile
from .base import format_status_file

if TYPE_CHECKING:
    from ..explorers.base import Explorer

logger = logging.getLogger(__name__)

DIFF_WITH_PREVIOUS_COMMAND = 'gittreeview.diffWithPrevious'


class CommitFileNodeDisplayAs(IntFlag):
    COMMIT_LABEL = 1 << 0
    COMMIT_ICON = 1 << 1
    FILE_LABEL = 1 << 2
    STATUS_ICON = 1 << 3

    COMMIT = COMMIT_LABEL | COMMIT_ICON
    FILE = FILE_LABEL | STATUS_ICON


class CommitFileNode(ExplorerNode):
    """A file at a commit.

    Displayed either as the commit (in file histories) or as the file (in a
    commit's change list). The label is computed at most once per render
    cycle.
    """

    def __init__(self, status: GitStatusFile, commit: GitCommit, explorer: 'Explorer',
                 display_as: CommitFileNodeDisplayAs = CommitFileNodeDisplayAs.COMMIT,
                 branch: Optional[GitBranch] = None):
        super().__init__(GitLocator(repo_path=commit.repo_path, file_name=status.file_name, sha=commit.sha))
        self.status = status
        self.commit = commit
        self.explorer = explorer
        self.display_as = display_as
        self.branch = branch
        self.repo_path = commit.repo_path
        self._label: Optional[str] = None
        self._relative_path: Optional[str] = None

    async def get_tree_item(self) -> TreeItem:
        if self.commit.type is not GitCommitType.FILE:
            # Branch commits lack the file's own previous revision
            log = await self.explorer.git.get_history(
                GitLocator(repo_path=self.repo_path, file_name=self.status.file_name, sha=self.commit.sha),
                max_count=2)
            if log is not None:
                self.commit = log.commits.get(self.commit.sha, self.commit)

        item = TreeItem(self.label, CollapsibleState.NONE, self.resource_type,
                        command=self.get_command(),
                        extra={'icon': 'commit' if self.display_as & CommitFileNodeDisplayAs.COMMIT_ICON
                               else f'status:{self.status.status}'})

        # Only cache the label for a single refresh
        self._label = None

        return item

    @property
    def label(self) -> str:
        if self._label is None:
            config = self.explorer.config
            if self.display_as & CommitFileNodeDisplayAs.COMMIT_LABEL:
                self._label = self.commit.format(config.commit_format, config.date_format)
            else:
                self._label = format_status_file(config.commit_file_format, self.status, self.relative_path)
        return self._label

    @property
    def relative_path(self) -> Optional[str]:
        return self._relative_path

    @relative_path.setter
    def relative_path(self, value: Optional[str]) -> None:
        self._relative_path = value
        self._label = None

    @property
    def resource_type(self) -> ResourceType:
        return ResourceType.COMMIT_FILE

    def refresh(self) -> None:
        self._label = None

    def get_command(self) -> Optional[NodeCommand]:
        return NodeCommand(
            title='Compare File with Previous Revision',
            command=DIFF_WITH_PREVIOUS_COMMAND,
            arguments=(
                GitLocator(repo_path=self.repo_path, file_name=self.status.file_name),
                {'commit': self.commit, 'line': 0, 'preserve_focus': True, 'preview': True},
            ),
        )
