"""Repository view nodes."""

import logging
from typing import TYPE_CHECKING, List, Sequence

from ..core.locator import GitLocator
from ..core.node import CollapsibleState, ExplorerNode, ResourceType, TreeItem
from ..git.models import Repository
from .branches import BranchesNode
from .status import StatusFilesNode

if TYPE_CHECKING:
    from ..explorers.base import Explorer

logger = logging.getLogger(__name__)


class RepositoriesNode(ExplorerNode):
    """Composite root listing several repositories."""

    cache_children = True

    def __init__(self, repositories: Sequence[Repository], explorer: 'Explorer'):
        super().__init__()
        self.repositories = list(repositories)
        self.explorer = explorer

    async def _fetch_children(self) -> List[ExplorerNode]:
        return [RepositoryNode(r.locator, r, self.explorer)
                for r in sorted(self.repositories, key=lambda r: r.name)]

    async def get_tree_item(self) -> TreeItem:
        return TreeItem('Repositories', CollapsibleState.EXPANDED, ResourceType.REPOSITORIES)

    def __repr__(self) -> str:
        return f"RepositoriesNode({[r.name for r in self.repositories]})"


class RepositoryNode(ExplorerNode):
    """One repository: working tree changes and branches."""

    cache_children = True

    def __init__(self, locator: GitLocator, repo: Repository, explorer: 'Explorer'):
        super().__init__(locator)
        self.repo = repo
        self.explorer = explorer

    async def _fetch_children(self) -> List[ExplorerNode]:
        return [
            StatusFilesNode(self.locator, self.explorer),
            BranchesNode(self.locator, self.explorer),
        ]

    async def get_tree_item(self) -> TreeItem:
        return TreeItem(self.repo.name, CollapsibleState.EXPANDED, ResourceType.REPOSITORY,
                        tooltip=self.repo.path)
