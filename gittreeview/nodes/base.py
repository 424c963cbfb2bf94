"""Building blocks shared by the domain nodes."""

import posixpath
from typing import TYPE_CHECKING, Callable, List, Optional

from ..core.locator import GitLocator
from ..core.node import ExplorerNode, ShowAllNode
from ..core.paging import effective_limit, paginate, query_limit
from ..git.models import GitCommit, GitLog, GitStatusFile

if TYPE_CHECKING:
    from ..explorers.base import Explorer


class PagingNode(ExplorerNode):
    """Node whose children are a capped page of commits.

    When the page is truncated, a ``ShowAllNode`` titled
    ``show_all_title`` is appended as the last child.
    """

    supports_paging = True
    show_all_title = 'Show All Commits'

    def __init__(self, locator: GitLocator, explorer: 'Explorer'):
        super().__init__(locator)
        self.explorer = explorer

    @property
    def limit(self) -> int:
        """Page limit in force (0 = unlimited)."""
        return effective_limit(self, self.explorer.config.page_limit)

    @property
    def query_max_count(self) -> Optional[int]:
        """``max_count`` to hand to the data layer (None = all)."""
        return query_limit(self.limit)

    def _page_children(self, log: GitLog,
                       make_child: Callable[[GitCommit], ExplorerNode]) -> List[ExplorerNode]:
        page, truncated = paginate(log.commits.values(), self.limit)
        children: List[ExplorerNode] = [make_child(c) for c in page]
        if truncated or log.truncated:
            children.append(ShowAllNode(self.show_all_title, self, self.explorer))
        return children


def format_status_file(template: str, status: GitStatusFile, relative_path: Optional[str] = None) -> str:
    """Format a changed file label.

    Template fields: ``file`` (base name), ``path`` (``relative_path`` when
    given, else the full repository path), ``directory`` and ``status``.
    """
    return template.format(
        file=posixpath.basename(status.file_name),
        path=relative_path if relative_path is not None else status.file_name,
        directory=posixpath.dirname(status.file_name),
        status=status.status,
    )
