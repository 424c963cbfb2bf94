"""Host-facing commands that publish into the explorers."""

import logging
from typing import Optional

from .config import ExplorerConfig
from .core.paging import query_limit
from .explorers.results_explorer import ResultsExplorer
from .git.models import GitLog
from .git.service import GitService
from .nodes.results import SearchCommitsResultsNode

logger = logging.getLogger(__name__)


class ShowCommitSearchCommand:
    """Search commit messages and publish the matches as a result root.

    The results explorer is handed in by the host rather than looked up,
    so several independent explorer sets can live side by side.

    Example:
        command = ShowCommitSearchCommand(git, results_explorer)
        node = await command.execute('/path/to/repo', 'fix bug')
    """

    command = 'gittreeview.showCommitSearch'

    def __init__(self, git: GitService, results_explorer: ResultsExplorer,
                 config: Optional[ExplorerConfig] = None):
        self.git = git
        self.results_explorer = results_explorer
        self.config = config if config is not None else results_explorer.config

    async def execute(self, repo_path: str, search: str,
                      max_count: Optional[int] = None) -> Optional[SearchCommitsResultsNode]:
        """Run the search and publish it.

        Args:
            repo_path: Repository to search
            search: Text to look for in commit messages
            max_count: Cap for the first query (defaults to the page limit;
                0 = no cap)

        Returns:
            The published result node, or None for an empty search
        """
        search = (search or '').strip()
        if not search:
            logger.debug("Ignoring empty commit search")
            return None

        if max_count is None:
            max_count = self.config.page_limit

        results = await self.git.search_commits(repo_path, search, query_limit(max_count))
        if results is None:
            results = GitLog(repo_path)

        logger.info(f"Commit search '{search}' in {repo_path}: {len(results)} result(s)"
                    f"{' (truncated)' if results.truncated else ''}")

        async def query(count: Optional[int]) -> Optional[GitLog]:
            return await self.git.search_commits(repo_path, search, count)

        return await self.results_explorer.show_commit_search_results(search, results, query, repo_path)
