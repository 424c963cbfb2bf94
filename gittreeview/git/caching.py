"""
Caching layer for git data services.

Provides a transparent cache that can wrap any GitService, with
change-driven invalidation so cached answers never outlive the repository
state they were computed from.
"""

import asyncio
import logging
from typing import Any, Awaitable, Callable, Dict, List, Optional, Tuple

from cachetools import TTLCache

from ..core.locator import GitLocator
from .models import GitBranch, GitLog, GitStatusFile, Repository
from .service import GitChangeEvent, GitChangeReason, GitService

logger = logging.getLogger(__name__)


class CachingGitService(GitService):
    """
    Optional caching layer for any git service.

    Caches query results per repository and uses Future-based sharing so
    that concurrent identical queries hit the underlying service once.
    Change events from the wrapped service invalidate the affected entries
    before they are re-published to this service's subscribers.

    Example:
        git = CachingGitService(Pygit2GitService([workspace]), max_size=5000)
        explorer = GitExplorer(git, tracker)
    """

    def __init__(
        self,
        base_service: GitService,
        max_size: int = 10000,
        ttl: float = 300.0  # 5 minutes
    ):
        """
        Initialize caching service.

        Args:
            base_service: The underlying git service to wrap
            max_size: Maximum number of entries in cache
            ttl: Time-to-live for cache entries in seconds
        """
        super().__init__()
        self._service = base_service
        self._cache = TTLCache(maxsize=max_size, ttl=ttl)
        self._queries_in_progress: Dict[Tuple, asyncio.Future] = {}
        self._subscription = base_service.on_did_change.subscribe(self._on_base_changed)

        # Statistics
        self.cache_hits = 0
        self.cache_misses = 0
        self.concurrent_waits = 0
        self.invalidations = 0

    @property
    def base_service(self) -> GitService:
        return self._service

    async def _cached(self, key: Tuple, query: Callable[[], Awaitable[Any]]) -> Any:
        """
        Answer ``query`` from cache, an in-flight twin, or the base service.

        Keys start with the repository path (or None for global queries) so
        invalidation can target one repository.
        """
        # 1. Share a query that is already running
        if key in self._queries_in_progress:
            self.concurrent_waits += 1
            try:
                return await asyncio.shield(self._queries_in_progress[key])
            except Exception:
                # If the original query failed, we'll try again
                pass

        # 2. Check cache
        if key in self._cache:
            self.cache_hits += 1
            return self._cache[key]

        # 3. Cache miss - need to query
        self.cache_misses += 1
        future = asyncio.get_running_loop().create_future()
        self._queries_in_progress[key] = future

        try:
            result = await query()
            self._cache[key] = result
            future.set_result(result)
            return result
        except Exception as e:
            future.set_exception(e)
            # Nobody may be waiting; mark the exception as retrieved
            future.exception()
            raise
        finally:
            if self._queries_in_progress.get(key) is future:
                del self._queries_in_progress[key]

    async def list_repositories(self) -> List[Repository]:
        return await self._cached((None, 'repositories'), self._service.list_repositories)

    async def get_repository(self, locator: GitLocator) -> Optional[Repository]:
        return await self._service.get_repository(locator)

    async def get_history(self, locator: GitLocator, max_count: Optional[int] = None) -> Optional[GitLog]:
        return await self._cached(
            (locator.repo_path, 'history', locator, max_count),
            lambda: self._service.get_history(locator, max_count),
        )

    async def get_branches(self, repo_path: str) -> List[GitBranch]:
        return await self._cached((repo_path, 'branches'), lambda: self._service.get_branches(repo_path))

    async def get_remotes(self, repo_path: str) -> List[str]:
        return await self._cached((repo_path, 'remotes'), lambda: self._service.get_remotes(repo_path))

    async def get_commit_files(self, repo_path: str, sha: str) -> List[GitStatusFile]:
        return await self._cached(
            (repo_path, 'commit-files', sha),
            lambda: self._service.get_commit_files(repo_path, sha),
        )

    async def get_status(self, repo_path: str) -> List[GitStatusFile]:
        # Working tree status changes without commits; never cached
        return await self._service.get_status(repo_path)

    async def search_commits(self, repo_path: str, search: str,
                             max_count: Optional[int] = None) -> Optional[GitLog]:
        return await self._cached(
            (repo_path, 'search', search, max_count),
            lambda: self._service.search_commits(repo_path, search, max_count),
        )

    def is_trackable(self, document: str) -> bool:
        return self._service.is_trackable(document)

    async def resolve_locator(self, document: str) -> Optional[GitLocator]:
        return await self._service.resolve_locator(document)

    def stop_watching_file_system(self) -> None:
        self._service.stop_watching_file_system()

    def invalidate(self, repo_path: Optional[str] = None) -> int:
        """
        Invalidate cache entries.

        Args:
            repo_path: Repository whose entries to drop (None = all)

        Returns:
            Number of entries invalidated
        """
        if repo_path is None:
            count = len(self._cache)
            self._cache.clear()
        else:
            keys = [k for k in list(self._cache.keys()) if k[0] == repo_path]
            for key in keys:
                self._cache.pop(key, None)
            count = len(keys)

        self.invalidations += count
        logger.debug(f"CachingGitService: invalidated {count} entries (repo_path={repo_path!r})")
        return count

    async def _on_base_changed(self, event: GitChangeEvent) -> None:
        if event.reason is GitChangeReason.REPOSITORIES or event.repo_path is None:
            self.invalidate()
        else:
            self.invalidate(event.repo_path)
        await self.on_did_change.fire(event)

    def get_cache_stats(self) -> dict:
        """
        Get cache statistics for monitoring and debugging.
        """
        total_requests = self.cache_hits + self.cache_misses
        hit_rate = self.cache_hits / total_requests if total_requests > 0 else 0

        return {
            'cache_hits': self.cache_hits,
            'cache_misses': self.cache_misses,
            'hit_rate': hit_rate,
            'concurrent_waits': self.concurrent_waits,
            'invalidations': self.invalidations,
            'cache_size': len(self._cache),
            'max_size': self._cache.maxsize,
            'ttl': self._cache.ttl
        }

    def clear_cache(self) -> None:
        """
        Clear all cached entries.
        """
        self._cache.clear()
        self.cache_hits = 0
        self.cache_misses = 0
        self.concurrent_waits = 0

    def dispose(self) -> None:
        self._subscription.dispose()
        super().dispose()
