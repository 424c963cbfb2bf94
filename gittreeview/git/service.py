"""Git data layer abstraction.

Defines what the explorers ask of git. Every query is async because the
answers come from an out-of-process, continuously changing repository.
Implementations may return empty results; explorers treat empty as
"no data", never as an error.
"""

import os
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional

from ..core.locator import GitLocator
from ..events import EventEmitter
from .models import GitBranch, GitLog, GitStatusFile, Repository


class GitDataError(Exception):
    """A data-layer query failed."""

    def __init__(self, message: str, locator: Optional[GitLocator] = None):
        super().__init__(message)
        self.locator = locator


class GitChangeReason(Enum):
    REPOSITORIES = 'repositories'   # A repository was added or removed
    REPOSITORY = 'repository'       # History or refs of one repository changed


@dataclass(frozen=True)
class GitChangeEvent:
    reason: GitChangeReason
    repo_path: Optional[str] = None


class GitService(ABC):
    """Abstract git data layer and change source.

    Subclasses implement the queries; change notifications are published on
    ``on_did_change``.
    """

    def __init__(self):
        self._on_did_change: EventEmitter[GitChangeEvent] = EventEmitter('GitChanged')

    @property
    def on_did_change(self) -> EventEmitter:
        return self._on_did_change

    async def notify_change(self, reason: GitChangeReason, repo_path: Optional[str] = None) -> None:
        """Publish a change event to subscribers."""
        await self._on_did_change.fire(GitChangeEvent(reason, repo_path))

    @abstractmethod
    async def list_repositories(self) -> List[Repository]:
        """Get every known repository."""
        pass

    async def get_repository(self, locator: GitLocator) -> Optional[Repository]:
        """Get the known repository ``locator`` belongs to.

        Default implementation matches ``locator.repo_path`` against
        ``list_repositories``.
        """
        if locator.repo_path is None:
            return None
        for repo in await self.list_repositories():
            if _same_path(repo.path, locator.repo_path):
                return repo
        return None

    @abstractmethod
    async def get_history(self, locator: GitLocator, max_count: Optional[int] = None) -> Optional[GitLog]:
        """Get commits reachable from ``locator.sha`` (HEAD when unset).

        When ``locator.file_name`` is set, only commits touching that file.

        Args:
            locator: What to get history for
            max_count: Maximum number of commits (None = all)

        Returns:
            The log, with ``truncated`` set when more commits exist
        """
        pass

    @abstractmethod
    async def get_branches(self, repo_path: str) -> List[GitBranch]:
        pass

    async def get_remotes(self, repo_path: str) -> List[str]:
        """Get remote names. Default: no remotes."""
        return []

    @abstractmethod
    async def get_commit_files(self, repo_path: str, sha: str) -> List[GitStatusFile]:
        """Get the files changed by a commit."""
        pass

    async def get_status(self, repo_path: str) -> List[GitStatusFile]:
        """Get working tree changes. Default: a clean tree."""
        return []

    @abstractmethod
    async def search_commits(self, repo_path: str, search: str,
                             max_count: Optional[int] = None) -> Optional[GitLog]:
        """Get commits whose message contains ``search``."""
        pass

    @abstractmethod
    def is_trackable(self, document: str) -> bool:
        """Check if ``document`` lives in a repository."""
        pass

    @abstractmethod
    async def resolve_locator(self, document: str) -> Optional[GitLocator]:
        """Get the locator of ``document``, or None outside any repository."""
        pass

    def stop_watching_file_system(self) -> None:
        """Stop any file system watching. Override if the service watches."""
        pass

    def dispose(self) -> None:
        self._on_did_change.clear()


def _same_path(a: str, b: str) -> bool:
    return os.path.normcase(os.path.normpath(a)) == os.path.normcase(os.path.normpath(b))
