"""Test fixtures for gittreeview consumers.

These fixtures provide an in-memory git data layer so explorers and nodes
can be exercised without a repository on disk, while keeping count of
every query the explorers make.
"""

import asyncio
import itertools
from collections import Counter
from datetime import datetime, timedelta
from typing import Dict, Iterable, List, Optional, Tuple

from ..core.locator import GitLocator
from ..git.models import GitBranch, GitCommit, GitCommitType, GitLog, GitStatusFile, Repository
from ..git.service import GitChangeReason, GitService

_sha_counter = itertools.count(1)


def make_commit(message: str = 'Commit', repo_path: str = '/repo', sha: Optional[str] = None,
                author: str = 'Test Author', date: Optional[datetime] = None,
                file_name: str = '', previous_sha: Optional[str] = None) -> GitCommit:
    """Create a commit with a unique, deterministic sha."""
    if sha is None:
        sha = f"{next(_sha_counter):040x}"
    return GitCommit(
        repo_path=repo_path,
        sha=sha,
        author=author,
        date=date or datetime(2024, 1, 1, 12, 0),
        message=message,
        file_name=file_name,
        type=GitCommitType.FILE if file_name else GitCommitType.BRANCH,
        previous_sha=previous_sha,
    )


def make_commits(count: int, repo_path: str = '/repo', message: str = 'Commit {n}',
                 file_name: str = '') -> List[GitCommit]:
    """Create ``count`` commits, newest first, each pointing at the next."""
    start = datetime(2024, 1, 1, 12, 0)
    commits = [make_commit(message.format(n=n), repo_path, date=start + timedelta(minutes=n),
                           file_name=file_name)
               for n in range(count, 0, -1)]
    for commit, parent in zip(commits, commits[1:]):
        commit.previous_sha = parent.sha
    return commits


def make_log(commits: Iterable[GitCommit], repo_path: str = '/repo',
             max_count: Optional[int] = None, truncated: bool = False) -> GitLog:
    return GitLog.from_commits(repo_path, list(commits), max_count=max_count, truncated=truncated)


class FakeGitService(GitService):
    """In-memory GitService.

    Every query increments ``calls[<method name>]``. A query can be made to
    fail with ``fail(name, error)`` or held back until the test releases it
    with ``hold(name)`` / ``release(name)``.

    Example:
        git = FakeGitService()
        repo = git.add_repository('/repo')
        git.set_history('/repo', make_commits(3))
        git.track_document('/repo/a.py', '/repo', 'a.py')
    """

    def __init__(self):
        super().__init__()
        self.repositories: List[Repository] = []
        self.histories: Dict[Tuple[str, Optional[str], Optional[str]], List[GitCommit]] = {}
        self.branches: Dict[str, List[GitBranch]] = {}
        self.remotes: Dict[str, List[str]] = {}
        self.commit_files: Dict[Tuple[str, str], List[GitStatusFile]] = {}
        self.status: Dict[str, List[GitStatusFile]] = {}
        self.documents: Dict[str, GitLocator] = {}
        self.calls: Counter = Counter()
        self.failures: Dict[str, Exception] = {}
        self._gates: Dict[str, asyncio.Event] = {}
        self.stop_watching_count = 0

    # Setup

    def add_repository(self, path: str, name: Optional[str] = None) -> Repository:
        repo = Repository(path, name)
        self.repositories.append(repo)
        return repo

    async def remove_repository(self, path: str) -> None:
        self.repositories = [r for r in self.repositories if r.path != path]
        await self.notify_change(GitChangeReason.REPOSITORIES)

    def set_history(self, repo_path: str, commits: List[GitCommit],
                    file_name: Optional[str] = None, ref: Optional[str] = None) -> None:
        """Set the history (newest first) returned for a repository, file or branch."""
        self.histories[(repo_path, file_name, ref)] = list(commits)

    def set_branches(self, repo_path: str, branches: List[GitBranch], remotes: Iterable[str] = ()) -> None:
        self.branches[repo_path] = list(branches)
        self.remotes[repo_path] = list(remotes)

    def set_commit_files(self, repo_path: str, sha: str, files: List[GitStatusFile]) -> None:
        self.commit_files[(repo_path, sha)] = list(files)

    def set_status(self, repo_path: str, files: List[GitStatusFile]) -> None:
        self.status[repo_path] = list(files)

    def track_document(self, document: str, repo_path: str, file_name: str) -> GitLocator:
        """Make ``document`` trackable as ``file_name`` in ``repo_path``."""
        locator = GitLocator(repo_path=repo_path, file_name=file_name)
        self.documents[document] = locator
        return locator

    def fail(self, operation: str, error: Exception) -> None:
        self.failures[operation] = error

    def succeed(self, operation: str) -> None:
        self.failures.pop(operation, None)

    def hold(self, operation: str) -> None:
        """Block ``operation`` until ``release`` is called."""
        self._gates[operation] = asyncio.Event()

    def release(self, operation: str) -> None:
        gate = self._gates.pop(operation, None)
        if gate is not None:
            gate.set()

    async def _record(self, operation: str) -> None:
        self.calls[operation] += 1
        gate = self._gates.get(operation)
        if gate is not None:
            await gate.wait()
        error = self.failures.get(operation)
        if error is not None:
            raise error

    # GitService

    async def list_repositories(self) -> List[Repository]:
        await self._record('list_repositories')
        return list(self.repositories)

    async def get_history(self, locator: GitLocator, max_count: Optional[int] = None) -> Optional[GitLog]:
        await self._record('get_history')
        commits = self._find_history(locator)
        if commits is None:
            return None

        truncated = max_count is not None and len(commits) > max_count
        if truncated:
            commits = commits[:max_count]
        return make_log(commits, locator.repo_path, max_count=max_count, truncated=truncated)

    def _find_history(self, locator: GitLocator) -> Optional[List[GitCommit]]:
        repo_path, file_name, sha = locator.repo_path, locator.file_name, locator.sha
        if (repo_path, file_name, sha) in self.histories:
            return list(self.histories[(repo_path, file_name, sha)])

        commits = self.histories.get((repo_path, file_name, None))
        if commits is None:
            return None
        if sha is None:
            return list(commits)

        # History reachable from ``sha``
        for index, commit in enumerate(commits):
            if commit.sha == sha:
                return list(commits[index:])
        return []

    async def get_branches(self, repo_path: str) -> List[GitBranch]:
        await self._record('get_branches')
        return list(self.branches.get(repo_path, []))

    async def get_remotes(self, repo_path: str) -> List[str]:
        await self._record('get_remotes')
        return list(self.remotes.get(repo_path, []))

    async def get_commit_files(self, repo_path: str, sha: str) -> List[GitStatusFile]:
        await self._record('get_commit_files')
        return list(self.commit_files.get((repo_path, sha), []))

    async def get_status(self, repo_path: str) -> List[GitStatusFile]:
        await self._record('get_status')
        return list(self.status.get(repo_path, []))

    async def search_commits(self, repo_path: str, search: str,
                             max_count: Optional[int] = None) -> Optional[GitLog]:
        await self._record('search_commits')
        commits = self.histories.get((repo_path, None, None))
        if commits is None:
            return None

        needle = search.lower()
        matches = [c for c in commits if needle in c.message.lower()]
        truncated = max_count is not None and len(matches) > max_count
        if truncated:
            matches = matches[:max_count]
        return make_log(matches, repo_path, max_count=max_count, truncated=truncated)

    def is_trackable(self, document: str) -> bool:
        self.calls['is_trackable'] += 1
        return document in self.documents

    async def resolve_locator(self, document: str) -> Optional[GitLocator]:
        await self._record('resolve_locator')
        return self.documents.get(document)

    def stop_watching_file_system(self) -> None:
        self.stop_watching_count += 1
