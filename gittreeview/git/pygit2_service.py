"""Git data layer backed by pygit2.

Queries run in worker threads so the explorers' event loop never blocks on
libgit2. A fresh ``pygit2.Repository`` is opened per query; repository
objects are not shared across threads.
"""

import asyncio
import logging
import os
from datetime import datetime
from typing import Iterable, List, Optional

import pygit2
from pygit2.enums import FileStatus

from ..core.locator import GitLocator
from .models import GitBranch, GitCommit, GitCommitType, GitLog, GitStatusFile, Repository
from .service import GitChangeReason, GitDataError, GitService

logger = logging.getLogger(__name__)

# Working tree status flags, checked in priority order
_STATUS_FLAGS = (
    ('!', FileStatus.CONFLICTED),
    ('A', FileStatus.INDEX_NEW),
    ('D', FileStatus.INDEX_DELETED | FileStatus.WT_DELETED),
    ('R', FileStatus.INDEX_RENAMED | FileStatus.WT_RENAMED),
    ('M', FileStatus.INDEX_MODIFIED | FileStatus.WT_MODIFIED | FileStatus.INDEX_TYPECHANGE
     | FileStatus.WT_TYPECHANGE),
    ('?', FileStatus.WT_NEW),
)


def _status_char(flags: int) -> Optional[str]:
    """Map pygit2 status flags to a one-letter status (None for clean/ignored)."""
    if flags & FileStatus.IGNORED:
        return None
    for status, mask in _STATUS_FLAGS:
        if flags & mask:
            return status
    return None


def _tree_entry_id(tree, path: str):
    try:
        return tree[path].id
    except KeyError:
        return None


def _touches(commit, path: str) -> bool:
    """Check if ``commit`` changed ``path`` relative to its first parent."""
    entry_id = _tree_entry_id(commit.tree, path)
    if not commit.parents:
        return entry_id is not None
    return _tree_entry_id(commit.parents[0].tree, path) != entry_id


class Pygit2GitService(GitService):
    """GitService over the repositories found in a set of workspace folders."""

    def __init__(self, workspace_folders: Iterable[str] = ()):
        super().__init__()
        self._workspace_folders: List[str] = [os.path.abspath(f) for f in workspace_folders]

    @property
    def workspace_folders(self) -> List[str]:
        return list(self._workspace_folders)

    async def add_workspace_folder(self, folder: str) -> None:
        folder = os.path.abspath(folder)
        if folder in self._workspace_folders:
            return
        self._workspace_folders.append(folder)
        await self.notify_change(GitChangeReason.REPOSITORIES)

    async def remove_workspace_folder(self, folder: str) -> None:
        folder = os.path.abspath(folder)
        if folder not in self._workspace_folders:
            return
        self._workspace_folders.remove(folder)
        await self.notify_change(GitChangeReason.REPOSITORIES)

    # Queries

    async def list_repositories(self) -> List[Repository]:
        return await asyncio.to_thread(self._list_repositories)

    async def get_history(self, locator: GitLocator, max_count: Optional[int] = None) -> Optional[GitLog]:
        return await asyncio.to_thread(self._get_history, locator, max_count)

    async def get_branches(self, repo_path: str) -> List[GitBranch]:
        return await asyncio.to_thread(self._get_branches, repo_path)

    async def get_remotes(self, repo_path: str) -> List[str]:
        return await asyncio.to_thread(self._get_remotes, repo_path)

    async def get_commit_files(self, repo_path: str, sha: str) -> List[GitStatusFile]:
        return await asyncio.to_thread(self._get_commit_files, repo_path, sha)

    async def get_status(self, repo_path: str) -> List[GitStatusFile]:
        return await asyncio.to_thread(self._get_status, repo_path)

    async def search_commits(self, repo_path: str, search: str,
                             max_count: Optional[int] = None) -> Optional[GitLog]:
        return await asyncio.to_thread(self._search_commits, repo_path, search, max_count)

    def is_trackable(self, document: str) -> bool:
        if not document:
            return False
        return self._discover(os.path.dirname(os.path.abspath(document))) is not None

    async def resolve_locator(self, document: str) -> Optional[GitLocator]:
        return await asyncio.to_thread(self._resolve_locator, document)

    # Worker-thread implementations

    def _discover(self, path: str) -> Optional[str]:
        if not os.path.isdir(path):
            return None
        gitdir = pygit2.discover_repository(path)
        return gitdir or None

    def _open(self, repo_path: str) -> pygit2.Repository:
        try:
            return pygit2.Repository(repo_path)
        except (pygit2.GitError, KeyError, OSError) as e:
            raise GitDataError(f"Unable to open repository '{repo_path}': {e}",
                               GitLocator(repo_path=repo_path)) from e

    def _list_repositories(self) -> List[Repository]:
        repositories = []
        seen = set()
        for folder in self._workspace_folders:
            gitdir = self._discover(folder)
            if gitdir is None:
                continue
            repo = self._open(gitdir)
            if not repo.workdir:
                continue  # Bare repositories have nothing to explore
            path = os.path.normpath(repo.workdir)
            if path in seen:
                continue
            seen.add(path)
            repositories.append(Repository(path))
        return repositories

    def _resolve_commit(self, repo: pygit2.Repository, ref: Optional[str]) -> Optional[pygit2.Commit]:
        if ref is None:
            if repo.head_is_unborn:
                return None
            return repo.head.peel(pygit2.Commit)
        try:
            return repo.revparse_single(ref).peel(pygit2.Commit)
        except (KeyError, ValueError, pygit2.GitError) as e:
            raise GitDataError(f"Unknown revision '{ref}': {e}") from e

    def _to_commit(self, repo_path: str, commit: pygit2.Commit, file_name: Optional[str] = None) -> GitCommit:
        parent_ids = commit.parent_ids
        return GitCommit(
            repo_path=repo_path,
            sha=str(commit.id),
            author=commit.author.name,
            date=datetime.fromtimestamp(commit.author.time),
            message=commit.message,
            file_name=file_name or '',
            type=GitCommitType.FILE if file_name else GitCommitType.BRANCH,
            previous_sha=str(parent_ids[0]) if parent_ids else None,
        )

    def _get_history(self, locator: GitLocator, max_count: Optional[int]) -> Optional[GitLog]:
        repo = self._open(locator.repo_path)
        target = self._resolve_commit(repo, locator.sha)
        if target is None:
            return None

        commits = []
        truncated = False
        try:
            for commit in repo.walk(target.id):
                if locator.file_name and not _touches(commit, locator.file_name):
                    continue
                if max_count is not None and len(commits) >= max_count:
                    truncated = True
                    break
                commits.append(self._to_commit(locator.repo_path, commit, locator.file_name))
        except pygit2.GitError as e:
            raise GitDataError(f"Unable to walk history of {locator}: {e}", locator) from e

        return GitLog.from_commits(locator.repo_path, commits, max_count=max_count, truncated=truncated)

    def _get_branches(self, repo_path: str) -> List[GitBranch]:
        repo = self._open(repo_path)
        branches = []
        for name in repo.branches.local:
            branch = repo.branches.local[name]
            tracking = None
            ahead = behind = 0
            try:
                upstream = branch.upstream
            except pygit2.GitError:
                upstream = None
            if upstream is not None:
                tracking = upstream.shorthand
                ahead, behind = repo.ahead_behind(branch.target, upstream.target)
            branches.append(GitBranch(repo_path, name, current=branch.is_head(),
                                      tracking=tracking, ahead=ahead, behind=behind))

        for name in repo.branches.remote:
            if name.endswith('/HEAD'):
                continue
            branches.append(GitBranch(repo_path, name, remote=True))

        return branches

    def _get_remotes(self, repo_path: str) -> List[str]:
        repo = self._open(repo_path)
        return [remote.name for remote in repo.remotes]

    def _get_commit_files(self, repo_path: str, sha: str) -> List[GitStatusFile]:
        repo = self._open(repo_path)
        commit = self._resolve_commit(repo, sha)
        if commit.parents:
            diff = repo.diff(commit.parents[0], commit)
        else:
            diff = commit.tree.diff_to_tree(swap=True)
        diff.find_similar()

        files = []
        for delta in diff.deltas:
            status = delta.status_char()
            original = delta.old_file.path if status in ('R', 'C') else None
            files.append(GitStatusFile(delta.new_file.path, status, original))
        return files

    def _get_status(self, repo_path: str) -> List[GitStatusFile]:
        repo = self._open(repo_path)
        files = []
        for path, flags in sorted(repo.status().items()):
            status = _status_char(int(flags))
            if status is not None:
                files.append(GitStatusFile(path, status))
        return files

    def _search_commits(self, repo_path: str, search: str, max_count: Optional[int]) -> Optional[GitLog]:
        repo = self._open(repo_path)
        target = self._resolve_commit(repo, None)
        if target is None:
            return None

        needle = search.lower()
        commits = []
        truncated = False
        for commit in repo.walk(target.id):
            if needle not in commit.message.lower():
                continue
            if max_count is not None and len(commits) >= max_count:
                truncated = True
                break
            commits.append(self._to_commit(repo_path, commit))

        return GitLog.from_commits(repo_path, commits, max_count=max_count, truncated=truncated)

    def _resolve_locator(self, document: str) -> Optional[GitLocator]:
        document = os.path.abspath(document)
        gitdir = self._discover(os.path.dirname(document))
        if gitdir is None:
            return None
        repo = self._open(gitdir)
        if not repo.workdir:
            return None
        return GitLocator.for_file(os.path.normpath(repo.workdir), document)
