"""Locator: what a node displays."""

import os
import posixpath
from dataclasses import dataclass, replace
from typing import Optional


@dataclass(frozen=True)
class GitLocator:
    """Identifies a repository, optionally a file in it, optionally a revision.

    Two locators are equal when all three parts are equal; explorers use
    this to decide whether a freshly resolved root can reuse the current one.
    """

    repo_path: Optional[str] = None
    file_name: Optional[str] = None   # Relative to repo_path, '/' separated
    sha: Optional[str] = None         # Commit sha or ref name

    @classmethod
    def for_repository(cls, repo_path: str) -> 'GitLocator':
        return cls(repo_path=os.path.normpath(repo_path))

    @classmethod
    def for_file(cls, repo_path: str, file_path: str, sha: Optional[str] = None) -> 'GitLocator':
        """Build a locator from an absolute or repository-relative file path."""
        repo_path = os.path.normpath(repo_path)
        if os.path.isabs(file_path):
            file_path = os.path.relpath(file_path, repo_path)
        file_name = posixpath.normpath(file_path.replace(os.sep, '/'))
        return cls(repo_path=repo_path, file_name=file_name, sha=sha)

    @property
    def is_empty(self) -> bool:
        return self.repo_path is None and self.file_name is None and self.sha is None

    @property
    def relative_path(self) -> str:
        return self.file_name or ''

    @property
    def full_path(self) -> Optional[str]:
        if self.repo_path is None:
            return None
        if not self.file_name:
            return self.repo_path
        return os.path.join(self.repo_path, *self.file_name.split('/'))

    @property
    def directory(self) -> str:
        """Directory part of ``file_name`` ('' for files at the top level)."""
        return posixpath.dirname(self.relative_path)

    def with_sha(self, sha: Optional[str]) -> 'GitLocator':
        return replace(self, sha=sha)

    def with_file(self, file_name: Optional[str]) -> 'GitLocator':
        return replace(self, file_name=file_name)

    def __str__(self) -> str:
        if self.is_empty:
            return '<empty>'
        text = self.full_path or ''
        if self.sha:
            text += f'@{self.sha}'
        return text
