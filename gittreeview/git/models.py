"""Plain data returned by the git data layer."""

import re
from collections import OrderedDict
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional

from ..constants import UNCOMMITTED_SHA
from ..core.locator import GitLocator

_UNCOMMITTED_PATTERN = re.compile(r'^[0]{40}(\^[0-9]*?)??:??$')
_STAGED_UNCOMMITTED_PATTERN = re.compile(r'^[0]{40}(\^[0-9]*?)??:$')

SHORT_SHA_LENGTH = 8


def is_uncommitted(sha: Optional[str]) -> bool:
    return bool(sha) and _UNCOMMITTED_PATTERN.match(sha) is not None


def is_staged_uncommitted(sha: Optional[str]) -> bool:
    return bool(sha) and _STAGED_UNCOMMITTED_PATTERN.match(sha) is not None


def shorten_sha(sha: Optional[str]) -> Optional[str]:
    if sha is None:
        return None
    if is_staged_uncommitted(sha):
        return 'index'
    if is_uncommitted(sha):
        return 'working'
    return sha[:SHORT_SHA_LENGTH]


@dataclass(frozen=True)
class Repository:
    path: str
    name: Optional[str] = None

    def __post_init__(self):
        if self.name is None:
            object.__setattr__(self, 'name', self.path.rstrip('/\\').replace('\\', '/').rsplit('/', 1)[-1])

    @property
    def locator(self) -> GitLocator:
        return GitLocator.for_repository(self.path)


@dataclass
class GitBranch:
    repo_path: str
    name: str
    current: bool = False
    remote: bool = False
    tracking: Optional[str] = None
    ahead: int = 0
    behind: int = 0

    def get_name(self) -> str:
        """Branch name without the remote prefix for remote branches."""
        if self.remote and '/' in self.name:
            return self.name.split('/', 1)[1]
        return self.name


class GitCommitType(Enum):
    BRANCH = 'branch'
    FILE = 'file'
    STASH = 'stash'


@dataclass
class GitStatusFile:
    """A changed file, with its one-letter status (A, M, D, R, C, ? ...)."""
    file_name: str
    status: str
    original_file_name: Optional[str] = None


@dataclass
class GitCommit:
    repo_path: str
    sha: str
    author: str
    date: datetime
    message: str
    file_name: str = ''
    type: GitCommitType = GitCommitType.BRANCH
    previous_sha: Optional[str] = None
    previous_file_name: Optional[str] = None

    @property
    def short_sha(self) -> str:
        return shorten_sha(self.sha)

    @property
    def previous_short_sha(self) -> Optional[str]:
        return shorten_sha(self.previous_sha)

    @property
    def summary(self) -> str:
        """First line of the message."""
        return self.message.split('\n', 1)[0].strip()

    @property
    def is_uncommitted(self) -> bool:
        return is_uncommitted(self.sha)

    @property
    def is_staged_uncommitted(self) -> bool:
        return is_staged_uncommitted(self.sha)

    @property
    def locator(self) -> GitLocator:
        file_name = self.file_name if self.type is GitCommitType.FILE else None
        return GitLocator(repo_path=self.repo_path, file_name=file_name or None, sha=self.sha)

    def format(self, template: str, date_format: str = "%Y-%m-%d %H:%M") -> str:
        return template.format(
            sha=self.sha,
            short_sha=self.short_sha,
            summary=self.summary,
            message=self.message,
            author=self.author,
            date=self.date.strftime(date_format),
        )

    @classmethod
    def uncommitted(cls, repo_path: str, file_name: str, date: Optional[datetime] = None) -> 'GitCommit':
        """Pseudo-commit standing for working tree changes to ``file_name``."""
        return cls(repo_path=repo_path, sha=UNCOMMITTED_SHA, author='You',
                   date=date or datetime.now(), message='Uncommitted changes',
                   file_name=file_name, type=GitCommitType.FILE, previous_sha='HEAD')


@dataclass
class GitLog:
    """A page of history."""
    repo_path: str
    commits: Dict[str, GitCommit] = field(default_factory=OrderedDict)  # sha -> commit, newest first
    count: Optional[int] = None
    max_count: Optional[int] = None
    truncated: bool = False

    def __post_init__(self):
        if self.count is None:
            self.count = len(self.commits)

    @classmethod
    def from_commits(cls, repo_path: str, commits: List[GitCommit],
                     max_count: Optional[int] = None, truncated: bool = False) -> 'GitLog':
        return cls(repo_path=repo_path,
                   commits=OrderedDict((c.sha, c) for c in commits),
                   max_count=max_count,
                   truncated=truncated)

    def __len__(self) -> int:
        return len(self.commits)
