"""Git data layer.

The explorers only talk to ``GitService``; ``Pygit2GitService`` is the
bundled implementation and ``CachingGitService`` wraps any implementation
with a change-invalidated cache.
"""

from .models import (
    GitBranch,
    GitCommit,
    GitCommitType,
    GitLog,
    GitStatusFile,
    Repository,
)
from .service import (
    GitChangeEvent,
    GitChangeReason,
    GitDataError,
    GitService,
)
from .caching import CachingGitService
from .pygit2_service import Pygit2GitService

__all__ = [
    # Models
    'Repository',
    'GitBranch',
    'GitCommit',
    'GitCommitType',
    'GitLog',
    'GitStatusFile',
    # Service contract
    'GitService',
    'GitChangeEvent',
    'GitChangeReason',
    'GitDataError',
    # Implementations
    'CachingGitService',
    'Pygit2GitService',
]
