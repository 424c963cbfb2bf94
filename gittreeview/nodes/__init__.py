"""Domain nodes for the repository, history and results trees."""

from .base import PagingNode, format_status_file
from .branches import BranchesNode, BranchHistoryNode
from .commit_file import DIFF_WITH_PREVIOUS_COMMAND, CommitFileNode, CommitFileNodeDisplayAs
from .commits import CommitNode, CommitsNode, LogQuery
from .history import FileHistoryNode, HistoryNode
from .repository import RepositoriesNode, RepositoryNode
from .results import SearchCommitsResultsNode
from .status import StatusFileCommitsNode, StatusFilesNode

__all__ = [
    'PagingNode',
    'format_status_file',
    'BranchesNode',
    'BranchHistoryNode',
    'DIFF_WITH_PREVIOUS_COMMAND',
    'CommitFileNode',
    'CommitFileNodeDisplayAs',
    'CommitNode',
    'CommitsNode',
    'LogQuery',
    'FileHistoryNode',
    'HistoryNode',
    'RepositoriesNode',
    'RepositoryNode',
    'SearchCommitsResultsNode',
    'StatusFileCommitsNode',
    'StatusFilesNode',
]
