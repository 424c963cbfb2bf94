"""Tree data providers over explorer nodes."""

from .base import Explorer
from .git_explorer import NO_HISTORY_MESSAGE, NO_REPOSITORIES_MESSAGE, GitExplorer
from .results_explorer import NO_RESULTS_MESSAGE, ResultsExplorer

__all__ = [
    'Explorer',
    'GitExplorer',
    'ResultsExplorer',
    'NO_HISTORY_MESSAGE',
    'NO_REPOSITORIES_MESSAGE',
    'NO_RESULTS_MESSAGE',
]
