"""gittreeview - Git history tree-view controllers.

gittreeview turns a git data layer into trees a UI host can render: a
single-root explorer that shows either the history of the active document
or the branches and working tree changes of every repository, and a
multi-root explorer holding published results such as commit searches.

Pieces:
━━━━━━━━━━━━━━━━━━━━━━━━━━
Data layer:
    from gittreeview.git import Pygit2GitService, CachingGitService

Explorers:
    from gittreeview.explorers import GitExplorer, ResultsExplorer
━━━━━━━━━━━━━━━━━━━━━━━━━━

Nodes are created lazily as the host expands the tree; explorers announce
changes through ``on_did_change_tree_data`` and the host re-queries.
"""

__version__ = "0.1.0"

from .commands import ShowCommitSearchCommand
from .config import (
    ExplorerConfig,
    GitExplorerConfig,
    GitExplorerView,
    ResultsExplorerConfig,
    WorkspaceState,
    WorkspaceStateKey,
)
from .context import DocumentTracker
from .core import (
    ExplorerNode,
    GitLocator,
    MessageNode,
    PageRequest,
    PagerNode,
    ShowAllNode,
    TreeItem,
)
from .error_policies import CollectErrorsPolicy, ErrorPolicy, FailFastPolicy, MessageNodePolicy
from .events import EventEmitter, RefreshReason
from .explorers import GitExplorer, ResultsExplorer

__all__ = [
    "__version__",
    # Explorers
    "GitExplorer",
    "ResultsExplorer",
    "ShowCommitSearchCommand",
    # Configuration
    "ExplorerConfig",
    "GitExplorerConfig",
    "GitExplorerView",
    "ResultsExplorerConfig",
    "WorkspaceState",
    "WorkspaceStateKey",
    # Host context and events
    "DocumentTracker",
    "EventEmitter",
    "RefreshReason",
    # Nodes
    "ExplorerNode",
    "GitLocator",
    "MessageNode",
    "PageRequest",
    "PagerNode",
    "ShowAllNode",
    "TreeItem",
    # Error handling
    "ErrorPolicy",
    "FailFastPolicy",
    "MessageNodePolicy",
    "CollectErrorsPolicy",
]
