"""Configuration system for gittreeview.

This module defines how hosts describe explorer behavior: which view the
repository explorer starts in, how many entries a paging node materializes,
how labels are formatted, and how eagerly the tree reacts to changes.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List


class GitExplorerView(Enum):
    """Which strategy the single-root explorer uses to resolve its root."""
    AUTO = "auto"               # Last view the user picked
    HISTORY = "history"         # Driven by the active document
    REPOSITORY = "repository"   # Driven by the set of known repositories


class WorkspaceStateKey(Enum):
    """Keys of the per-workspace preferences the explorers persist."""
    GIT_EXPLORER_VIEW = "gittreeview:gitExplorer:view"
    GIT_EXPLORER_AUTO_REFRESH = "gittreeview:gitExplorer:autoRefresh"
    RESULTS_EXPLORER_KEEP_RESULTS = "gittreeview:resultsExplorer:keepResults"


class WorkspaceState:
    """In-memory key/value store for workspace-level preferences.

    Hosts that persist preferences can subclass this and override
    ``update`` to write through to their own storage.
    """

    def __init__(self, initial: Dict[WorkspaceStateKey, Any] = None):
        self._values: Dict[WorkspaceStateKey, Any] = dict(initial or {})

    def get(self, key: WorkspaceStateKey, default: Any = None) -> Any:
        return self._values.get(key, default)

    def update(self, key: WorkspaceStateKey, value: Any) -> None:
        self._values[key] = value

    def keys(self) -> List[WorkspaceStateKey]:
        return list(self._values)


@dataclass
class ExplorerConfig:
    """Settings shared by every explorer.

    The format strings are plain ``str.format`` templates. Commit templates
    may use ``short_sha``, ``sha``, ``summary``, ``message``, ``author`` and
    ``date``; file templates may use ``file``, ``path``, ``directory`` and
    ``status``.
    """

    page_limit: int = 200                          # Default cap for paging nodes (0 = unlimited)
    commit_format: str = "{short_sha}  {summary}"
    commit_file_format: str = "{file}"
    status_file_format: str = "{file}"
    date_format: str = "%Y-%m-%d %H:%M"

    def validate(self) -> List[str]:
        """Validate configuration for consistency.

        Returns:
            List of validation errors (empty if valid)
        """
        errors = []

        if self.page_limit < 0:
            errors.append("page_limit cannot be negative")

        for name in ('commit_format', 'commit_file_format', 'status_file_format', 'date_format'):
            if not getattr(self, name):
                errors.append(f"{name} cannot be empty")

        return errors


@dataclass
class GitExplorerConfig(ExplorerConfig):
    """Settings of the single-root repository/history explorer."""

    view: GitExplorerView = GitExplorerView.AUTO
    auto_refresh: bool = True
    show_tracking_branch: bool = True
    debounce_seconds: float = 0.5   # Window for coalescing editor focus bursts

    def validate(self) -> List[str]:
        errors = super().validate()

        if not isinstance(self.view, GitExplorerView):
            errors.append("view must be a GitExplorerView")

        if self.debounce_seconds < 0:
            errors.append("debounce_seconds cannot be negative")

        return errors

    @classmethod
    def history(cls, **kwargs) -> 'GitExplorerConfig':
        """Create config pinned to the document-driven history view."""
        return cls(view=GitExplorerView.HISTORY, **kwargs)

    @classmethod
    def repository(cls, **kwargs) -> 'GitExplorerConfig':
        """Create config pinned to the repository view."""
        return cls(view=GitExplorerView.REPOSITORY, **kwargs)


@dataclass
class ResultsExplorerConfig(ExplorerConfig):
    """Settings of the multi-root results explorer."""

    extra: Dict[str, Any] = field(default_factory=dict)  # Host-specific settings passed through untouched
