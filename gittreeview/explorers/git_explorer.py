"""Single-root explorer with a history view and a repository view.

In the history view the root follows the host's active document; in the
repository view it shows every known repository and, while auto-refresh is
on, follows repository changes reported by the data layer.
"""

import asyncio
import logging
from typing import List, Optional

from ..config import GitExplorerConfig, GitExplorerView, WorkspaceState, WorkspaceStateKey
from ..constants import GlyphChars
from ..context import DocumentTracker
from ..core.node import ExplorerNode, MessageNode
from ..core.paging import PageRequest, apply_page_request
from ..debounce import Debouncer
from ..error_policies import ErrorPolicy
from ..events import EventEmitter, RefreshReason, Subscription
from ..git.service import GitChangeEvent, GitChangeReason, GitService
from ..nodes.history import HistoryNode
from ..nodes.repository import RepositoriesNode, RepositoryNode
from .base import Explorer

logger = logging.getLogger(__name__)

NO_HISTORY_MESSAGE = f"No active file {GlyphChars.Dash} no history to show"
NO_REPOSITORIES_MESSAGE = "No repositories found"


class GitExplorer(Explorer):
    """Explorer owning at most one root node.

    Root resolution is asynchronous; ``get_children`` waits for a pending
    resolution, and a resolution that finishes after a newer one started
    is discarded.

    Example:
        explorer = GitExplorer(git, GitExplorerConfig.history(), documents)
        await explorer.initialize()
        children = await explorer.get_children()
    """

    command_prefix = 'gittreeview.gitExplorer'

    def __init__(self, git: GitService, config: Optional[GitExplorerConfig] = None,
                 documents: Optional[DocumentTracker] = None,
                 workspace_state: Optional[WorkspaceState] = None,
                 error_policy: Optional[ErrorPolicy] = None):
        """
        Args:
            git: Data layer and change source
            config: Explorer settings (defaults to GitExplorerConfig())
            documents: Active/visible document source for the history view
            workspace_state: Store for the last used view and auto-refresh toggle
            error_policy: What to show when a node fails to expand
        """
        super().__init__(git, config if config is not None else GitExplorerConfig(), error_policy)
        self.documents = documents if documents is not None else DocumentTracker()
        self.workspace_state = workspace_state if workspace_state is not None else WorkspaceState()

        self._root: Optional[ExplorerNode] = None
        self._view: Optional[GitExplorerView] = None
        self._auto_refresh: Optional[bool] = None
        self._generation = 0
        self._loading: Optional[asyncio.Future] = None
        self._resolution_error: Optional[Exception] = None

        self._git_subscription: Optional[Subscription] = None
        self._document_subscriptions: List[Subscription] = []
        self._active_editor_debouncer = Debouncer(self._on_active_editor_changed, self.config.debounce_seconds)
        self._visible_editors_debouncer = Debouncer(self._on_visible_editors_changed, self.config.debounce_seconds)

        self.on_did_change_auto_refresh: EventEmitter[bool] = EventEmitter('GitExplorer.AutoRefreshChanged')

        self.register_command('refresh', lambda: self.refresh(RefreshReason.COMMAND))
        self.register_command('refreshNode', self.refresh_node)
        self.register_command('setAutoRefreshToOn', lambda: self.set_auto_refresh(self.config.auto_refresh, True))
        self.register_command('setAutoRefreshToOff', lambda: self.set_auto_refresh(self.config.auto_refresh, False))
        self.register_command('switchToHistoryView', lambda: self.switch_to(GitExplorerView.HISTORY))
        self.register_command('switchToRepositoryView', lambda: self.switch_to(GitExplorerView.REPOSITORY))

    @property
    def config(self) -> GitExplorerConfig:
        return self._config

    @property
    def root(self) -> Optional[ExplorerNode]:
        return self._root

    @property
    def view(self) -> Optional[GitExplorerView]:
        return self._view

    @property
    def auto_refresh(self) -> bool:
        """Effective auto-refresh state (config and workspace toggle both on)."""
        return bool(self._auto_refresh)

    async def initialize(self) -> None:
        """Apply settings, resolve the initial root and start following documents."""
        await self.set_auto_refresh(self.config.auto_refresh)
        self.set_view(self._get_configured_view())
        await self._update_root()

        self._document_subscriptions = [
            self.documents.on_did_change_active_document.subscribe(self._active_editor_debouncer),
            self.documents.on_did_change_visible_documents.subscribe(self._visible_editors_debouncer),
        ]

    # Tree data

    async def get_children(self, node: Optional[ExplorerNode] = None) -> List[ExplorerNode]:
        if node is not None:
            return await self._get_node_children(node)

        loading = self._loading
        if loading is not None:
            await asyncio.shield(loading)

        if self._root is None:
            if self._resolution_error is not None:
                return [MessageNode(f"Unable to load: {self._resolution_error}")]
            if self._view is GitExplorerView.HISTORY:
                return [MessageNode(NO_HISTORY_MESSAGE)]
            return [MessageNode(NO_REPOSITORIES_MESSAGE)]

        return await self._get_node_children(self._root)

    async def refresh(self, reason: Optional[RefreshReason] = None,
                      root: Optional[ExplorerNode] = None) -> None:
        """Ask the host to re-query the whole tree.

        With no root, or in the history view without an explicit ``root``,
        the root is resolved again first. A resolution yielding the current
        root keeps it and drops its cached children.
        """
        reason = reason or RefreshReason.COMMAND
        logger.info(f"{self}.refresh reason='{reason.value}'")

        if root is not None:
            self.set_root(root)
        elif self._root is None or self._view is GitExplorerView.HISTORY:
            previous = self._root
            changed = await self._update_root()
            if not changed and previous is not None and self._root is previous:
                previous.refresh()

        await self._fire_tree_changed()

    async def refresh_node(self, node: ExplorerNode, page_request: Optional[PageRequest] = None) -> None:
        """Re-render ``node``, applying ``page_request`` if it pages."""
        if not apply_page_request(node, page_request):
            node.refresh()

        if self._root is None or node is self._root:
            logger.debug(f"{self}.refresh_node root")
            await self._fire_tree_changed()
            return

        logger.debug(f"{self}.refresh_node {node!r}")
        await self._fire_tree_changed(node)

    # Views

    async def switch_to(self, view: GitExplorerView) -> None:
        if view is self._view:
            logger.debug(f"{self}: already showing the {view.value} view")
            return
        await self.reset(view, force=True)

    async def reset(self, view: GitExplorerView, force: bool = False) -> bool:
        """Switch to ``view`` and resolve its root.

        Returns:
            True if a whole-tree notification was fired
        """
        self.set_view(view)
        if force:
            self.clear_root()

        changed = await self._update_root()
        if not (changed or force):
            return False

        logger.info(f"{self}.refresh reason='{RefreshReason.VIEW_CHANGED.value}'")
        await self._fire_tree_changed()
        return True

    def set_view(self, view: GitExplorerView) -> None:
        if view is GitExplorerView.AUTO:
            view = self._get_last_view()

        if view is not self._view:
            if self._view is GitExplorerView.REPOSITORY:
                self.git.stop_watching_file_system()
            logger.debug(f"{self}: view {self._view and self._view.value} -> {view.value}")
            self._view = view

        if self.config.view is GitExplorerView.AUTO:
            self.workspace_state.update(WorkspaceStateKey.GIT_EXPLORER_VIEW, view.value)

        self._update_git_subscription()

    def _get_configured_view(self) -> GitExplorerView:
        if self.config.view is GitExplorerView.AUTO:
            return self._get_last_view()
        return self.config.view

    def _get_last_view(self) -> GitExplorerView:
        value = self.workspace_state.get(WorkspaceStateKey.GIT_EXPLORER_VIEW, GitExplorerView.REPOSITORY.value)
        try:
            view = GitExplorerView(value)
        except ValueError:
            logger.debug(f"Ignoring unknown stored view {value!r}")
            return GitExplorerView.REPOSITORY
        return GitExplorerView.REPOSITORY if view is GitExplorerView.AUTO else view

    # Root

    def set_root(self, root: Optional[ExplorerNode]) -> bool:
        """Replace the root, disposing the previous one.

        Returns:
            True if the root changed
        """
        if root is self._root:
            return False

        previous, self._root = self._root, root
        if previous is not None:
            previous.dispose()
        logger.debug(f"{self}: root {previous!r} -> {root!r}")
        return True

    def clear_root(self) -> bool:
        # In-flight resolutions must not bring a cleared root back
        self._generation += 1
        self._resolution_error = None
        return self.set_root(None)

    async def _update_root(self) -> bool:
        """Resolve the root for the current view and adopt it.

        Returns:
            True if the root changed
        """
        self._generation += 1
        generation = self._generation
        loading = asyncio.get_running_loop().create_future()
        self._loading = loading

        try:
            try:
                root = await self._get_root()
            except Exception as e:
                if generation != self._generation:
                    return False
                # Keep the last known good root
                logger.warning(f"{self}: unable to resolve the root", exc_info=True)
                self._resolution_error = e
                return False

            if generation != self._generation:
                logger.debug(f"{self}: discarding stale root {root!r}")
                if root is not None and root is not self._root:
                    root.dispose()
                return False

            self._resolution_error = None
            return self.set_root(root)
        finally:
            if not loading.done():
                loading.set_result(None)
            if self._loading is loading:
                self._loading = None

    async def _get_root(self) -> Optional[ExplorerNode]:
        if self._view is GitExplorerView.REPOSITORY:
            return await self._get_repository_root()
        return await self._get_history_root()

    async def _get_history_root(self) -> Optional[ExplorerNode]:
        document = self.documents.active_document
        if document is None or not self.git.is_trackable(document):
            return self._root

        locator = await self.git.resolve_locator(document)
        if locator is None:
            return None

        repo = await self.git.get_repository(locator)
        if repo is None:
            return None

        if self._root is not None and self._root.locator == locator:
            return self._root

        return HistoryNode(locator, repo, self)

    async def _get_repository_root(self) -> Optional[ExplorerNode]:
        repositories = await self.git.list_repositories()
        if not repositories:
            return None

        if len(repositories) == 1:
            repo = repositories[0]
            if isinstance(self._root, RepositoryNode) and self._root.locator == repo.locator:
                return self._root
            return RepositoryNode(repo.locator, repo, self)

        if isinstance(self._root, RepositoriesNode) and self._root.repositories == list(repositories):
            return self._root
        return RepositoriesNode(repositories, self)

    # Auto-refresh

    async def set_auto_refresh(self, enabled: bool, workspace_enabled: Optional[bool] = None) -> None:
        """Apply the auto-refresh setting.

        Args:
            enabled: Whether the configuration allows auto-refresh
            workspace_enabled: Explicit workspace toggle; None keeps the
                stored toggle
        """
        toggled = workspace_enabled is not None
        if toggled:
            self.workspace_state.update(WorkspaceStateKey.GIT_EXPLORER_AUTO_REFRESH, workspace_enabled)
        else:
            workspace_enabled = self.workspace_state.get(WorkspaceStateKey.GIT_EXPLORER_AUTO_REFRESH, True)

        effective = bool(enabled and workspace_enabled)
        if effective == self._auto_refresh:
            logger.debug(f"{self}: auto-refresh already {'on' if effective else 'off'}")
            return

        self._auto_refresh = effective
        self._update_git_subscription()
        await self.on_did_change_auto_refresh.fire(effective)

        if toggled and effective:
            await self.refresh(RefreshReason.AUTO_REFRESH_CHANGED)

    def _update_git_subscription(self) -> None:
        wanted = bool(self._auto_refresh) and self._view is GitExplorerView.REPOSITORY
        if wanted and self._git_subscription is None:
            self._git_subscription = self.git.on_did_change.subscribe(self._on_git_changed)
        elif not wanted and self._git_subscription is not None:
            self._git_subscription.dispose()
            self._git_subscription = None

    # Change handlers

    async def _on_git_changed(self, event: Optional[GitChangeEvent] = None) -> None:
        # Commits and ref moves inside one repository leave the root as is
        if event is None or event.reason is not GitChangeReason.REPOSITORIES:
            return
        if self._view is not GitExplorerView.REPOSITORY:
            return
        self.clear_root()
        await self.refresh(RefreshReason.REPO_CHANGED)

    async def _on_active_editor_changed(self, document: Optional[str] = None) -> None:
        if self._view is not GitExplorerView.HISTORY:
            return

        if not await self._update_root():
            logger.debug(f"{self}: active document {document!r} keeps the current root")
            return

        logger.info(f"{self}.refresh reason='{RefreshReason.ACTIVE_EDITOR_CHANGED.value}'")
        await self._fire_tree_changed()

    async def _on_visible_editors_changed(self, documents: Optional[List[str]] = None) -> None:
        if self._view is not GitExplorerView.HISTORY:
            return

        if documents is None:
            documents = self.documents.visible_documents
        if any(self.git.is_trackable(d) for d in documents):
            return

        if self.clear_root():
            logger.info(f"{self}.refresh reason='{RefreshReason.VISIBLE_EDITORS_CHANGED.value}'")
            await self._fire_tree_changed()

    async def flush_pending_events(self) -> None:
        """Run debounced document handlers now instead of after their delay."""
        await self._active_editor_debouncer.flush()
        await self._visible_editors_debouncer.flush()

    # Configuration

    async def on_configuration_changed(self, config: GitExplorerConfig) -> None:
        errors = config.validate()
        if errors:
            raise ValueError(f"Invalid configuration: {', '.join(errors)}")

        previous, self._config = self._config, config
        self._active_editor_debouncer.wait = config.debounce_seconds
        self._visible_editors_debouncer.wait = config.debounce_seconds

        if config.auto_refresh != previous.auto_refresh:
            await self.set_auto_refresh(config.auto_refresh)

        view = self._get_configured_view()
        if not await self.reset(view, force=view is not self._view):
            await self.refresh(RefreshReason.CONFIGURATION_CHANGED)

    def dispose(self) -> None:
        self._active_editor_debouncer.cancel()
        self._visible_editors_debouncer.cancel()
        for subscription in self._document_subscriptions:
            subscription.dispose()
        self._document_subscriptions = []
        if self._git_subscription is not None:
            self._git_subscription.dispose()
            self._git_subscription = None
        self.clear_root()
        self.on_did_change_auto_refresh.clear()
        super().dispose()

    def __str__(self) -> str:
        view = self._view.value if self._view is not None else 'none'
        return f"GitExplorer[view={view}]"
