"""Shared surface of the explorers (tree data providers)."""

import inspect
import logging
from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, List, Optional, Union

from ..config import ExplorerConfig
from ..core.node import ExplorerNode, NodeCommand, TreeItem
from ..core.paging import PageRequest
from ..error_policies import ErrorPolicy, MessageNodePolicy
from ..events import EventEmitter, RefreshReason
from ..git.service import GitService

logger = logging.getLogger(__name__)


class Explorer(ABC):
    """Abstract base class for explorers.

    An explorer owns its root node(s), answers the host's queries for
    children and tree items, and publishes ``on_did_change_tree_data``
    whenever the host should re-query: with a node for a scoped refresh,
    with None when the whole tree changed.
    """

    command_prefix = 'gittreeview.explorer'

    def __init__(self, git: GitService, config: ExplorerConfig,
                 error_policy: Optional[ErrorPolicy] = None):
        """
        Args:
            git: Data layer and change source (shared, not owned)
            config: Explorer configuration
            error_policy: What to show when a node fails to expand
                (defaults to MessageNodePolicy)
        """
        errors = config.validate()
        if errors:
            raise ValueError(f"Invalid configuration: {', '.join(errors)}")

        self.git = git
        self._config = config
        self.error_policy = error_policy or MessageNodePolicy()
        self._on_did_change_tree_data: EventEmitter[Optional[ExplorerNode]] = EventEmitter(
            f'{self.__class__.__name__}.TreeDataChanged')
        self._commands: Dict[str, Callable[..., Any]] = {}

    @property
    def config(self) -> ExplorerConfig:
        return self._config

    @property
    def on_did_change_tree_data(self) -> EventEmitter:
        return self._on_did_change_tree_data

    @abstractmethod
    async def get_children(self, node: Optional[ExplorerNode] = None) -> List[ExplorerNode]:
        """Get children of ``node``; None means the root level."""
        pass

    async def get_tree_item(self, node: ExplorerNode) -> TreeItem:
        return await node.get_tree_item()

    @abstractmethod
    async def refresh(self, reason: Optional[RefreshReason] = None) -> None:
        pass

    @abstractmethod
    async def refresh_node(self, node: ExplorerNode, page_request: Optional[PageRequest] = None) -> None:
        pass

    # Commands

    def get_qualified_command(self, command: str) -> str:
        return f"{self.command_prefix}.{command}"

    def register_command(self, command: str, callback: Callable[..., Any]) -> None:
        self._commands[self.get_qualified_command(command)] = callback

    @property
    def commands(self) -> List[str]:
        return sorted(self._commands)

    async def execute_command(self, command: Union[NodeCommand, str], *args) -> Any:
        """Run one of this explorer's commands.

        Args:
            command: A bound NodeCommand, or a qualified command name
            *args: Arguments when ``command`` is a name

        Returns:
            The command's result, or None for commands this explorer
            does not own
        """
        if isinstance(command, NodeCommand):
            args = tuple(command.arguments) + args
            command = command.command

        callback = self._commands.get(command)
        if callback is None:
            logger.debug(f"{self.__class__.__name__}: '{command}' is not an explorer command")
            return None

        result = callback(*args)
        if inspect.isawaitable(result):
            result = await result
        return result

    # Helpers for subclasses

    async def _get_node_children(self, node: ExplorerNode) -> List[ExplorerNode]:
        """Expand ``node``, routing data-layer failures through the error policy."""
        try:
            return await node.get_children()
        except Exception as e:
            return await self.error_policy.handle(e, 'get_children', node)

    async def _fire_tree_changed(self, node: Optional[ExplorerNode] = None) -> None:
        await self._on_did_change_tree_data.fire(node)

    def dispose(self) -> None:
        self._on_did_change_tree_data.clear()
        self._commands.clear()
