"""
Error handling policies for gittreeview.

This module decides what an explorer shows when the data layer fails while
a node is being expanded. The failure stays local to the expanded subtree:
the rest of the tree keeps its last-known-good state.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, List

from .core.node import ExplorerNode, MessageNode

logger = logging.getLogger(__name__)


class ErrorPolicy(ABC):
    """
    Base class for error handling policies.

    Subclasses implement different strategies for handling errors raised
    while an explorer fetches the children of a node.
    """

    @abstractmethod
    async def handle(self, error: Exception, method_name: str, node: Any) -> List[ExplorerNode]:
        """
        Handle an error that occurred during a data-layer query.

        Args:
            error: The exception that was raised
            method_name: Name of the operation that failed (e.g., 'get_children')
            node: The node being expanded when the error occurred

        Returns:
            Children to show in place of the failed subtree,
            or re-raises the exception.
        """
        pass

    def _record(self, errors: list, error: Exception, method_name: str, node: Any) -> dict:
        locator = getattr(node, 'locator', None)
        record = {
            'locator': locator,
            'node': node,
            'method': method_name,
            'error': error,
            'error_type': type(error).__name__,
            'error_message': str(error)
        }
        errors.append(record)
        return record


class FailFastPolicy(ErrorPolicy):
    """
    Policy that immediately re-raises any error.

    Useful in tests and in hosts that render their own error states.
    """

    async def handle(self, error: Exception, method_name: str, node: Any) -> List[ExplorerNode]:
        """Re-raise the error immediately."""
        raise error


class MessageNodePolicy(ErrorPolicy):
    """
    Policy that logs the error and shows it as a message node.

    This is the default: the failing node expands to a single message,
    and errors are kept for later inspection.
    """

    def __init__(self, message: str = "Unable to load: {error}", verbose: bool = True):
        """
        Initialize the policy.

        Args:
            message: Template for the message node; may use ``{error}``
            verbose: If True, log a warning with traceback for each error
        """
        self.message = message
        self.verbose = verbose
        self.errors = []

    async def handle(self, error: Exception, method_name: str, node: Any) -> List[ExplorerNode]:
        self._record(self.errors, error, method_name, node)

        if self.verbose:
            logger.warning(f"Error in {method_name} for {node!r}: {error}", exc_info=error)

        return [MessageNode(self.message.format(error=error))]

    def get_statistics(self) -> dict:
        """
        Get statistics about errors encountered.

        Returns:
            Dictionary with error counts and details
        """
        return {
            'total_errors': len(self.errors),
            'error_types': sorted({e['error_type'] for e in self.errors}),
            'errors': self.errors  # Full error details
        }


class CollectErrorsPolicy(ErrorPolicy):
    """
    Policy that collects all errors without logging.

    The failing node shows no children at all.
    """

    def __init__(self):
        """Initialize the policy."""
        self.errors = []

    async def handle(self, error: Exception, method_name: str, node: Any) -> List[ExplorerNode]:
        """Silently collect the error and return no children."""
        self._record(self.errors, error, method_name, node)
        return []
