"""
Tests for error handling policies.
"""

from unittest.mock import Mock

import pytest

from gittreeview.core import GitLocator, MessageNode
from gittreeview.error_policies import CollectErrorsPolicy, FailFastPolicy, MessageNodePolicy
from gittreeview.git import GitDataError


class TestErrorPolicies:
    """Test individual error policy behaviors."""

    @pytest.mark.asyncio
    async def test_fail_fast_policy(self):
        """FailFastPolicy should re-raise any error."""
        policy = FailFastPolicy()

        with pytest.raises(GitDataError):
            await policy.handle(GitDataError("gone"), "get_children", Mock())

    @pytest.mark.asyncio
    async def test_message_node_policy(self):
        """MessageNodePolicy should show the error and keep a record."""
        policy = MessageNodePolicy(verbose=False)
        node = Mock(locator=GitLocator(repo_path='/repo'))

        result = await policy.handle(GitDataError("gone"), "get_children", node)

        assert len(result) == 1
        assert isinstance(result[0], MessageNode)
        assert result[0].message == "Unable to load: gone"

        stats = policy.get_statistics()
        assert stats['total_errors'] == 1
        assert stats['error_types'] == ['GitDataError']
        assert stats['errors'][0]['locator'] == GitLocator(repo_path='/repo')

    @pytest.mark.asyncio
    async def test_message_node_policy_custom_message(self):
        policy = MessageNodePolicy(message="Oops", verbose=False)

        result = await policy.handle(RuntimeError("x"), "get_children", Mock())

        assert result[0].message == "Oops"

    @pytest.mark.asyncio
    async def test_collect_errors_policy(self):
        """CollectErrorsPolicy should record silently and return nothing."""
        policy = CollectErrorsPolicy()

        result = await policy.handle(OSError("disk"), "get_children", Mock())

        assert result == []
        assert policy.errors[0]['error_type'] == 'OSError'
        assert policy.errors[0]['method'] == 'get_children'
