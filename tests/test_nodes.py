"""
Tests for the domain nodes over an in-memory git service.
"""

import asyncio

import pytest

from gittreeview.config import GitExplorerConfig
from gittreeview.core import GitLocator, MessageNode, PageRequest, ResourceType, ShowAllNode
from gittreeview.explorers import GitExplorer
from gittreeview.git import GitBranch, GitCommitType, GitStatusFile, Repository
from gittreeview.nodes import (
    BranchesNode,
    BranchHistoryNode,
    CommitFileNode,
    CommitFileNodeDisplayAs,
    CommitNode,
    CommitsNode,
    FileHistoryNode,
    HistoryNode,
    RepositoriesNode,
    RepositoryNode,
    SearchCommitsResultsNode,
    StatusFileCommitsNode,
    StatusFilesNode,
)
from gittreeview.testing import FakeGitService, make_commit, make_commits, make_log


def make_explorer(git, **config):
    return GitExplorer(git, GitExplorerConfig(**config))


@pytest.fixture
def git():
    git = FakeGitService()
    git.add_repository('/repo')
    return git


class TestRepositoryNodes:
    """Test the repository view nodes."""

    @pytest.mark.asyncio
    async def test_repository_node_caches_children(self, git):
        explorer = make_explorer(git)
        repo = git.repositories[0]
        node = RepositoryNode(repo.locator, repo, explorer)

        first = await node.get_children()
        second = await node.get_children()

        assert first is second
        assert isinstance(first[0], StatusFilesNode)
        assert isinstance(first[1], BranchesNode)

    @pytest.mark.asyncio
    async def test_refresh_clears_cache_not_identity(self, git):
        explorer = make_explorer(git)
        repo = git.repositories[0]
        node = RepositoryNode(repo.locator, repo, explorer)
        first = await node.get_children()

        node.refresh()
        second = await node.get_children()

        assert not node.disposed
        assert second is not first
        assert all(child.disposed for child in first)

    @pytest.mark.asyncio
    async def test_repositories_node(self, git):
        explorer = make_explorer(git)
        other = git.add_repository('/another')
        node = RepositoriesNode(git.repositories, explorer)

        children = await node.get_children()

        assert [c.repo.name for c in children] == ['another', 'repo']
        assert children[0].repo is other
        assert (await node.get_tree_item()).context_value is ResourceType.REPOSITORIES


class TestStatusNodes:
    """Test working tree status nodes."""

    @pytest.mark.asyncio
    async def test_no_changes(self, git):
        node = StatusFilesNode(GitLocator.for_repository('/repo'), make_explorer(git))

        children = await node.get_children()

        assert len(children) == 1
        assert isinstance(children[0], MessageNode)
        assert children[0].message == 'No changes'

    @pytest.mark.asyncio
    async def test_requeries_each_expansion(self, git):
        git.set_status('/repo', [GitStatusFile('b.py', 'M'), GitStatusFile('a.py', 'A')])
        node = StatusFilesNode(GitLocator.for_repository('/repo'), make_explorer(git))

        children = await node.get_children()
        await node.get_children()

        assert git.calls['get_status'] == 2
        assert [c.status.file_name for c in children] == ['a.py', 'b.py']
        assert all(isinstance(c, StatusFileCommitsNode) for c in children)

    @pytest.mark.asyncio
    async def test_tree_item_counts_files(self, git):
        git.set_status('/repo', [GitStatusFile('a.py', 'M'), GitStatusFile('b.py', 'M')])
        node = StatusFilesNode(GitLocator.for_repository('/repo'), make_explorer(git))

        item = await node.get_tree_item()

        assert item.label == '2 files changed'
        assert item.context_value is ResourceType.STATUS_FILES

    @pytest.mark.asyncio
    async def test_uncommitted_status_file_is_a_leaf(self, git):
        git.set_status('/repo', [GitStatusFile('src/a.py', 'M')])
        explorer = make_explorer(git)
        node = (await StatusFilesNode(GitLocator.for_repository('/repo'), explorer).get_children())[0]

        item = await node.get_tree_item()

        assert item.label == 'a.py'
        assert item.context_value is ResourceType.STATUS_FILE
        assert item.command.command == 'gittreeview.diffWithPrevious'
        assert node.commits[0].is_uncommitted


class TestBranchNodes:
    """Test branch listing and branch history paging."""

    @pytest.mark.asyncio
    async def test_local_branches_current_first(self, git):
        git.set_branches('/repo', [
            GitBranch('/repo', 'feature'),
            GitBranch('/repo', 'origin/main', remote=True),
            GitBranch('/repo', 'main', current=True),
            GitBranch('/repo', 'bugfix'),
        ])
        node = BranchesNode(GitLocator.for_repository('/repo'), make_explorer(git))

        children = await node.get_children()

        assert [c.branch.name for c in children] == ['main', 'bugfix', 'feature']
        assert (await node.get_tree_item()).context_value is ResourceType.BRANCHES

    @pytest.mark.asyncio
    async def test_branches_with_remotes(self, git):
        git.set_branches('/repo', [GitBranch('/repo', 'main', current=True)], remotes=['origin'])
        node = BranchesNode(GitLocator.for_repository('/repo'), make_explorer(git))

        assert (await node.get_tree_item()).context_value is ResourceType.BRANCHES_WITH_REMOTES

    @pytest.mark.asyncio
    async def test_branch_history_pages(self, git):
        git.set_history('/repo', make_commits(5), ref='main')
        explorer = make_explorer(git, page_limit=3)
        node = BranchHistoryNode(GitBranch('/repo', 'main', current=True),
                                 GitLocator.for_repository('/repo'), explorer)

        children = await node.get_children()

        assert len(children) == 4
        assert all(isinstance(c, CommitNode) for c in children[:3])
        assert isinstance(children[-1], ShowAllNode)
        assert children[-1].title == 'Show All Commits'

    @pytest.mark.asyncio
    async def test_branch_history_show_all(self, git):
        git.set_history('/repo', make_commits(5), ref='main')
        explorer = make_explorer(git, page_limit=3)
        node = BranchHistoryNode(GitBranch('/repo', 'main'), GitLocator.for_repository('/repo'), explorer)
        show_all = (await node.get_children())[-1]

        await show_all.activate()
        children = await node.get_children()

        assert node.max_count == 0
        assert len(children) == 5
        assert not any(isinstance(c, ShowAllNode) for c in children)

    @pytest.mark.asyncio
    async def test_branch_without_commits(self, git):
        node = BranchHistoryNode(GitBranch('/repo', 'empty'), GitLocator.for_repository('/repo'),
                                 make_explorer(git))

        children = await node.get_children()

        assert [c.message for c in children] == ['No commits yet']

    @pytest.mark.asyncio
    async def test_branch_label_and_context(self, git):
        branch = GitBranch('/repo', 'main', current=True, tracking='origin/main')
        node = BranchHistoryNode(branch, GitLocator.for_repository('/repo'), make_explorer(git))

        item = await node.get_tree_item()

        assert 'main' in item.label
        assert item.label.endswith('origin/main')
        assert item.context_value is ResourceType.CURRENT_BRANCH_HISTORY_WITH_TRACKING

    @pytest.mark.asyncio
    async def test_tracking_branch_hidden_by_config(self, git):
        branch = GitBranch('/repo', 'main', tracking='origin/main')
        node = BranchHistoryNode(branch, GitLocator.for_repository('/repo'),
                                 make_explorer(git, show_tracking_branch=False))

        item = await node.get_tree_item()

        assert item.label == 'main'
        assert item.context_value is ResourceType.BRANCH_HISTORY_WITH_TRACKING


class TestCommitNodes:
    """Test commit nodes and their file children."""

    @pytest.mark.asyncio
    async def test_commit_node_caches_files(self, git):
        commit = make_commit('Add files')
        git.set_commit_files('/repo', commit.sha, [GitStatusFile('b.py', 'A'), GitStatusFile('a.py', 'M')])
        node = CommitNode(commit, make_explorer(git))

        first = await node.get_children()
        second = await node.get_children()

        assert first is second
        assert git.calls['get_commit_files'] == 1
        assert [c.status.file_name for c in first] == ['a.py', 'b.py']
        assert all(c.display_as is CommitFileNodeDisplayAs.FILE for c in first)

    @pytest.mark.asyncio
    async def test_commit_node_refresh_requeries(self, git):
        commit = make_commit('Add files')
        git.set_commit_files('/repo', commit.sha, [GitStatusFile('a.py', 'M')])
        node = CommitNode(commit, make_explorer(git))
        await node.get_children()

        node.refresh()
        await node.get_children()

        assert git.calls['get_commit_files'] == 2

    @pytest.mark.asyncio
    async def test_disposed_commit_node_does_not_query(self, git):
        node = CommitNode(make_commit('Add files'), make_explorer(git))

        node.dispose()

        assert await node.get_children() == []
        assert git.calls['get_commit_files'] == 0

    @pytest.mark.asyncio
    async def test_commit_label(self, git):
        commit = make_commit('Fix the parser\n\nLong description')
        node = CommitNode(commit, make_explorer(git))

        item = await node.get_tree_item()

        assert item.label == f"{commit.sha[:8]}  Fix the parser"
        assert item.context_value is ResourceType.COMMIT

    @pytest.mark.asyncio
    async def test_commits_node_pages(self, git):
        commits = make_commits(4)
        explorer = make_explorer(git, page_limit=2)

        async def log_fn(max_count):
            return make_log(commits[:max_count], truncated=max_count is not None and max_count < len(commits))

        node = CommitsNode('/repo', log_fn, explorer)
        children = await node.get_children()

        assert len(children) == 3
        assert isinstance(children[-1], ShowAllNode)


class TestCommitFileNode:
    """Test the commit file leaf."""

    def test_label_is_cached_until_reset(self, git):
        commit = make_commit('Change')
        node = CommitFileNode(GitStatusFile('src/a.py', 'M'), commit, make_explorer(git),
                              CommitFileNodeDisplayAs.FILE)

        assert node.label == 'a.py'
        node.explorer.config.commit_file_format = '{path}'
        assert node.label == 'a.py'

        node.relative_path = 'src/a.py'
        assert node.label == 'src/a.py'

    @pytest.mark.asyncio
    async def test_label_cache_cleared_after_render(self, git):
        commit = make_commit('Change', file_name='a.py')
        explorer = make_explorer(git)
        node = CommitFileNode(GitStatusFile('a.py', 'M'), commit, explorer, CommitFileNodeDisplayAs.FILE)

        first = await node.get_tree_item()
        explorer.config.commit_file_format = '{status} {file}'
        second = await node.get_tree_item()

        assert first.label == 'a.py'
        assert second.label == 'M a.py'

    @pytest.mark.asyncio
    async def test_refines_branch_commit_from_file_history(self, git):
        branch_commit = make_commit('Change')
        file_commit = make_commit('Change', sha=branch_commit.sha, file_name='a.py', previous_sha='abc')
        git.set_history('/repo', [file_commit], file_name='a.py')
        node = CommitFileNode(GitStatusFile('a.py', 'M'), branch_commit, make_explorer(git),
                              CommitFileNodeDisplayAs.FILE)

        await node.get_tree_item()

        assert node.commit.type is GitCommitType.FILE
        assert node.commit.previous_sha == 'abc'
        assert git.calls['get_history'] == 1

    @pytest.mark.asyncio
    async def test_diff_command(self, git):
        commit = make_commit('Change', file_name='a.py')
        node = CommitFileNode(GitStatusFile('a.py', 'M'), commit, make_explorer(git))

        item = await node.get_tree_item()

        assert item.collapsible_state.name == 'NONE'
        assert item.command.command == 'gittreeview.diffWithPrevious'
        assert item.command.arguments[0] == GitLocator(repo_path='/repo', file_name='a.py')
        assert item.command.arguments[1]['commit'] is commit


class TestHistoryNodes:
    """Test the history view nodes."""

    @pytest.mark.asyncio
    async def test_history_node_caches_file_history(self, git):
        locator = GitLocator(repo_path='/repo', file_name='a.py')
        node = HistoryNode(locator, Repository('/repo'), make_explorer(git))

        first = await node.get_children()
        second = await node.get_children()

        assert first is second
        assert isinstance(first[0], FileHistoryNode)
        assert (await node.get_tree_item()).label == 'repo: a.py'

    @pytest.mark.asyncio
    async def test_file_history_children(self, git):
        git.set_history('/repo', make_commits(3, file_name='a.py'), file_name='a.py')
        node = FileHistoryNode(GitLocator(repo_path='/repo', file_name='a.py'), make_explorer(git))

        children = await node.get_children()

        assert len(children) == 3
        assert all(c.display_as is CommitFileNodeDisplayAs.COMMIT for c in children)

    @pytest.mark.asyncio
    async def test_file_history_empty(self, git):
        node = FileHistoryNode(GitLocator(repo_path='/repo', file_name='missing.py'), make_explorer(git))

        children = await node.get_children()

        assert [c.message for c in children] == ['No commits found']


class TestSearchResultsNode:
    """Test the commit search result root."""

    @pytest.mark.asyncio
    async def test_label_and_single_query(self, git):
        calls = []

        async def log_fn(max_count):
            calls.append(max_count)
            return make_log(make_commits(2))

        node = SearchCommitsResultsNode('fix', '/repo', log_fn, make_explorer(git))

        item = await node.get_tree_item()
        children = await node.get_children()

        assert item.label == '2 results for fix'
        assert len(children) == 2
        assert calls == [200]

    @pytest.mark.asyncio
    async def test_truncated_label(self, git):
        async def log_fn(max_count):
            return make_log(make_commits(2), max_count=2, truncated=True)

        node = SearchCommitsResultsNode('fix', '/repo', log_fn, make_explorer(git, page_limit=2))

        item = await node.get_tree_item()
        children = await node.get_children()

        assert item.label == '2+ results for fix'
        assert isinstance(children[-1], ShowAllNode)
        assert children[-1].title == 'Show All Results'

    @pytest.mark.asyncio
    async def test_show_all_while_query_in_flight(self, git):
        """A capped query finishing after "Show All" is not kept."""
        gate = asyncio.Event()
        calls = []

        async def log_fn(max_count):
            calls.append(max_count)
            commits = make_commits(3)
            if max_count is not None:
                await gate.wait()
                return make_log(commits[:max_count], max_count=max_count, truncated=True)
            return make_log(commits)

        explorer = make_explorer(git, page_limit=2)
        node = SearchCommitsResultsNode('fix', '/repo', log_fn, explorer)

        pending = asyncio.create_task(node.get_children())
        await asyncio.sleep(0)
        await explorer.refresh_node(node, PageRequest(max_count=0))
        gate.set()
        await pending

        children = await node.get_children()
        item = await node.get_tree_item()

        assert calls[0] == 2
        assert None in calls
        assert len(children) == 3
        assert not any(isinstance(c, ShowAllNode) for c in children)
        assert item.label == '3 results for fix'

    @pytest.mark.asyncio
    async def test_unknown_count_label(self, git):
        async def log_fn(max_count):
            return None

        node = SearchCommitsResultsNode('fix', '/repo', log_fn, make_explorer(git))

        assert (await node.get_tree_item()).label == 'Results for fix'

    @pytest.mark.asyncio
    async def test_refresh_drops_cache(self, git):
        calls = []

        async def log_fn(max_count):
            calls.append(max_count)
            return make_log(make_commits(1))

        node = SearchCommitsResultsNode('fix', '/repo', log_fn, make_explorer(git))
        await node.get_tree_item()
        node.refresh()
        await node.get_tree_item()

        assert len(calls) == 2
