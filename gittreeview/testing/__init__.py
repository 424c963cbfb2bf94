"""Testing utilities for gittreeview consumers."""

from .fixtures import FakeGitService, make_commit, make_commits, make_log

__all__ = ['FakeGitService', 'make_commit', 'make_commits', 'make_log']
