"""
Unit tests for repository sync (pull all).
"""
import pytest

from trifecta.exec import CommandResult
from trifecta.report import StepStatus
from trifecta.sync import discover_repositories, sync_repositories


@pytest.fixture
def cloned(config):
    """Two git checkouts plus one plain directory that must be ignored."""
    paths = []
    for org, name in (("NeonLaw", "Web"), ("SagebrushServices", "AWS")):
        repo = config.root / org / name
        (repo / ".git").mkdir(parents=True)
        paths.append(repo)
    (config.root / "NeonLaw" / "scratch").mkdir()
    return paths


class TestDiscovery:
    """Finding checkouts on disk."""

    def test_only_git_directories(self, config, cloned):
        assert discover_repositories(config) == sorted(cloned)

    def test_missing_root(self, config):
        assert discover_repositories(config) == []


class TestSyncRepositories:
    """Fetch/pull loop."""

    def test_fetches_and_pulls_each_repo(self, config, cloned, fake_runner):
        fake_runner.results[('git', 'branch')] = CommandResult(args=[], returncode=0, stdout="main\n")

        report = sync_repositories(config, runner=fake_runner)

        assert len(fake_runner.commands('git', 'fetch', '--all', '--prune')) == 2
        assert len(fake_runner.commands('git', 'pull')) == 2
        pull_dirs = [cwd for cmd, cwd in fake_runner.calls if cmd[:2] == ['git', 'pull']]
        assert pull_dirs == sorted(cloned)

        outcomes = report.for_step("sync")
        assert [o.status for o in outcomes] == [StepStatus.UPDATED, StepStatus.UPDATED]
        assert outcomes[0].message == "main branch, clean"

    def test_never_clones(self, config, cloned, fake_runner):
        sync_repositories(config, runner=fake_runner)
        assert fake_runner.commands('git', 'clone') == []

    def test_dirty_worktree_reported(self, config, cloned, fake_runner, capsys):
        fake_runner.results[('git', 'diff-index')] = CommandResult(args=[], returncode=1)
        fake_runner.results[('git', 'diff', '--quiet')] = CommandResult(args=[], returncode=1)
        fake_runner.results[('git', 'branch')] = CommandResult(args=[], returncode=0, stdout="feature\n")

        report = sync_repositories(config, runner=fake_runner)

        assert "Uncommitted changes detected" in capsys.readouterr().out
        assert report.outcomes[0].message == "feature branch, has changes"

    def test_fetch_failure_continues(self, config, cloned, fake_runner):
        fake_runner.results[('git', 'fetch')] = CommandResult(
            args=[], returncode=1, stderr="fatal: unable to access remote"
        )

        report = sync_repositories(config, runner=fake_runner)

        assert len(report.failures) == 2
        assert "unable to access remote" in report.failures[0].message
        assert fake_runner.commands('git', 'pull') == []

    def test_noise_filtered_from_display(self, config, cloned, fake_runner, capsys):
        fake_runner.results[('git', 'pull')] = CommandResult(
            args=[], returncode=0,
            stdout="Already up to date.\n", stderr="From github.com:neon-law/Web\n"
        )

        sync_repositories(config, runner=fake_runner)

        out = capsys.readouterr().out
        assert "Already up to date." in out
        assert "From github.com" not in out
