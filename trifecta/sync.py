"""
Pull every cloned repository in the workspace.

This is the maintenance counterpart to bootstrap: bootstrap only clones what
is missing, sync fetches and pulls what is already there. Repositories are
discovered on disk (any organization subdirectory containing .git), so clones
added by hand are included too.
"""
import logging
from pathlib import Path
from typing import List, Optional

from trifecta.config import BootstrapConfig
from trifecta.console import Console
from trifecta.exec import CommandRunner, filter_noise
from trifecta.report import BootstrapReport, StepStatus


logger = logging.getLogger(__name__)

STEP_SYNC = "sync"

# Progress chatter from git fetch/pull that adds nothing to the report
NOISE_PREFIXES = ("Fetching ", "From ")


def discover_repositories(config: BootstrapConfig) -> List[Path]:
    """List git working directories under each organization directory."""
    repos = []
    for org_path in config.organization_paths():
        if not org_path.is_dir():
            continue
        for child in sorted(org_path.iterdir()):
            if child.is_dir() and (child / ".git").exists():
                repos.append(child)
    logger.debug("Discovered %d repositories under %s", len(repos), config.root)
    return repos


class RepositorySyncer:
    """Fetches and pulls each repository in turn."""

    def __init__(self, config: BootstrapConfig, runner: Optional[CommandRunner] = None):
        self.config = config
        self.runner = runner or CommandRunner()
        self.report = BootstrapReport()

    def _git(self, repo_path: Path, *args: str):
        return self.runner.run(['git', *args], cwd=repo_path)

    def sync_repository(self, repo_path: Path):
        label = f"{repo_path.parent.name}/{repo_path.name}"
        Console.info(f"📦 Pulling {label}...")

        dirty = self._git(repo_path, 'diff-index', '--quiet', 'HEAD', '--')
        if not dirty.ok:
            Console.warning("Uncommitted changes detected")

        fetch = self._git(repo_path, 'fetch', '--all', '--prune')
        Console.output_lines(filter_noise(fetch.combined_output(), NOISE_PREFIXES))
        if not fetch.ok:
            outcome = self.report.record(STEP_SYNC, label, StepStatus.FAILED,
                                         f"fetch failed: {fetch.error_summary()}")
            Console.outcome(outcome)
            return

        branch = self._git(repo_path, 'branch', '--show-current')
        current_branch = branch.stdout.strip() or "detached HEAD"

        pull = self._git(repo_path, 'pull')
        Console.output_lines(filter_noise(pull.combined_output(), NOISE_PREFIXES))
        if not pull.ok:
            outcome = self.report.record(STEP_SYNC, label, StepStatus.FAILED,
                                         f"pull failed on {current_branch}: {pull.error_summary()}")
            Console.outcome(outcome)
            return

        unstaged = self._git(repo_path, 'diff', '--quiet')
        staged = self._git(repo_path, 'diff', '--cached', '--quiet')
        state = "clean" if unstaged.ok and staged.ok else "has changes"

        outcome = self.report.record(STEP_SYNC, label, StepStatus.UPDATED,
                                     f"{current_branch} branch, {state}")
        Console.outcome(outcome)

    def run(self) -> BootstrapReport:
        Console.header("🔄 Pulling all Trifecta repositories")

        repos = discover_repositories(self.config)
        if not repos:
            Console.warning(f"No git repositories found under {self.config.root}")

        for repo_path in repos:
            self.sync_repository(repo_path)

        Console.report_counts(self.report)
        if not self.report.has_failures:
            Console.success("All repositories updated!")
        return self.report


def sync_repositories(config: BootstrapConfig, runner: Optional[CommandRunner] = None) -> BootstrapReport:
    """Fetch and pull every repository in the workspace."""
    return RepositorySyncer(config, runner=runner).run()
