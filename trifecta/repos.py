"""
Repository provisioning.

Clones a repository only when its checkout path is missing. An existing path
is never fetched, pulled, or inspected; keeping clones current is the job of
the separate sync command.
"""
import logging
from pathlib import Path

from trifecta.config import RepositorySpec
from trifecta.exec import CommandRunner, CommandResult
from trifecta.report import StepStatus


logger = logging.getLogger(__name__)


class CloneError(Exception):
    """Raised when git clone fails."""

    def __init__(self, repo: RepositorySpec, result: CommandResult):
        self.repo = repo
        self.result = result
        super().__init__(f"Failed to clone {repo.label}: {result.error_summary()}")


def clone_command(repo: RepositorySpec, destination: Path):
    return ['git', 'clone', repo.url, str(destination)]


def provision_repository(repo: RepositorySpec, root: Path, runner: CommandRunner) -> StepStatus:
    """
    Clone repo under root if its checkout path does not exist.

    Args:
        repo: Repository to provision
        root: Workspace root
        runner: Command runner used for git

    Returns:
        StepStatus.CREATED after a successful clone, StepStatus.EXISTS if
        the path was already there (whatever it contains)

    Raises:
        CloneError: If git clone exits non-zero
    """
    destination = repo.local_path(root)

    if destination.exists() or destination.is_symlink():
        logger.debug("%s already present at %s", repo.label, destination)
        return StepStatus.EXISTS

    result = runner.run(clone_command(repo, destination))
    if not result.ok:
        raise CloneError(repo, result)

    return StepStatus.CREATED
