"""
Package installation through the host package manager.

The package list is one package per line; blank lines and '#' comments are
ignored and only the first token of a line is used, so trailing notes are
allowed. Presence of each package is not checked: the package manager is
trusted to no-op on what is already installed.
"""
import shutil
import logging
from pathlib import Path
from typing import List, Optional

from trifecta.config import PackageManagerSpec
from trifecta.exec import CommandRunner, CommandResult


logger = logging.getLogger(__name__)


class PackageListMissing(Exception):
    """Raised when the package list file does not exist."""
    pass


def parse_package_list(text: str) -> List[str]:
    """
    Extract package names from package list text.

    Examples:
        >>> parse_package_list("# tools\\ngit\\n\\nripgrep  # search\\n")
        ['git', 'ripgrep']
    """
    packages = []
    for line in text.splitlines():
        stripped = line.strip()
        if not stripped or stripped.startswith('#'):
            continue
        packages.append(stripped.split()[0])
    return packages


def read_package_list(path: Path) -> List[str]:
    """
    Read package names from a package list file.

    Raises:
        PackageListMissing: If the file does not exist
    """
    if not path.is_file():
        raise PackageListMissing(str(path))
    return parse_package_list(path.read_text(encoding="utf-8"))


def find_package_manager(spec: PackageManagerSpec) -> Optional[str]:
    """Locate the package manager on PATH, or None."""
    return shutil.which(spec.binary)


def manual_install_hint(spec: PackageManagerSpec, list_path: Path) -> str:
    """Shell command a user can paste once the package manager is installed."""
    return (
        f"{' '.join(spec.install_command([]))} "
        f"$(grep -v '^#' {list_path} | grep -v '^[[:space:]]*$' | awk '{{print $1}}')"
    )


def install_packages(spec: PackageManagerSpec, packages: List[str],
                     runner: CommandRunner) -> CommandResult:
    """Run one batch install for all packages."""
    command = spec.install_command(packages)
    logger.debug("Installing %d packages with %s", len(packages), spec.binary)
    return runner.run(command)
