"""
Trifecta workspace bootstrapper.

Runs five idempotent steps in a fixed order:

1. Create the root and organization directories
2. Reconcile the config symlinks onto the canonical source
3. Clone repositories whose checkout path is missing
4. Source the alias file from the shell startup file
5. Batch-install packages with the host package manager

Only a root directory that cannot be established aborts the run. Every other
failure is recorded against its item and the run moves on.
"""
import logging
from pathlib import Path
from typing import Optional, Set

from trifecta.config import BootstrapConfig
from trifecta.console import Console
from trifecta.exec import CommandRunner
from trifecta.packages import (
    PackageListMissing, find_package_manager, read_package_list,
    install_packages, manual_install_hint,
)
from trifecta.repos import CloneError, provision_repository
from trifecta.report import BootstrapReport, StepStatus
from trifecta.shell import ShellFlavor, StartupFileMissing, ensure_source_line
from trifecta.symlinks import SymlinkError, reconcile_symlink


logger = logging.getLogger(__name__)

STEP_DIRECTORIES = "directories"
STEP_SYMLINKS = "symlinks"
STEP_REPOSITORIES = "repositories"
STEP_SHELL = "shell"
STEP_PACKAGES = "packages"


class RootDirectoryError(Exception):
    """Raised when the workspace root cannot be established as a directory."""
    pass


def display_path(path: Path, home: Path) -> str:
    """Render path with ~ when it lives under home."""
    try:
        return f"~/{path.relative_to(home)}"
    except ValueError:
        return str(path)


class Bootstrapper:
    """
    Sequential driver for the bootstrap steps.

    The shell flavor is chosen once here and reused by the shell step.
    """

    def __init__(self, config: BootstrapConfig, runner: Optional[CommandRunner] = None,
                 platform: Optional[str] = None):
        """
        Initialize bootstrapper.

        Args:
            config: Workspace description
            runner: Command runner for git and the package manager
            platform: sys.platform override for shell detection
        """
        self.config = config
        self.runner = runner or CommandRunner()
        self.flavor = ShellFlavor.detect(platform)
        logger.debug("Using %s startup file %s", self.flavor.shell_name,
                     self.flavor.startup_file(config.home))
        self.report = BootstrapReport()
        self._failed_organizations: Set[str] = set()

    def _record(self, step: str, item: str, status: StepStatus, message: Optional[str] = None):
        outcome = self.report.record(step, item, status, message)
        Console.outcome(outcome)
        return outcome

    def run(self) -> BootstrapReport:
        """
        Run all steps.

        Returns:
            BootstrapReport with one outcome per item

        Raises:
            RootDirectoryError: If the root cannot be created as a directory
        """
        Console.header(f"Setting up {display_path(self.config.root, self.config.home)}")

        self.create_directories()
        self.link_config()
        self.provision_repositories()
        self.wire_shell_aliases()
        self.install_packages()

        self.print_summary()
        return self.report

    def create_directories(self):
        """Step 1: root and organization directories."""
        Console.section("Directories")
        root = self.config.root

        if (root.exists() or root.is_symlink()) and not root.is_dir():
            raise RootDirectoryError(f"{root} exists and is not a directory")

        existed = root.is_dir()
        try:
            root.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise RootDirectoryError(f"Cannot create {root}: {e}")

        self._record(STEP_DIRECTORIES, str(root),
                     StepStatus.EXISTS if existed else StepStatus.CREATED)

        for org in self.config.organizations:
            path = root / org
            if path.is_dir():
                self._record(STEP_DIRECTORIES, str(path), StepStatus.EXISTS)
                continue
            try:
                path.mkdir(exist_ok=True)
            except OSError as e:
                self._failed_organizations.add(org)
                self._record(STEP_DIRECTORIES, str(path), StepStatus.FAILED, str(e))
                continue
            self._record(STEP_DIRECTORIES, str(path), StepStatus.CREATED)

    def link_config(self):
        """Step 2: config symlinks onto the canonical source."""
        Console.section("Config symlinks")
        source = self.config.source

        if not source.is_dir():
            Console.error(f"Canonical source directory not found: {source}")
            for link in self.config.symlinks:
                self._record(STEP_SYMLINKS, str(link.link_path(self.config.root)),
                             StepStatus.FAILED, f"canonical source missing: {source}")
            return

        for link in self.config.symlinks:
            link_path = link.link_path(self.config.root)
            source_path = link.source_path(source)
            try:
                status = reconcile_symlink(link_path, source_path)
            except SymlinkError as e:
                self._record(STEP_SYMLINKS, str(link_path), StepStatus.FAILED, str(e))
                continue
            self._record(STEP_SYMLINKS, str(link_path), status, f"→ {source_path}")

    def provision_repositories(self):
        """Step 3: clone missing repositories, one at a time."""
        Console.section("Repositories")

        for repo in self.config.repositories:
            if repo.organization in self._failed_organizations:
                self._record(STEP_REPOSITORIES, repo.label, StepStatus.SKIPPED,
                             f"organization directory unavailable: {repo.organization}")
                continue

            destination = repo.local_path(self.config.root)
            if not destination.exists():
                Console.info(f"Cloning {repo.label} from {repo.url}...")

            try:
                status = provision_repository(repo, self.config.root, self.runner)
            except CloneError as e:
                self._record(STEP_REPOSITORIES, repo.label, StepStatus.FAILED,
                             e.result.error_summary())
                continue

            self._record(STEP_REPOSITORIES, repo.label, status)

    def wire_shell_aliases(self):
        """Step 4: source the alias file from the shell startup file."""
        Console.section(f"Shell aliases ({self.flavor.shell_name})")
        rc_path = self.flavor.startup_file(self.config.home)
        alias_file = self.config.get_alias_file_path()
        rc_label = display_path(rc_path, self.config.home)

        try:
            status = ensure_source_line(self.flavor, self.config.home,
                                        self.config.marker, alias_file)
        except StartupFileMissing:
            self._record(STEP_SHELL, rc_label, StepStatus.SKIPPED,
                         f"{rc_label} not found. Create it and add: "
                         f"{self.flavor.source_line(alias_file)}")
            return
        except (OSError, UnicodeDecodeError) as e:
            self._record(STEP_SHELL, rc_label, StepStatus.FAILED, str(e))
            return

        self._record(STEP_SHELL, rc_label, status)

    def install_packages(self):
        """Step 5: batch install from the package list."""
        Console.section("Packages")
        spec = self.config.package_manager
        list_path = self.config.get_package_list_path()

        if find_package_manager(spec) is None:
            self._record(STEP_PACKAGES, spec.binary, StepStatus.SKIPPED,
                         f"{spec.binary} not installed. Install from {spec.homepage}")
            Console.detail(f"Then run: {manual_install_hint(spec, list_path)}")
            return

        try:
            packages = read_package_list(list_path)
        except PackageListMissing:
            self._record(STEP_PACKAGES, spec.binary, StepStatus.SKIPPED,
                         f"package list not found at {list_path}")
            return
        except (OSError, UnicodeDecodeError) as e:
            self._record(STEP_PACKAGES, spec.binary, StepStatus.FAILED,
                         f"cannot read package list {list_path}: {e}")
            return

        if not packages:
            self._record(STEP_PACKAGES, spec.binary, StepStatus.SKIPPED,
                         f"no packages found in {list_path}")
            return

        Console.info(f"Installing packages: {' '.join(packages)}")
        result = install_packages(spec, packages, self.runner)
        if not result.ok:
            self._record(STEP_PACKAGES, spec.binary, StepStatus.FAILED, result.error_summary())
            return

        self._record(STEP_PACKAGES, spec.binary, StepStatus.ATTEMPTED,
                     f"{len(packages)} packages installed or already present")

    def print_summary(self):
        """Print resulting layout and the follow-up actions."""
        config = self.config
        home = config.home
        rc_label = display_path(self.flavor.startup_file(home), home)

        Console.report_counts(self.report)
        if self.report.has_failures:
            Console.warning(f"Setup finished with {len(self.report.failures)} failure(s)")
        else:
            Console.success("Setup complete!")

        print("\nDirectory structure:")
        print(f"  {display_path(config.root, home)}/")
        entries = [
            f"{link.name} (symlink → {display_path(link.source_path(config.source), home)})"
            for link in config.symlinks
        ]
        entries += [f"{org}/" for org in config.organizations]
        for i, entry in enumerate(entries):
            branch = "└──" if i == len(entries) - 1 else "├──"
            print(f"    {branch} {entry}")

        print("\nNext steps:")
        print(f"  - Run 'source {rc_label}' to load aliases")
        if config.root_alias:
            print(f"  - Use '{config.root_alias}' to navigate to {display_path(config.root, home)}")
        repo_aliases = [repo.alias for repo in config.repositories if repo.alias]
        if repo_aliases:
            print(f"  - Use {', '.join(repr(a) for a in repo_aliases)} for repositories")


def bootstrap(config: BootstrapConfig, runner: Optional[CommandRunner] = None,
              platform: Optional[str] = None) -> BootstrapReport:
    """
    Bootstrap a Trifecta workspace.

    Args:
        config: Workspace description
        runner: Command runner (default: real subprocess runner)
        platform: sys.platform override for shell detection

    Returns:
        BootstrapReport

    Raises:
        RootDirectoryError: If the root cannot be established
    """
    return Bootstrapper(config, runner=runner, platform=platform).run()
