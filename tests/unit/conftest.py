"""
Pytest configuration for unit tests.

Provides a temporary home/workspace layout and a fake command runner so no
test ever reaches the network or the real package manager.
"""
import pytest
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from trifecta.config import BootstrapConfig, RepositorySpec, PackageManagerSpec
from trifecta.exec import CommandRunner, CommandResult


class FakeRunner(CommandRunner):
    """
    Records commands instead of running them.

    `git clone <url> <dest>` creates <dest>/.git so later steps see a checkout.
    Entries in `results` (keyed by an argv prefix) override the default
    successful result.
    """

    def __init__(self):
        super().__init__()
        self.calls: List[Tuple[List[str], Optional[Path]]] = []
        self.results: Dict[Tuple[str, ...], CommandResult] = {}

    def _lookup(self, command: List[str]) -> Optional[CommandResult]:
        for prefix, result in self.results.items():
            if tuple(command[:len(prefix)]) == prefix:
                return result
        return None

    def run(self, command, cwd=None):
        self.calls.append((list(command), cwd))
        override = self._lookup(command)
        if override is not None:
            return CommandResult(args=list(command), returncode=override.returncode,
                                 stdout=override.stdout, stderr=override.stderr)

        if command[:2] == ['git', 'clone']:
            dest = Path(command[3])
            (dest / ".git").mkdir(parents=True)

        return CommandResult(args=list(command), returncode=0)

    def commands(self, *prefix: str) -> List[List[str]]:
        return [cmd for cmd, _ in self.calls if tuple(cmd[:len(prefix)]) == prefix]


@pytest.fixture
def fake_runner():
    return FakeRunner()


@pytest.fixture
def home(tmp_path):
    home_dir = tmp_path / "home"
    home_dir.mkdir()
    return home_dir


@pytest.fixture
def source(home):
    """Canonical source directory with both config artifacts and support files."""
    source_dir = home / ".trifecta"
    source_dir.mkdir()
    (source_dir / "CLAUDE.md").write_text("# Instructions\n")
    (source_dir / ".claude").mkdir()
    (source_dir / ".claude" / "settings.json").write_text("{}\n")
    (source_dir / "aliases.zsh").write_text('alias trifecta="cd ~/Trifecta"\n')
    (source_dir / "brewlist").write_text("# CLI tools\ngit\n\ngh  # GitHub CLI\n")
    return source_dir


@pytest.fixture
def config(home, source):
    return BootstrapConfig(
        root=home / "Trifecta",
        source=source,
        home=home,
        organizations=["NeonLaw", "SagebrushServices"],
        repositories=[
            RepositorySpec("NeonLaw", "Web", "git@github.com:neon-law/Web.git", alias="neonlaw"),
            RepositorySpec("SagebrushServices", "AWS", "git@github.com:sagebrush-services/AWS.git",
                           alias="sagebrush-aws"),
        ],
        package_manager=PackageManagerSpec(binary="brew"),
    )


@pytest.fixture
def no_package_manager(monkeypatch):
    monkeypatch.setattr("trifecta.packages.shutil.which", lambda name: None)


@pytest.fixture
def with_package_manager(monkeypatch):
    monkeypatch.setattr("trifecta.packages.shutil.which", lambda name: f"/usr/local/bin/{name}")
