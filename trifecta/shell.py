"""
Shell startup-file wiring.

The shell flavor is picked once per run from the host platform. Each flavor
knows its startup file and comment syntax. The alias file is sourced from the
startup file under a marker comment; the marker is matched as a whole line so
a rerun never appends a second copy.
"""
import sys
from enum import Enum
from pathlib import Path
from typing import Optional, List

from trifecta.report import StepStatus


class ShellFlavor(Enum):
    """Supported shells: (name, startup file relative to home, comment prefix)."""
    ZSH = ("zsh", ".zshrc", "#")
    BASH = ("bash", ".bashrc", "#")

    def __init__(self, shell_name: str, rc_filename: str, comment_prefix: str):
        self.shell_name = shell_name
        self.rc_filename = rc_filename
        self.comment_prefix = comment_prefix

    def startup_file(self, home: Path) -> Path:
        return home / self.rc_filename

    def source_line(self, alias_file: Path) -> str:
        return f"source {alias_file}"

    def comment(self, text: str) -> str:
        """Format text as a comment line, unless it already is one."""
        if text.startswith(self.comment_prefix):
            return text
        return f"{self.comment_prefix} {text}"

    @classmethod
    def detect(cls, platform: Optional[str] = None) -> 'ShellFlavor':
        """
        Choose the shell flavor for a platform.

        macOS ships zsh as its login shell; every other Unix-like host gets bash.

        Args:
            platform: sys.platform-style string (default: current platform)
        """
        if platform is None:
            platform = sys.platform
        if platform == "darwin":
            return cls.ZSH
        return cls.BASH


class StartupFileMissing(Exception):
    """Raised when the shell startup file does not exist."""
    pass


def has_marker_line(content: str, marker: str) -> bool:
    """Exact-line match for the marker; trailing whitespace is ignored."""
    return any(line.rstrip() == marker for line in content.splitlines())


def build_block(flavor: ShellFlavor, marker: str, alias_file: Path) -> List[str]:
    return [flavor.comment(marker), flavor.source_line(alias_file)]


def ensure_source_line(flavor: ShellFlavor, home: Path, marker: str, alias_file: Path) -> StepStatus:
    """
    Append the marker and source line to the startup file once.

    The startup file is never created: a user without one has made a choice
    about their shell that this tool should not second-guess.

    Args:
        flavor: Selected shell flavor
        home: Home directory holding the startup file
        marker: Marker comment guarding the block
        alias_file: Alias file to source

    Returns:
        StepStatus.CREATED when the block was appended, StepStatus.EXISTS
        when the marker was already present

    Raises:
        StartupFileMissing: If the startup file does not exist
        OSError: If the file cannot be read or appended to
    """
    rc_path = flavor.startup_file(home)
    if not rc_path.is_file():
        raise StartupFileMissing(str(rc_path))

    marker_line = flavor.comment(marker)
    content = rc_path.read_text(encoding="utf-8")

    if has_marker_line(content, marker_line):
        return StepStatus.EXISTS

    block = build_block(flavor, marker, alias_file)
    prefix = "" if not content or content.endswith("\n") else "\n"

    with rc_path.open("a", encoding="utf-8") as f:
        f.write(prefix + "\n" + "\n".join(block) + "\n")

    return StepStatus.CREATED
