"""
Command execution for the Trifecta bootstrapper.

Every external tool (git, the package manager) is run through CommandRunner,
which captures exit status and output instead of streaming them. Success is
decided from the exit code only; any line filtering happens afterwards, when
the output is displayed.
"""
import logging
import subprocess
from pathlib import Path
from typing import List, Optional, Iterable
from dataclasses import dataclass


logger = logging.getLogger(__name__)

# Exit status used when the executable itself could not be started
COMMAND_NOT_FOUND = 127


@dataclass
class CommandResult:
    """Captured result of an external command."""
    args: List[str]
    returncode: int
    stdout: str = ""
    stderr: str = ""

    @property
    def ok(self) -> bool:
        return self.returncode == 0

    def combined_output(self) -> str:
        return "\n".join(part for part in (self.stdout.strip(), self.stderr.strip()) if part)

    def error_summary(self, max_lines: int = 5) -> str:
        """Last few meaningful lines of output, for one-line failure reports."""
        text = self.stderr.strip() or self.stdout.strip()
        if not text:
            return f"exit status {self.returncode}"
        lines = [line for line in text.splitlines() if line.strip()]
        return " | ".join(lines[-max_lines:])


class CommandRunner:
    """Runs external commands with structured capture."""

    def __init__(self, cwd: Optional[Path] = None):
        self.cwd = cwd

    def run(self, command: List[str], cwd: Optional[Path] = None) -> CommandResult:
        """
        Run a command from a list of arguments.

        Never raises for a non-zero exit. A missing executable or an OS-level
        failure to start the process becomes returncode 127 with the error
        text in stderr.

        Args:
            command: Command as list of arguments
            cwd: Working directory (defaults to the runner's cwd)

        Returns:
            CommandResult
        """
        if cwd is None:
            cwd = self.cwd

        logger.debug("Running %s (cwd=%s)", command, cwd)

        try:
            result = subprocess.run(
                command,
                cwd=cwd,
                capture_output=True,
                text=True
            )
        except (FileNotFoundError, PermissionError) as e:
            logger.debug("Could not start %s: %s", command[0], e)
            return CommandResult(
                args=list(command),
                returncode=COMMAND_NOT_FOUND,
                stderr=f"{command[0]}: {e}"
            )

        captured = CommandResult(
            args=list(command),
            returncode=result.returncode,
            stdout=result.stdout or "",
            stderr=result.stderr or ""
        )

        logger.debug("%s exited with %d", command[0], captured.returncode)
        if captured.stdout:
            logger.debug("stdout:\n%s", captured.stdout.rstrip())
        if captured.stderr:
            logger.debug("stderr:\n%s", captured.stderr.rstrip())

        return captured


def filter_noise(output: str, noise_prefixes: Iterable[str]) -> List[str]:
    """
    Drop progress chatter from captured tool output.

    Args:
        output: Captured stdout/stderr text
        noise_prefixes: Line prefixes to suppress (e.g. "Fetching", "From ")

    Returns:
        Remaining non-empty lines

    Examples:
        >>> filter_noise("Fetching origin\\nAlready up to date.", ["Fetching"])
        ['Already up to date.']
    """
    prefixes = tuple(noise_prefixes)
    lines = []
    for line in output.splitlines():
        if not line.strip():
            continue
        if prefixes and line.startswith(prefixes):
            continue
        lines.append(line)
    return lines
