"""
Console output and status display for the Trifecta bootstrapper.
"""
from typing import List

from trifecta.report import StepOutcome, StepStatus, BootstrapReport


STATUS_ICONS = {
    StepStatus.CREATED: "✅",
    StepStatus.EXISTS: "✓ ",
    StepStatus.REPLACED: "🔁",
    StepStatus.UPDATED: "✅",
    StepStatus.ATTEMPTED: "📦",
    StepStatus.SKIPPED: "⚠️ ",
    StepStatus.FAILED: "❌",
}


class Console:
    """Handles console output with formatting."""

    width = 70

    @staticmethod
    def _banner(char: str, text: str, closing: str = ""):
        rule = char * Console.width
        print(f"\n{rule}\n  {text}\n{rule}{closing}")

    @staticmethod
    def _line(icon: str, text: str):
        print(f"{icon} {text}")

    @staticmethod
    def header(text: str):
        """Print a run banner."""
        Console._banner("=", text, closing="\n")

    @staticmethod
    def section(text: str):
        """Print a step banner."""
        Console._banner("─", text)

    @staticmethod
    def info(text: str):
        Console._line("ℹ️ ", text)

    @staticmethod
    def success(text: str):
        Console._line("✅", text)

    @staticmethod
    def warning(text: str):
        Console._line("⚠️ ", text)

    @staticmethod
    def error(text: str):
        Console._line("❌", text)

    @staticmethod
    def detail(text: str):
        """Print an indented continuation line."""
        print(f"   {text}")

    @staticmethod
    def outcome(outcome: StepOutcome):
        """Print a single step outcome."""
        icon = STATUS_ICONS.get(outcome.status, "•")
        line = f"{icon} {outcome.item}: {outcome.status.value}"
        if outcome.message:
            line += f" ({outcome.message})"
        print(line)

    @staticmethod
    def output_lines(lines: List[str]):
        """Print captured tool output, indented."""
        for line in lines:
            print(f"   │ {line}")

    @staticmethod
    def report_counts(report: BootstrapReport):
        """Print a one-line tally of outcomes."""
        counts = report.counts()
        if not counts:
            Console.info("Nothing to do")
            return
        tally = ", ".join(f"{count} {status}" for status, count in sorted(counts.items()))
        print(f"\n📊 {tally}")
