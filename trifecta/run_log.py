"""
Optional YAML run log.

Appends one entry per run with every step outcome. The log is only written
when a path is given, so a plain rerun on a provisioned machine changes
nothing on disk.
"""
import yaml
from pathlib import Path
from datetime import datetime, timezone
from typing import Dict, Any

from trifecta.report import BootstrapReport


class RunLog:
    """Logs bootstrap and sync runs to a YAML file."""

    def __init__(self, log_path: Path):
        self.log_path = log_path

    def _load(self) -> Dict[str, Any]:
        """
        Load existing log data.

        Self-heals if the log file is missing, empty, or corrupt.
        """
        try:
            with open(self.log_path, 'r') as f:
                data = yaml.safe_load(f)
        except FileNotFoundError:
            data = None
        except yaml.YAMLError:
            data = None

        if data is None or not isinstance(data, dict):
            data = {'version': 1, 'runs': []}

        if 'runs' not in data or not isinstance(data['runs'], list):
            data['runs'] = []

        return data

    def record(self, command: str, report: BootstrapReport, exit_code: int):
        """Append a run entry."""
        data = self._load()

        entry = {
            'timestamp': datetime.now(timezone.utc).isoformat(),
            'command': command,
            'exit_code': exit_code,
            **report.to_dict()
        }
        data['runs'].append(entry)

        self.log_path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.log_path, 'w') as f:
            yaml.dump(data, f, default_flow_style=False, sort_keys=False, allow_unicode=True)
