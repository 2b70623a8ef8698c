#!/usr/bin/env python3
"""
trifecta - development workspace bootstrapper CLI

Usage:
    trifecta                 # same as 'trifecta bootstrap'
    trifecta bootstrap --log-file ~/.trifecta/logs/runs.yaml
    trifecta pull
    trifecta aliases --write
"""
import argparse
import logging
import sys
from pathlib import Path
from typing import Optional, List

from trifecta.aliases import render_aliases, write_aliases
from trifecta.bootstrap import RootDirectoryError, bootstrap
from trifecta.config import ConfigError, resolve_config
from trifecta.console import Console
from trifecta.report import BootstrapReport
from trifecta.run_log import RunLog
from trifecta.sync import sync_repositories


def build_parser() -> argparse.ArgumentParser:
    # Shared options are accepted before or after the subcommand. SUPPRESS keeps a
    # subparser from resetting a value already given to the main parser.
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        '--config',
        default=argparse.SUPPRESS,
        help='Path to a YAML config (default: $TRIFECTA_CONFIG, then ~/.trifecta/trifecta.yaml, then built-in layout)'
    )
    common.add_argument(
        '--log-file',
        default=argparse.SUPPRESS,
        help='Append a YAML record of the run to this file'
    )
    common.add_argument(
        '-v', '--verbose',
        action='store_true',
        default=argparse.SUPPRESS,
        help='Show debug logging, including full git and package manager output'
    )

    parser = argparse.ArgumentParser(
        prog='trifecta',
        description='Bootstrap and maintain the Trifecta development workspace',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        parents=[common]
    )

    subparsers = parser.add_subparsers(dest='command', help='Command to execute')

    subparsers.add_parser('bootstrap', parents=[common],
                          help='Create directories, symlinks, clones, aliases and packages (default)')
    subparsers.add_parser('pull', parents=[common], help='Fetch and pull every cloned repository')

    aliases_parser = subparsers.add_parser('aliases', parents=[common], help='Print the alias file')
    aliases_parser.add_argument('--write', action='store_true', help='Write it into the canonical source directory')

    return parser


def record_run(log_file: Optional[str], command: str, report: BootstrapReport, exit_code: int):
    if not log_file:
        return
    try:
        RunLog(Path(log_file).expanduser()).record(command, report, exit_code)
    except OSError as e:
        Console.warning(f"Could not write run log {log_file}: {e}")


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point. Returns the process exit code."""
    parser = build_parser()
    args = parser.parse_args(argv)

    config_arg = getattr(args, 'config', None)
    log_file = getattr(args, 'log_file', None)
    verbose = getattr(args, 'verbose', False)

    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format='%(asctime)s %(levelname)s %(name)s: %(message)s'
    )

    command = args.command or 'bootstrap'

    try:
        config = resolve_config(config_arg)
    except ConfigError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if command == 'aliases':
        if args.write:
            try:
                path = write_aliases(config)
            except OSError as e:
                Console.error(f"Could not write alias file {config.get_alias_file_path()}: {e}")
                return 1
            Console.success(f"Wrote {path}")
        else:
            print(render_aliases(config), end='')
        return 0

    if command == 'pull':
        report = sync_repositories(config)
        record_run(log_file, command, report, 0)
        return 0

    try:
        report = bootstrap(config)
    except RootDirectoryError as e:
        Console.error(f"Fatal: {e}")
        record_run(log_file, command, BootstrapReport(), 1)
        return 1

    record_run(log_file, command, report, 0)
    return 0


def run():
    """Console script entry point."""
    sys.exit(main())


if __name__ == '__main__':
    run()
