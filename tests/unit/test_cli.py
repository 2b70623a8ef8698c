"""
Unit tests for the trifecta CLI.
"""
import pytest
import yaml
from pathlib import Path
from unittest.mock import Mock, patch

from trifecta.cli import build_parser, main


@pytest.fixture
def cli_home(home, source, monkeypatch):
    """Point Path.home() at the temporary home and clear env overrides."""
    monkeypatch.setattr(Path, 'home', lambda: home)
    for name in ("TRIFECTA_CONFIG", "TRIFECTA_ROOT", "TRIFECTA_SOURCE"):
        monkeypatch.delenv(name, raising=False)
    return home


@pytest.fixture
def config_file(cli_home, source):
    path = cli_home / "trifecta.yaml"
    path.write_text(yaml.dump({
        'root': '~/Trifecta',
        'source': str(source),
        'organizations': ['NeonLaw'],
        'repositories': [
            {'organization': 'NeonLaw', 'name': 'Web', 'url': 'git@github.com:neon-law/Web.git',
             'alias': 'neonlaw'},
        ],
    }))
    return path


class TestParser:
    """Argument parsing."""

    def test_no_subcommand_allowed(self):
        args = build_parser().parse_args([])
        assert args.command is None

    def test_aliases_write_flag(self):
        args = build_parser().parse_args(['aliases', '--write'])
        assert args.command == 'aliases'
        assert args.write is True

    def test_shared_flags_after_subcommand(self):
        args = build_parser().parse_args(['pull', '-v', '--config', 'alt.yaml', '--log-file', 'runs.yaml'])
        assert args.command == 'pull'
        assert args.verbose is True
        assert args.config == 'alt.yaml'
        assert args.log_file == 'runs.yaml'

    def test_flags_before_subcommand_survive(self):
        """The subcommand must not reset options given ahead of it."""
        args = build_parser().parse_args(['--config', 'alt.yaml', '-v', 'bootstrap'])
        assert args.command == 'bootstrap'
        assert args.config == 'alt.yaml'
        assert args.verbose is True


class TestMain:
    """End-to-end command dispatch with git mocked out."""

    @patch('trifecta.exec.subprocess.run')
    def test_default_command_bootstraps(self, mock_run, config_file, cli_home, no_package_manager):
        mock_run.return_value = Mock(returncode=0, stdout="", stderr="")

        exit_code = main(['--config', str(config_file)])

        assert exit_code == 0
        assert (cli_home / "Trifecta" / "NeonLaw").is_dir()
        assert (cli_home / "Trifecta" / "CLAUDE.md").is_symlink()
        clone_call = mock_run.call_args_list[0][0][0]
        assert clone_call == ['git', 'clone', 'git@github.com:neon-law/Web.git',
                              str(cli_home / "Trifecta" / "NeonLaw" / "Web")]

    def test_fatal_root_exits_nonzero(self, config_file, cli_home, no_package_manager, capsys):
        (cli_home / "Trifecta").write_text("blocking file")

        exit_code = main(['--config', str(config_file)])

        assert exit_code == 1
        assert "Fatal" in capsys.readouterr().out

    def test_missing_config_exits_nonzero(self, cli_home, capsys):
        exit_code = main(['--config', str(cli_home / "missing.yaml")])

        assert exit_code == 1
        assert "Bootstrap config not found" in capsys.readouterr().err

    def test_aliases_printed(self, config_file, capsys):
        exit_code = main(['--config', str(config_file), 'aliases'])

        assert exit_code == 0
        assert 'alias neonlaw="cd ~/Trifecta/NeonLaw/Web"' in capsys.readouterr().out

    def test_aliases_written(self, config_file, source):
        exit_code = main(['--config', str(config_file), 'aliases', '--write'])

        assert exit_code == 0
        assert 'alias trifecta="cd ~/Trifecta"' in (source / "aliases.zsh").read_text()

    @patch('trifecta.exec.subprocess.run')
    def test_pull_with_run_log(self, mock_run, config_file, cli_home):
        mock_run.return_value = Mock(returncode=0, stdout="main\n", stderr="")
        (cli_home / "Trifecta" / "NeonLaw" / "Web" / ".git").mkdir(parents=True)
        log_file = cli_home / "logs" / "runs.yaml"

        exit_code = main(['--config', str(config_file), '--log-file', str(log_file), 'pull'])

        assert exit_code == 0
        data = yaml.safe_load(log_file.read_text())
        assert data['runs'][0]['command'] == 'pull'
        assert data['runs'][0]['outcomes'][0]['status'] == 'updated'

    @patch('trifecta.exec.subprocess.run')
    def test_bootstrap_flags_after_subcommand(self, mock_run, config_file, cli_home, no_package_manager):
        mock_run.return_value = Mock(returncode=0, stdout="", stderr="")
        log_file = cli_home / "logs" / "runs.yaml"

        exit_code = main(['bootstrap', '--config', str(config_file), '--log-file', str(log_file)])

        assert exit_code == 0
        assert (cli_home / "Trifecta" / "NeonLaw").is_dir()
        data = yaml.safe_load(log_file.read_text())
        assert data['runs'][0]['command'] == 'bootstrap'

    def test_aliases_write_failure_exits_nonzero(self, config_file, source, capsys):
        alias_path = source / "aliases.zsh"
        alias_path.unlink()
        alias_path.mkdir()

        exit_code = main(['aliases', '--write', '--config', str(config_file)])

        assert exit_code == 1
        assert f"Could not write alias file {alias_path}" in capsys.readouterr().out
