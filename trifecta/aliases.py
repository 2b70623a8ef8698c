"""
Alias file rendering.

The alias file is a static lookup table: navigation aliases (name -> cd into a
workspace path) followed by passthrough command aliases (name -> command).
"""
from pathlib import Path
from typing import List, Tuple

from trifecta.config import BootstrapConfig


def shell_path(path: Path, home: Path) -> str:
    """Write paths under home with ~ so the file survives a home move."""
    try:
        return f"~/{path.relative_to(home)}"
    except ValueError:
        return str(path)


def navigation_aliases(config: BootstrapConfig) -> List[Tuple[str, Path]]:
    aliases = []
    if config.root_alias:
        aliases.append((config.root_alias, config.root))
    for repo in config.repositories:
        if repo.alias:
            aliases.append((repo.alias, repo.local_path(config.root)))
    return aliases


def render_aliases(config: BootstrapConfig) -> str:
    """Render the full alias file."""
    lines = ["# Trifecta directory navigation aliases"]
    for name, path in navigation_aliases(config):
        lines.append(f'alias {name}="cd {shell_path(path, config.home)}"')

    if config.commands:
        lines.append("")
        lines.append("# Command aliases")
        for name, command in config.commands.items():
            lines.append(f'alias {name}="{command}"')

    return "\n".join(lines) + "\n"


def write_aliases(config: BootstrapConfig) -> Path:
    """Write the alias file into the canonical source directory."""
    path = config.get_alias_file_path()
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(render_aliases(config), encoding="utf-8")
    return path
