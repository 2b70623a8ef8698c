"""
Bootstrap configuration for Trifecta.

Describes the workspace layout (root directory, organizations, repositories),
the canonical source location the config symlinks point at, and the shell and
package-manager wiring. Built-in defaults reproduce the standard Trifecta
layout; a YAML file and environment variables can override them.
"""
import os
import yaml
from pathlib import Path
from typing import Optional, List, Dict, Any
from dataclasses import dataclass, field


DEFAULT_ROOT = "~/Trifecta"
DEFAULT_SOURCE = "~/.trifecta"
DEFAULT_MARKER = "# Trifecta directory aliases (managed by ~/.trifecta)"
CONFIG_FILENAME = "trifecta.yaml"

DEFAULT_ORGANIZATIONS = ["NeonLaw", "NeonLawFoundation", "SagebrushServices"]

DEFAULT_REPOSITORIES = [
    {'organization': 'SagebrushServices', 'name': 'Web',
     'url': 'git@github.com:sagebrush-services/Web.git', 'alias': 'sagebrush-web'},
    {'organization': 'SagebrushServices', 'name': 'AWS',
     'url': 'git@github.com:sagebrush-services/AWS.git', 'alias': 'sagebrush-aws'},
    {'organization': 'NeonLawFoundation', 'name': 'Web',
     'url': 'git@github.com:neon-law-foundation/Web.git', 'alias': 'nlf-web'},
    {'organization': 'NeonLawFoundation', 'name': 'Standards',
     'url': 'git@github.com:neon-law-foundation/Standards.git', 'alias': 'nlf-standards'},
    {'organization': 'NeonLaw', 'name': 'Web',
     'url': 'git@github.com:neon-law/Web.git', 'alias': 'neonlaw'},
]

DEFAULT_SYMLINKS = ["CLAUDE.md", ".claude"]

DEFAULT_COMMANDS = {
    'st': 'swift test',
    'sb': 'swift build',
    'sr': 'swift run',
}


class ConfigError(Exception):
    """Raised when a bootstrap config cannot be loaded or is invalid."""
    pass


@dataclass
class RepositorySpec:
    """A repository provisioned under an organization directory."""
    organization: str
    name: str
    url: str
    alias: Optional[str] = None

    def local_path(self, root: Path) -> Path:
        """Get the checkout path for this repository under root."""
        return root / self.organization / self.name

    @property
    def label(self) -> str:
        return f"{self.organization}/{self.name}"


@dataclass
class ConfigSymlink:
    """A config artifact linked from the root to the canonical source."""
    name: str

    def link_path(self, root: Path) -> Path:
        return root / self.name

    def source_path(self, source: Path) -> Path:
        return source / self.name


@dataclass
class PackageManagerSpec:
    """Host package manager used for batch installs."""
    binary: str = "brew"
    install_args: List[str] = field(default_factory=lambda: ["install"])
    homepage: str = "https://brew.sh"

    def install_command(self, packages: List[str]) -> List[str]:
        return [self.binary, *self.install_args, *packages]


@dataclass
class BootstrapConfig:
    """
    Complete description of a Trifecta workspace.

    Paths are absolute after construction through one of the loaders;
    tests build instances directly against a temporary directory.
    """
    root: Path
    source: Path
    home: Path
    organizations: List[str]
    repositories: List[RepositorySpec]
    symlinks: List[ConfigSymlink] = field(
        default_factory=lambda: [ConfigSymlink(name) for name in DEFAULT_SYMLINKS]
    )
    alias_file: str = "aliases.zsh"
    package_list: str = "brewlist"
    package_manager: PackageManagerSpec = field(default_factory=PackageManagerSpec)
    marker: str = DEFAULT_MARKER
    root_alias: Optional[str] = "trifecta"
    commands: Dict[str, str] = field(default_factory=lambda: dict(DEFAULT_COMMANDS))

    def __post_init__(self):
        if not self.organizations:
            raise ConfigError("At least one organization is required")

        unknown = [
            repo.label for repo in self.repositories
            if repo.organization not in self.organizations
        ]
        if unknown:
            raise ConfigError(
                f"Repositories reference unknown organizations: {', '.join(unknown)}"
            )

    def get_alias_file_path(self) -> Path:
        """Get full path to the alias file inside the canonical source."""
        return self.source / self.alias_file

    def get_package_list_path(self) -> Path:
        """Get full path to the package list inside the canonical source."""
        return self.source / self.package_list

    def organization_paths(self) -> List[Path]:
        return [self.root / org for org in self.organizations]

    @classmethod
    def from_dict(cls, data: Dict[str, Any], home: Optional[Path] = None) -> 'BootstrapConfig':
        """
        Build a config from a parsed YAML mapping.

        Any key that is absent or null falls back to the built-in default,
        except root_alias, where null disables the root alias.

        Args:
            data: Mapping with optional keys root, source, organizations,
                repositories, symlinks, alias_file, package_list,
                package_manager, marker, root_alias, commands
            home: Home directory used for ~ expansion and the shell
                startup file (default: Path.home())

        Returns:
            BootstrapConfig instance

        Raises:
            ConfigError: If a field has the wrong shape
        """
        if home is None:
            home = Path.home()

        if not isinstance(data, dict):
            raise ConfigError("Bootstrap config must be a YAML mapping")

        repositories = []
        for entry in _list_field(data, 'repositories', DEFAULT_REPOSITORIES, dict):
            missing = [key for key in ('organization', 'name', 'url') if not entry.get(key)]
            if missing:
                raise ConfigError(
                    f"Repository entry {entry!r} missing fields: {', '.join(missing)}"
                )
            repositories.append(RepositorySpec(
                organization=str(entry['organization']),
                name=str(entry['name']),
                url=str(entry['url']),
                alias=entry.get('alias'),
            ))

        pm_data = _value(data, 'package_manager', {})
        if isinstance(pm_data, str):
            pm_data = {'binary': pm_data}
        if not isinstance(pm_data, dict):
            raise ConfigError(f"Invalid package_manager entry: {pm_data!r}")
        try:
            package_manager = PackageManagerSpec(**pm_data)
        except TypeError as e:
            raise ConfigError(f"Invalid package_manager entry: {e}")

        commands = _value(data, 'commands', DEFAULT_COMMANDS)
        if not isinstance(commands, dict):
            raise ConfigError("commands must be a mapping of alias name to command")

        return cls(
            root=expand_path(_str_field(data, 'root', DEFAULT_ROOT), home),
            source=expand_path(_str_field(data, 'source', DEFAULT_SOURCE), home),
            home=home,
            organizations=_list_field(data, 'organizations', DEFAULT_ORGANIZATIONS, str),
            repositories=repositories,
            symlinks=[ConfigSymlink(name) for name in _list_field(data, 'symlinks', DEFAULT_SYMLINKS, str)],
            alias_file=_str_field(data, 'alias_file', 'aliases.zsh'),
            package_list=_str_field(data, 'package_list', 'brewlist'),
            package_manager=package_manager,
            marker=_str_field(data, 'marker', DEFAULT_MARKER),
            root_alias=data.get('root_alias', 'trifecta'),
            commands=dict(commands),
        )

    @classmethod
    def from_yaml(cls, yaml_path: Path, home: Optional[Path] = None) -> 'BootstrapConfig':
        """
        Load bootstrap configuration from a YAML file.

        Raises:
            ConfigError: If the file doesn't exist or is not valid YAML
        """
        if not yaml_path.exists():
            raise ConfigError(f"Bootstrap config not found: {yaml_path}")

        try:
            with open(yaml_path, 'r') as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in {yaml_path}: {e}")

        # An empty file means "all defaults"
        if data is None:
            data = {}

        return cls.from_dict(data, home=home)

    @classmethod
    def default(cls, home: Optional[Path] = None) -> 'BootstrapConfig':
        """Built-in Trifecta layout."""
        return cls.from_dict({}, home=home)


def _value(data: Dict[str, Any], key: str, default: Any) -> Any:
    """Get a key from a config mapping, treating null like an absent key."""
    value = data.get(key)
    return default if value is None else value


def _str_field(data: Dict[str, Any], key: str, default: str) -> str:
    value = _value(data, key, default)
    if not isinstance(value, str):
        raise ConfigError(f"{key} must be a string, got {value!r}")
    return value


def _list_field(data: Dict[str, Any], key: str, default: List[Any], item_type: type) -> List[Any]:
    value = _value(data, key, default)
    if not isinstance(value, list):
        raise ConfigError(f"{key} must be a list, got {value!r}")
    for item in value:
        if not isinstance(item, item_type):
            raise ConfigError(f"Invalid {key} entry: {item!r}")
    return list(value)


def expand_path(value: Any, home: Path) -> Path:
    """Expand a leading ~ against home and return an absolute path."""
    text = str(value)
    if text == "~":
        return home
    if text.startswith("~/"):
        return home / text[2:]
    return Path(text).absolute()


def resolve_config(config_arg: Optional[str] = None, home: Optional[Path] = None) -> BootstrapConfig:
    """
    Resolve bootstrap configuration.

    Resolution order:
        1. Explicit path (--config)
        2. $TRIFECTA_CONFIG
        3. <source>/trifecta.yaml, where source is $TRIFECTA_SOURCE or ~/.trifecta
        4. Built-in defaults

    $TRIFECTA_ROOT and $TRIFECTA_SOURCE override root and source afterwards.

    Args:
        config_arg: Optional path to a YAML config file
        home: Home directory (default: Path.home())

    Returns:
        BootstrapConfig

    Raises:
        ConfigError: If an explicitly requested config file is missing or invalid
    """
    if home is None:
        home = Path.home()

    env_source = os.getenv("TRIFECTA_SOURCE")
    env_root = os.getenv("TRIFECTA_ROOT")

    if config_arg is None:
        config_arg = os.getenv("TRIFECTA_CONFIG")

    if config_arg:
        config = BootstrapConfig.from_yaml(expand_path(config_arg, home), home=home)
    else:
        source = expand_path(env_source or DEFAULT_SOURCE, home)
        candidate = source / CONFIG_FILENAME
        if candidate.exists():
            config = BootstrapConfig.from_yaml(candidate, home=home)
        else:
            config = BootstrapConfig.default(home=home)

    if env_source:
        config.source = expand_path(env_source, home)
    if env_root:
        config.root = expand_path(env_root, home)

    return config
