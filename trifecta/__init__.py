"""
Trifecta - idempotent bootstrapper for a multi-organization development workspace.

Creates the workspace directory tree, links shared assistant configuration from a
canonical source, clones missing repositories, wires shell aliases, and installs
packages through the host package manager.
"""
from trifecta.bootstrap import Bootstrapper, RootDirectoryError, bootstrap
from trifecta.config import BootstrapConfig, ConfigError, ConfigSymlink, RepositorySpec, resolve_config
from trifecta.report import BootstrapReport, StepOutcome, StepStatus

__version__ = "0.1.0"
