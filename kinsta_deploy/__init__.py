"""kinsta-deploy - Deploy WordPress sites to Kinsta over SSH and SFTP.

Synchronizes a local site tree with rsync or lftp, installs the Kinsta MU
plugin and purges the Kinsta cache through WP-CLI.
"""

from .__version__ import __version__, __version_info__, __license__

# Exceptions
from .api.exceptions import (
    DeployToolError,
    ConfigurationError,
    DependencyError,
    SourceNotFoundError,
    ConnectivityError,
    TransferError,
    PluginInstallError,
    CachePurgeError,
)

# Core API
from .api.deployer import Deployer, deploy
from .core.config_loader import load_config

# Data models
from .models.config import DeploymentConfig, ExcludePatternList
from .models.result import TransferStats, StepResult, DeployResult

__all__ = [
    # Version information
    "__version__",
    "__version_info__",
    "__license__",

    # Main classes
    "Deployer",

    # Core API functions
    "deploy",
    "load_config",

    # Data models
    "DeploymentConfig",
    "ExcludePatternList",
    "TransferStats",
    "StepResult",
    "DeployResult",

    # Exceptions
    "DeployToolError",
    "ConfigurationError",
    "DependencyError",
    "SourceNotFoundError",
    "ConnectivityError",
    "TransferError",
    "PluginInstallError",
    "CachePurgeError",
]
