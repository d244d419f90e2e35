"""API layer for kinsta-deploy"""

from .exceptions import (
    DeployToolError,
    ConfigurationError,
    DependencyError,
    SourceNotFoundError,
    ConnectivityError,
    TransferError,
    DegradedStepError,
    PluginInstallError,
    DownloadError,
    ArchiveVerificationError,
    ExtractionError,
    UploadError,
    CachePurgeError,
)
from .deployer import Deployer, deploy

__all__ = [
    # Main classes
    "Deployer",

    # Convenience functions
    "deploy",

    # Exceptions
    "DeployToolError",
    "ConfigurationError",
    "DependencyError",
    "SourceNotFoundError",
    "ConnectivityError",
    "TransferError",
    "DegradedStepError",
    "PluginInstallError",
    "DownloadError",
    "ArchiveVerificationError",
    "ExtractionError",
    "UploadError",
    "CachePurgeError",
]
