"""Data models for kinsta-deploy"""

from .config import DeploymentConfig, ExcludePatternList
from .result import CommandResult, TransferStats, StepResult, DeployResult

__all__ = [
    # Config models
    "DeploymentConfig",
    "ExcludePatternList",

    # Result models
    "CommandResult",
    "TransferStats",
    "StepResult",
    "DeployResult",
]
