"""Business logic services for kinsta-deploy"""

from .plugin_installer import MuPluginInstaller
from .cache_purger import CachePurger
from .deploy_service import DeployService

__all__ = [
    "MuPluginInstaller",
    "CachePurger",
    "DeployService",
]
