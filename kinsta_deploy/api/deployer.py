"""Deployer API for deployment operations"""

import tempfile
from pathlib import Path
from typing import Mapping, Optional, Union

import requests

from ..constants import SCRATCH_PREFIX
from ..core.config_loader import load_config
from ..models import DeploymentConfig, DeployResult, StepResult
from ..services import DeployService, MuPluginInstaller, CachePurger
from ..sync import RemoteShell, SynchronizerFactory
from ..utils.process_utils import CommandRunner


class Deployer:
    """Deployer class for deployment operations"""

    def __init__(self,
                 config: DeploymentConfig,
                 runner: Optional[CommandRunner] = None,
                 session: Optional[requests.Session] = None):
        """
        Initialize deployer

        Args:
            config: Deployment configuration
            runner: Command runner for the wrapped tools
            session: HTTP session for the plugin download
        """
        self.config = config
        self.runner = runner
        self.session = session

    def deploy(self) -> DeployResult:
        """
        Run the full deployment

        Returns:
            DeployResult: Deployment result

        Raises:
            DeployToolError: On any fatal failure
        """
        service = DeployService(runner=self.runner, session=self.session)
        return service.run(self.config)

    def install_mu_plugin(self) -> StepResult:
        """Install the Kinsta MU plugin on its own"""
        with tempfile.TemporaryDirectory(prefix=SCRATCH_PREFIX) as scratch:
            synchronizer = SynchronizerFactory.create(self.config, Path(scratch),
                                                      runner=self.runner)
            synchronizer.check_dependencies()
            installer = MuPluginInstaller(self.config, synchronizer, Path(scratch),
                                          session=self.session)
            return installer.install()

    def purge_cache(self) -> StepResult:
        """Purge the Kinsta cache on its own"""
        with tempfile.TemporaryDirectory(prefix=SCRATCH_PREFIX) as scratch:
            shell = RemoteShell(self.config, self.runner)
            purger = CachePurger(self.config, Path(scratch), shell=shell)
            return purger.purge()

    def build_command(self, method: Optional[str] = None) -> str:
        """
        Printable sync command for the configured source and target

        Secrets are masked; nothing is executed.
        """
        with tempfile.TemporaryDirectory(prefix=SCRATCH_PREFIX) as scratch:
            synchronizer = SynchronizerFactory.create(self.config, Path(scratch),
                                                      method=method, runner=self.runner)
            return synchronizer.describe_sync_command(
                Path(self.config.source_path), self.config.target_path
            )


def deploy(environ: Optional[Mapping[str, str]] = None,
           config_file: Optional[Union[str, Path]] = None,
           **overrides) -> DeployResult:
    """
    Deploy the configured source tree

    This is a convenience function that loads the configuration, creates a
    Deployer instance and performs the deployment.

    Args:
        environ: Variable source, defaults to os.environ
        config_file: Optional YAML configuration file
        **overrides: Configuration field overrides

    Returns:
        DeployResult: Deployment result

    Raises:
        ConfigurationError: If required configuration is missing
        DeployToolError: If deployment fails
    """
    config = load_config(environ, config_file, **overrides)
    return Deployer(config).deploy()
