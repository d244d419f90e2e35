"""Deployment orchestration"""

import logging
import tempfile
import time
from pathlib import Path
from typing import Optional, Type

import requests

from ..api.exceptions import SourceNotFoundError, TransferError
from ..constants import SCRATCH_PREFIX, StatsSource, StepStatus
from ..core.stats_extractor import get_stats_extractor
from ..core.stats_writer import write_stats_file
from ..models.config import DeploymentConfig
from ..models.result import DeployResult, StepResult, TransferStats
from ..sync.base import RemoteSynchronizer
from ..sync.factory import SynchronizerFactory
from ..sync.ssh import RemoteShell
from ..utils.file_utils import scan_directory, safe_remove
from ..utils.formatting import format_duration, format_size, pluralize
from ..utils.process_utils import CommandRunner
from .cache_purger import CachePurger
from .plugin_installer import MuPluginInstaller

logger = logging.getLogger(__name__)


class DeployService:
    """
    Runs one deployment: validate, sync, plugin, cache, statistics.

    Configuration, connectivity and transfer failures are fatal and
    propagate as exceptions. Plugin installation and cache purge failures
    are recorded on the result as degraded steps and never change the
    outcome of the run.
    """

    def __init__(self,
                 runner: Optional[CommandRunner] = None,
                 synchronizer_factory: Type[SynchronizerFactory] = SynchronizerFactory,
                 installer_cls: Type[MuPluginInstaller] = MuPluginInstaller,
                 purger_cls: Type[CachePurger] = CachePurger,
                 session: Optional[requests.Session] = None):
        self.runner = runner
        self.synchronizer_factory = synchronizer_factory
        self.installer_cls = installer_cls
        self.purger_cls = purger_cls
        self.session = session

    def run(self, config: DeploymentConfig) -> DeployResult:
        """
        Execute the deployment

        Args:
            config: Validated deployment configuration

        Returns:
            DeployResult with statistics and step outcomes

        Raises:
            SourceNotFoundError: If the source directory is missing
            DependencyError: If a wrapped tool is not installed
            ConnectivityError: If the remote session cannot be opened
            TransferError: If synchronization fails outside dry-run mode
        """
        self._log_configuration(config)

        source = Path(config.source_path)
        if not source.is_dir():
            raise SourceNotFoundError(config.source_path)

        started = time.monotonic()
        scratch_dir = Path(tempfile.mkdtemp(prefix=SCRATCH_PREFIX))
        try:
            return self._run(config, source, scratch_dir, started)
        finally:
            safe_remove(scratch_dir)

    def _run(self,
             config: DeploymentConfig,
             source: Path,
             scratch_dir: Path,
             started: float) -> DeployResult:
        synchronizer = self.synchronizer_factory.create(
            config, scratch_dir, runner=self.runner
        )
        synchronizer.check_dependencies()

        logger.info(f"Testing connection to {config.host}:{config.port} via {synchronizer.name}...")
        synchronizer.test_connection()
        logger.info("Connection test successful")

        local_files = scan_directory(source, config.exclude_patterns)
        logger.info(f"Local files to consider: {pluralize(len(local_files), 'file')}")

        result = DeployResult(success=True, dry_run=config.dry_run,
                              stats_file=config.stats_file)
        result.stats = self._sync(config, synchronizer, source, scratch_dir, result)

        shell = RemoteShell(config, synchronizer.runner)

        if config.install_mu_plugin:
            result.plugin = self._install_plugin(config, synchronizer, scratch_dir, shell)

        # Runs regardless of the plugin outcome
        if config.purge_cache:
            result.cache = self._purge_cache(config, scratch_dir, shell)

        # Covers the plugin and cache steps, not only the transfer
        result.stats.elapsed_seconds = int(time.monotonic() - started)
        write_stats_file(result.stats, config.stats_file)
        logger.info(f"Deployment statistics written to {config.stats_file}")

        self._log_summary(result)
        return result

    def _sync(self,
              config: DeploymentConfig,
              synchronizer: RemoteSynchronizer,
              source: Path,
              scratch_dir: Path,
              result: DeployResult) -> TransferStats:
        mode = "DRY RUN" if config.dry_run else "LIVE"
        logger.info(f"Starting file synchronization ({mode}) with {synchronizer.name}...")

        log_path = scratch_dir / "transfer_output.log"
        started = time.monotonic()

        try:
            output = synchronizer.sync(source, config.target_path, log_path)
        except TransferError as e:
            if not config.dry_run:
                raise
            logger.warning(f"{e}; dry run, no changes were made")
            result.transfer_failed_in_dry_run = True
            return TransferStats(
                elapsed_seconds=int(time.monotonic() - started),
                estimated=True,
                source=StatsSource.DRY_RUN
            )

        elapsed = int(time.monotonic() - started)
        logger.info("File synchronization completed successfully")

        extractor = get_stats_extractor(synchronizer.name)
        return extractor.extract(output.output, source,
                                 dry_run=config.dry_run,
                                 elapsed_seconds=elapsed)

    def _install_plugin(self, config, synchronizer, scratch_dir, shell) -> StepResult:
        installer = self.installer_cls(config, synchronizer, scratch_dir,
                                       shell=shell, session=self.session)
        try:
            step = installer.install()
        except Exception as e:
            logger.debug("MU plugin step raised", exc_info=True)
            step = StepResult(name=MuPluginInstaller.STEP_NAME, status=StepStatus.FAILED,
                              message=f"Unexpected error: {e}")
        if not step.success:
            logger.warning(
                "Kinsta MU Plugin installation failed, but deployment will continue"
            )
        return step

    def _purge_cache(self, config, scratch_dir, shell) -> StepResult:
        purger = self.purger_cls(config, scratch_dir, shell=shell)
        try:
            step = purger.purge()
        except Exception as e:
            logger.debug("Cache purge step raised", exc_info=True)
            step = StepResult(name=CachePurger.STEP_NAME, status=StepStatus.FAILED,
                              message=f"Unexpected error: {e}")
        if not step.success:
            logger.warning("Kinsta cache purge failed, but deployment will continue")
        return step

    @staticmethod
    def _log_configuration(config: DeploymentConfig) -> None:
        logger.info("Deployment configuration:")
        for key, value in config.to_dict(mask_secrets=True).items():
            if isinstance(value, list):
                value = ",".join(value)
            logger.info(f"  {key}: {value}")

    @staticmethod
    def _log_summary(result: DeployResult) -> None:
        stats = result.stats
        estimated = " (estimated)" if stats.estimated else ""
        logger.info(f"Files transferred: {stats.files_transferred}{estimated}")
        logger.info(
            f"Bytes transferred: {stats.bytes_transferred} "
            f"({format_size(stats.bytes_transferred)}){estimated}"
        )
        logger.info(f"Deployment time: {format_duration(stats.elapsed_seconds)}")
        for step in result.degraded_steps:
            logger.warning(f"Step '{step.name}' {step.status.value}: {step.message}")
