"""Kinsta cache purge through WP-CLI over SSH"""

import logging
import shlex
from pathlib import Path
from typing import Optional

from ..api.exceptions import CachePurgeError, ConnectivityError, DependencyError
from ..constants import (
    WP_CLI_CACHE_PURGE,
    WP_CLI_VERSION,
    CACHE_PURGE_SCRIPT_NAME,
    CACHE_PURGE_SUCCESS_MARKERS,
    SSH_TEST_CONNECT_TIMEOUT,
    SSH_COMMAND_CONNECT_TIMEOUT,
    StepStatus,
)
from ..models.config import DeploymentConfig
from ..models.result import StepResult
from ..sync.base import RemoteSynchronizer
from ..sync.ssh import RemoteShell
from ..utils.file_utils import write_private_file

logger = logging.getLogger(__name__)


def has_success_marker(output: str) -> bool:
    """Whether WP-CLI output reads like a completed purge"""
    text = (output or "").lower()
    return any(marker in text for marker in CACHE_PURGE_SUCCESS_MARKERS)


class CachePurger:
    """Run ``wp kinsta cache purge --all`` in the site root

    Success detection is text matching on WP-CLI output, so a zero exit
    without a recognised marker only produces a warning. When SSH execution
    fails, a purge script is uploaded over SFTP for manual execution; SFTP
    cannot run it, so that outcome is reported as degraded.
    """

    STEP_NAME = "cache-purge"

    def __init__(self,
                 config: DeploymentConfig,
                 scratch_dir: Path,
                 shell: Optional[RemoteShell] = None,
                 fallback_uploader: Optional[RemoteSynchronizer] = None):
        """
        Args:
            config: Deployment configuration
            scratch_dir: Per-run scratch directory
            shell: Remote shell, built from config when omitted
            fallback_uploader: Synchronizer used to upload the manual
                purge script, an SFTP (lftp) synchronizer by default
        """
        self.config = config
        self.scratch_dir = Path(scratch_dir)
        self.shell = shell or RemoteShell(config)
        self._fallback_uploader = fallback_uploader

    @property
    def purge_command(self) -> str:
        return f"cd {shlex.quote(self.config.target_path)} && {WP_CLI_CACHE_PURGE}"

    @property
    def fallback_uploader(self) -> RemoteSynchronizer:
        if self._fallback_uploader is None:
            from ..sync.lftp import LftpSynchronizer
            self._fallback_uploader = LftpSynchronizer(
                self.config, self.scratch_dir, self.shell.runner
            )
        return self._fallback_uploader

    def purge(self) -> StepResult:
        """Purge the cache, falling back to a manual script upload"""
        result = StepResult(name=self.STEP_NAME, status=StepStatus.SKIPPED)

        if not self.config.purge_cache:
            logger.info("Kinsta cache purge is disabled")
            result.message = "disabled"
            return result

        logger.info("Starting Kinsta cache purge...")
        logger.info(f"Target path: {self.config.target_path}")

        if self.config.dry_run:
            logger.warning(
                f"DRY RUN: Would execute '{WP_CLI_CACHE_PURGE}' in: {self.config.target_path}"
            )
            result.message = "dry run"
            return result

        try:
            self.execute(result)
        except (ConnectivityError, CachePurgeError) as e:
            logger.warning(f"Kinsta cache purge failed: {e}")
            logger.info("Attempting alternative cache purge method...")
            result.error_code = e.error_code
            if self.upload_fallback_script():
                result.status = StepStatus.DEGRADED
                result.message = (
                    f"Manual execution required: bash "
                    f"{self.remote_script_path}"
                )
            else:
                result.status = StepStatus.FAILED
                result.message = str(e)
            return result

        result.status = StepStatus.SUCCESS
        if not result.message:
            result.message = "Kinsta cache purged"
        logger.info("Kinsta cache purge completed successfully")
        return result

    def execute(self, result: StepResult) -> None:
        """
        Test SSH, check WP-CLI, then run the purge command

        Raises:
            ConnectivityError: If SSH cannot connect
            CachePurgeError: If the purge command exits non-zero
        """
        logger.info("Testing SSH connection...")
        self.shell.test_connection()
        logger.info("SSH connection successful")

        if not self.check_wp_cli():
            result.add_warning("WP-CLI may not be available on the remote server")

        logger.info("Executing WP-CLI cache purge command...")
        if self.config.verbose:
            logger.info(f"Executing SSH command: {self.purge_command}")

        output = self.shell.run(self.purge_command,
                                connect_timeout=SSH_COMMAND_CONNECT_TIMEOUT)

        if self.config.verbose and output.output:
            logger.info("WP-CLI output:")
            for line in output.output.splitlines():
                logger.info(f"  {line}")

        if not output.success:
            for line in (output.output or "").splitlines():
                logger.debug(f"  {line}")
            raise CachePurgeError(
                f"Failed to execute cache purge command (exit code {output.returncode})"
            )

        logger.info("Cache purge command executed successfully")
        if has_success_marker(output.output):
            result.message = "Kinsta cache purged successfully"
        else:
            warning = "Cache purge completed, but success confirmation not found in output"
            logger.warning(warning)
            result.add_warning(warning)

    def check_wp_cli(self) -> bool:
        """WP-CLI availability on the remote host; failure is only a warning"""
        logger.info("Validating WP-CLI availability on remote server...")
        command = f"cd {shlex.quote(self.config.target_path)} && {WP_CLI_VERSION}"
        result = self.shell.run(command, connect_timeout=SSH_TEST_CONNECT_TIMEOUT)

        if result.success and "WP-CLI" in (result.output or ""):
            logger.info("WP-CLI is available on the remote server")
            return True

        logger.warning("WP-CLI may not be available or accessible on the remote server")
        return False

    @property
    def remote_script_path(self) -> str:
        return f"{self.config.target_path.rstrip('/')}/{CACHE_PURGE_SCRIPT_NAME}"

    def render_script(self) -> str:
        return (
            "#!/bin/bash\n"
            f"cd {shlex.quote(self.config.target_path)}\n"
            f"{WP_CLI_CACHE_PURGE}\n"
        )

    def upload_fallback_script(self) -> bool:
        """Upload the purge script for an operator to run by hand"""
        script = write_private_file(
            self.scratch_dir / CACHE_PURGE_SCRIPT_NAME,
            self.render_script(),
            mode=0o700
        )

        try:
            upload = self.fallback_uploader.upload_file(script, self.remote_script_path)
        except DependencyError as e:
            logger.error(f"Failed to upload cache purge script: {e}")
            return False

        if not upload.success:
            logger.error("Failed to upload cache purge script via sFTP")
            return False

        logger.warning(
            "Cache purge script uploaded to server, but automatic execution via sFTP is not supported"
        )
        logger.info(f"Manual execution required: ssh to server and run: bash {self.remote_script_path}")
        return True
