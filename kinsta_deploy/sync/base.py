"""Remote synchronizer abstract base class"""

import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import List, Optional

from ..api.exceptions import TransferError
from ..models.config import DeploymentConfig
from ..models.result import CommandResult
from ..utils.process_utils import CommandRunner, run_command, require_tool, format_command

logger = logging.getLogger(__name__)


class RemoteSynchronizer(ABC):
    """Pushes a local tree to the remote host through a wrapped tool"""

    name: str = ""
    required_tools: List[str] = []

    def __init__(self,
                 config: DeploymentConfig,
                 scratch_dir: Path,
                 runner: Optional[CommandRunner] = None):
        """
        Initialize synchronizer

        Args:
            config: Deployment configuration
            scratch_dir: Per-run directory for generated scripts and logs
            runner: Command runner, defaults to run_command
        """
        self.config = config
        self.scratch_dir = Path(scratch_dir)
        self.runner = runner or run_command

    def check_dependencies(self) -> None:
        """Raise DependencyError for the first missing tool"""
        for tool in self.required_tools:
            require_tool(tool)

    @abstractmethod
    def test_connection(self) -> None:
        """
        Verify the remote session can be opened

        Raises:
            ConnectivityError: If it cannot
        """
        pass

    @abstractmethod
    def build_sync_command(self, source: Path, target: str) -> List[str]:
        """Command that mirrors source into target"""
        pass

    def describe_sync_command(self, source: Path, target: str) -> str:
        """Printable form of the sync command with secrets masked"""
        return format_command(self.build_sync_command(source, target))

    def sync(self, source: Path, target: str, log_path: Path) -> CommandResult:
        """
        Mirror a local directory tree to the remote target

        Args:
            source: Local directory
            target: Remote directory
            log_path: Every output line is written here

        Returns:
            CommandResult of the wrapped tool

        Raises:
            TransferError: If the tool exits non-zero
        """
        cmd = self.build_sync_command(source, target)
        if self.config.verbose:
            logger.info(f"Executing {self.name}: {self.describe_sync_command(source, target)}")

        result = self.runner(cmd, log_path=log_path, env=self.command_env)
        if not result.success:
            raise TransferError(
                f"File synchronization failed ({self.name} exited with {result.returncode})",
                returncode=result.returncode
            )
        return result

    @property
    def command_env(self):
        """Extra environment for the wrapped tool"""
        return None

    @abstractmethod
    def upload_tree(self, local_dir: Path, remote_dir: str,
                    log_path: Optional[Path] = None) -> CommandResult:
        """Copy a local directory's contents into remote_dir"""
        pass

    @abstractmethod
    def upload_file(self, local_file: Path, remote_file: str) -> CommandResult:
        """Copy a single file to the remote host"""
        pass
