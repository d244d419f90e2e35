"""rsync over SSH synchronizer"""

import logging
from pathlib import Path
from typing import List, Optional

from .base import RemoteSynchronizer
from .ssh import RemoteShell
from ..constants import RSYNC_TIMEOUT, TransferMethod
from ..models.config import DeploymentConfig
from ..models.result import CommandResult
from ..utils.process_utils import CommandRunner

logger = logging.getLogger(__name__)


class RsyncSynchronizer(RemoteSynchronizer):
    """
    Delta transfer with rsync, ssh as the remote shell.

    Files are skipped when size and modification time match, remote files
    missing locally are deleted, and --stats is always requested so the
    summary block is available for statistics.
    """

    name = TransferMethod.RSYNC.value
    required_tools = ['rsync', 'ssh']

    def __init__(self,
                 config: DeploymentConfig,
                 scratch_dir: Path,
                 runner: Optional[CommandRunner] = None):
        super().__init__(config, scratch_dir, runner)
        self.shell = RemoteShell(config, self.runner)

    @property
    def command_env(self):
        return self.shell.env

    def test_connection(self) -> None:
        self.shell.test_connection()

    def _base_options(self) -> List[str]:
        return [
            '-avz',
            f'--timeout={RSYNC_TIMEOUT}',
            '-e', self.shell.transport_string(),
        ]

    def build_sync_command(self, source: Path, target: str) -> List[str]:
        opts = ['rsync', *self._base_options()]
        opts.extend(['--update', '--delete', '--stats'])

        if self.config.verbose:
            opts.append('--progress')

        if self.config.dry_run:
            opts.append('--dry-run')

        opts.extend(self.config.exclude_patterns.rsync_flags())

        # Trailing slash copies the directory contents, not the directory
        opts.append(f"{str(source).rstrip('/')}/")
        opts.append(f"{self.config.ssh_destination}:{target}")

        return self.shell.wrap(opts)

    def upload_tree(self, local_dir: Path, remote_dir: str,
                    log_path: Optional[Path] = None) -> CommandResult:
        if self.shell.make_directory(remote_dir):
            logger.info("Remote directory created/verified")
        else:
            logger.warning("Could not create remote directory, rsync will attempt to create it")

        opts = ['rsync', *self._base_options()]
        if self.config.verbose:
            opts.extend(['--progress', '--stats'])
        else:
            opts.append('--quiet')

        opts.append(f"{str(local_dir).rstrip('/')}/")
        opts.append(f"{self.config.ssh_destination}:{remote_dir.rstrip('/')}/")

        return self.runner(self.shell.wrap(opts), log_path=log_path, env=self.command_env)

    def upload_file(self, local_file: Path, remote_file: str) -> CommandResult:
        opts = ['rsync', *self._base_options(), '--quiet',
                str(local_file), f"{self.config.ssh_destination}:{remote_file}"]
        return self.runner(self.shell.wrap(opts), env=self.command_env)
