"""SSH command construction shared by the rsync pathway and remote steps"""

import logging
import shlex
import shutil
from typing import Dict, List, Optional

from ..api.exceptions import ConnectivityError
from ..constants import (
    SSH_OPTIONS,
    SSH_TEST_CONNECT_TIMEOUT,
    SSH_COMMAND_CONNECT_TIMEOUT,
)
from ..models.config import DeploymentConfig
from ..models.result import CommandResult
from ..utils.process_utils import CommandRunner, run_command

logger = logging.getLogger(__name__)


class RemoteShell:
    """Runs commands on the Kinsta host over ssh

    When a password is configured and sshpass is installed, commands are
    wrapped in ``sshpass -e`` and the password travels in the SSHPASS
    environment variable. Otherwise ssh runs in batch mode so a missing key
    fails fast instead of waiting on a prompt.
    """

    def __init__(self, config: DeploymentConfig, runner: CommandRunner = None):
        self.config = config
        self.runner = runner or run_command
        self.use_sshpass = bool(config.password) and shutil.which('sshpass') is not None

    @property
    def env(self) -> Optional[Dict[str, str]]:
        if self.use_sshpass:
            return {'SSHPASS': self.config.password}
        return None

    def transport(self, connect_timeout: Optional[int] = None) -> List[str]:
        """ssh invocation without destination, as used by rsync -e"""
        cmd = ['ssh', *SSH_OPTIONS]
        if not self.use_sshpass:
            cmd.extend(['-o', 'BatchMode=yes'])
        if connect_timeout:
            cmd.extend(['-o', f'ConnectTimeout={connect_timeout}'])
        cmd.extend(['-p', str(self.config.port)])
        return cmd

    def transport_string(self, connect_timeout: Optional[int] = None) -> str:
        return ' '.join(self.transport(connect_timeout))

    def wrap(self, cmd: List[str]) -> List[str]:
        """Prefix a command with sshpass when password auth is in use"""
        if self.use_sshpass:
            return ['sshpass', '-e', *cmd]
        return cmd

    def build_command(self, remote_command: str,
                      connect_timeout: Optional[int] = SSH_COMMAND_CONNECT_TIMEOUT) -> List[str]:
        return self.wrap([
            *self.transport(connect_timeout),
            self.config.ssh_destination,
            remote_command,
        ])

    def run(self, remote_command: str,
            connect_timeout: Optional[int] = SSH_COMMAND_CONNECT_TIMEOUT,
            timeout: Optional[int] = None) -> CommandResult:
        """Execute a command string on the remote host"""
        cmd = self.build_command(remote_command, connect_timeout)
        kwargs = {'env': self.env}
        if timeout is not None:
            kwargs['timeout'] = timeout
        return self.runner(cmd, **kwargs)

    def test_connection(self) -> None:
        """
        Open a session and echo a marker

        Raises:
            ConnectivityError: If the session cannot be established
        """
        result = self.run('echo "SSH connection successful"',
                          connect_timeout=SSH_TEST_CONNECT_TIMEOUT,
                          timeout=SSH_TEST_CONNECT_TIMEOUT * 6)
        if not result.success:
            logger.debug(result.output.strip())
            raise ConnectivityError(
                f"Failed to connect to {self.config.host}:{self.config.port} over SSH"
            )

    def make_directory(self, remote_dir: str) -> bool:
        """mkdir -p on the remote host, False on failure"""
        result = self.run(f"mkdir -p {shlex.quote(remote_dir)}")
        return result.success
