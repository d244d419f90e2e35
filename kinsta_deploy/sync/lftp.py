"""lftp over SFTP synchronizer"""

import logging
from pathlib import Path
from typing import List, Optional
from urllib.parse import quote

from .base import RemoteSynchronizer
from ..api.exceptions import ConnectivityError
from ..constants import (
    SSH_OPTIONS,
    LFTP_NET_TIMEOUT,
    LFTP_MAX_RETRIES,
    LFTP_RECONNECT_INTERVAL,
    LFTP_PARALLEL,
    TransferMethod,
)
from ..models.result import CommandResult
from ..utils.file_utils import write_private_file

logger = logging.getLogger(__name__)

MASKED_PASSWORD = "********"


def lftp_quote(value: str) -> str:
    """Double-quote an argument for the lftp command language"""
    escaped = str(value).replace('\\', '\\\\').replace('"', '\\"')
    return f'"{escaped}"'


class LftpSynchronizer(RemoteSynchronizer):
    """
    Mirror with lftp driven by a generated command script.

    Uses an only-newer policy with parallel connections. Remote files
    absent locally are left in place. Scripts contain the password, so
    they are written with owner-only permissions inside the scratch dir.
    """

    name = TransferMethod.LFTP.value
    required_tools = ['lftp', 'ssh']

    def _open_url(self, mask_password: bool = False) -> str:
        password = MASKED_PASSWORD if mask_password else quote(self.config.password, safe='')
        user = quote(self.config.username, safe='')
        return f"sftp://{user}:{password}@{self.config.host}:{self.config.port}"

    def _session_header(self, mask_password: bool = False) -> List[str]:
        connect_program = ' '.join(['ssh', '-a', '-x', *SSH_OPTIONS])
        lines = [
            "set sftp:auto-confirm yes",
            f'set sftp:connect-program "{connect_program}"',
            f"set net:timeout {LFTP_NET_TIMEOUT}",
            f"set net:max-retries {LFTP_MAX_RETRIES}",
            f"set net:reconnect-interval-base {LFTP_RECONNECT_INTERVAL}",
            f"open {self._open_url(mask_password)}",
        ]
        if self.config.verbose:
            lines.append("set cmd:verbose yes")
        return lines

    def _run_script(self, script_name: str, lines: List[str],
                    log_path: Optional[Path] = None) -> CommandResult:
        script_path = write_private_file(
            self.scratch_dir / script_name,
            "\n".join(lines + ["quit"]) + "\n"
        )
        return self.runner(['lftp', '-f', str(script_path)], log_path=log_path)

    def test_connection(self) -> None:
        result = self._run_script("lftp_check.txt", self._session_header() + ["ls >/dev/null"])
        if not result.success:
            logger.debug(result.output.strip())
            raise ConnectivityError(
                f"Failed to connect to Kinsta sFTP server {self.config.host}:{self.config.port}"
            )

    def render_sync_script(self, source: Path, target: str,
                           mask_password: bool = False) -> str:
        mirror = [
            "mirror", "-R",
            f"--verbose={3 if self.config.verbose else 1}",
            "--only-newer",
            "--no-empty-dirs",
            f"--parallel={LFTP_PARALLEL}",
        ]
        if self.config.dry_run:
            mirror.append("--dry-run")
        mirror.extend(lftp_quote(flag) for flag in self.config.exclude_patterns.lftp_flags())
        mirror.extend([".", "."])

        lines = self._session_header(mask_password)
        lines.extend([
            f"cd {lftp_quote(target)}",
            f"lcd {lftp_quote(source)}",
            " ".join(mirror),
        ])
        return "\n".join(lines + ["quit"]) + "\n"

    def build_sync_command(self, source: Path, target: str) -> List[str]:
        script_path = write_private_file(
            self.scratch_dir / "lftp_script.txt",
            self.render_sync_script(source, target)
        )
        return ['lftp', '-f', str(script_path)]

    def describe_sync_command(self, source: Path, target: str) -> str:
        return self.render_sync_script(source, target, mask_password=True)

    def upload_tree(self, local_dir: Path, remote_dir: str,
                    log_path: Optional[Path] = None) -> CommandResult:
        verbose = 3 if self.config.verbose else 1
        lines = self._session_header() + [
            f"mkdir -p -f {lftp_quote(remote_dir)}",
            f"mirror -R --verbose={verbose} {lftp_quote(local_dir)} {lftp_quote(remote_dir)}",
        ]
        return self._run_script("lftp_upload_tree.txt", lines, log_path)

    def upload_file(self, local_file: Path, remote_file: str) -> CommandResult:
        lines = self._session_header() + [
            f"put {lftp_quote(local_file)} -o {lftp_quote(remote_file)}",
        ]
        return self._run_script("lftp_upload_file.txt", lines)
