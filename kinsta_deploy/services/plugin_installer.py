"""Kinsta MU plugin installation service"""

import logging
import re
import shlex
import zipfile
from pathlib import Path
from typing import Optional

import requests

from ..api.exceptions import (
    PluginInstallError,
    DownloadError,
    ArchiveVerificationError,
    ExtractionError,
    UploadError,
)
from ..constants import (
    KINSTA_MU_PLUGIN_URL,
    KINSTA_MU_PLUGIN_ARCHIVE,
    KINSTA_MU_PLUGIN_MARKER,
    DOWNLOAD_TIMEOUT,
    DOWNLOAD_CHUNK_SIZE,
    SSH_TEST_CONNECT_TIMEOUT,
    StepStatus,
)
from ..models.config import DeploymentConfig
from ..models.result import StepResult
from ..sync.base import RemoteSynchronizer
from ..sync.ssh import RemoteShell
from ..utils.file_utils import find_files
from ..utils.formatting import format_size

logger = logging.getLogger(__name__)

# Content types a CDN returns for an error page instead of the archive
REJECTED_CONTENT_TYPES = ("text/html", "text/plain", "application/json")

RSYNC_FILES_TRANSFERRED = re.compile(r'Number of (?:regular )?files transferred:\s*([\d,]+)')


class MuPluginInstaller:
    """Download, verify, extract, upload and validate the MU plugin

    Download, Verify, Extract and Upload each raise their own
    PluginInstallError subtype; install() turns that into a failed
    StepResult carrying the stage. Validate only ever adds a warning.
    """

    STEP_NAME = "mu-plugin"

    def __init__(self,
                 config: DeploymentConfig,
                 synchronizer: RemoteSynchronizer,
                 scratch_dir: Path,
                 shell: Optional[RemoteShell] = None,
                 session: Optional[requests.Session] = None,
                 url: str = KINSTA_MU_PLUGIN_URL):
        self.config = config
        self.synchronizer = synchronizer
        self.work_dir = Path(scratch_dir) / "kinsta-mu-plugin"
        self.shell = shell or RemoteShell(config, synchronizer.runner)
        self._owns_session = session is None
        self.session = session or requests.Session()
        self.url = url

    def install(self) -> StepResult:
        """Run every stage and report the outcome"""
        try:
            return self._install()
        finally:
            if self._owns_session:
                self.session.close()

    def _install(self) -> StepResult:
        result = StepResult(name=self.STEP_NAME, status=StepStatus.SKIPPED)

        if not self.config.install_mu_plugin:
            logger.info("Kinsta MU Plugin installation is disabled")
            result.status = StepStatus.SKIPPED
            result.message = "disabled"
            return result

        remote_dir = self.config.remote_mu_plugin_path
        logger.info("Installing Kinsta MU Plugin...")
        logger.info(f"Full MU Plugin path: {remote_dir}")

        if self.config.dry_run:
            logger.warning(f"DRY RUN: Would install Kinsta MU Plugin to: {remote_dir}")
            result.status = StepStatus.SKIPPED
            result.message = "dry run"
            return result

        try:
            archive, content_type = self.download()
            self.verify(archive, content_type)
            extracted = self.extract(archive)
            self.upload(extracted, remote_dir)
        except PluginInstallError as e:
            logger.warning(f"Kinsta MU Plugin installation failed at {e.stage.value} stage: {e}")
            result.status = StepStatus.FAILED
            result.failed_stage = e.stage
            result.error_code = e.error_code
            result.message = str(e)
            return result

        warning = self.validate(remote_dir)
        if warning:
            result.add_warning(warning)

        result.status = StepStatus.SUCCESS
        result.message = f"Installed to {remote_dir}"
        logger.info("Kinsta MU Plugin installation completed")
        return result

    def download(self):
        """
        Fetch the archive into the work directory

        Returns:
            Tuple of (archive path, response content type)

        Raises:
            DownloadError: On any HTTP or write failure
        """
        self.work_dir.mkdir(parents=True, exist_ok=True)
        archive = self.work_dir / KINSTA_MU_PLUGIN_ARCHIVE

        logger.info(f"Downloading Kinsta MU Plugin from: {self.url}")
        try:
            with self.session.get(self.url, stream=True, timeout=DOWNLOAD_TIMEOUT,
                                  allow_redirects=True) as response:
                response.raise_for_status()
                content_type = response.headers.get("Content-Type", "")
                with open(archive, 'wb') as f:
                    for chunk in response.iter_content(chunk_size=DOWNLOAD_CHUNK_SIZE):
                        if chunk:
                            f.write(chunk)
        except requests.RequestException as e:
            raise DownloadError(f"Failed to download Kinsta MU Plugin: {e}")
        except OSError as e:
            raise DownloadError(f"Failed to save Kinsta MU Plugin archive: {e}")

        logger.info("Kinsta MU Plugin downloaded successfully")
        return archive, content_type

    def verify(self, archive: Path, content_type: str = "") -> None:
        """
        Check the download is a non-empty ZIP archive

        Raises:
            ArchiveVerificationError: If it is not
        """
        if not archive.is_file():
            raise ArchiveVerificationError("Downloaded file not found")

        media_type = content_type.split(';')[0].strip().lower()
        if media_type in REJECTED_CONTENT_TYPES:
            raise ArchiveVerificationError(
                f"Download returned {media_type} instead of a ZIP archive"
            )

        size = archive.stat().st_size
        if size == 0:
            raise ArchiveVerificationError("Downloaded file is empty")

        if not zipfile.is_zipfile(archive):
            raise ArchiveVerificationError("Downloaded file is not a valid ZIP archive")

        logger.info(f"Downloaded ZIP file size: {size} bytes ({format_size(size)})")

    def extract(self, archive: Path) -> Path:
        """
        Unpack the archive into its own directory

        Raises:
            ExtractionError: On a corrupt archive or unsafe member path
        """
        target = self.work_dir / "extracted"
        target.mkdir(parents=True, exist_ok=True)
        root = target.resolve()

        logger.info("Extracting Kinsta MU Plugin...")
        try:
            with zipfile.ZipFile(archive) as zf:
                for member in zf.namelist():
                    destination = (target / member).resolve()
                    if destination != root and root not in destination.parents:
                        raise ExtractionError(f"Archive member escapes extraction dir: {member}")
                zf.extractall(target)
        except (zipfile.BadZipFile, zipfile.LargeZipFile, OSError,
                RuntimeError, NotImplementedError) as e:
            # RuntimeError: encrypted member; NotImplementedError: unsupported compression
            raise ExtractionError(f"Failed to extract Kinsta MU Plugin: {e}")

        logger.info("Kinsta MU Plugin extracted successfully")

        if self.config.verbose:
            logger.info("Extracted contents:")
            for php_file in find_files(target, "*.php", limit=10):
                logger.info(f"  {php_file.relative_to(target)}")

        return target

    def upload(self, extracted: Path, remote_dir: str) -> int:
        """
        Push the extracted tree with the configured synchronizer

        Returns:
            Number of uploaded files (from tool output, else local count)

        Raises:
            UploadError: If the transfer fails
        """
        logger.info(f"Installing MU Plugin files via {self.synchronizer.name}...")
        log_path = self.work_dir / "upload_output.log"

        result = self.synchronizer.upload_tree(extracted, remote_dir, log_path=log_path)
        if not result.success:
            raise UploadError(
                f"Failed to install MU Plugin via {self.synchronizer.name} "
                f"(exit code {result.returncode})"
            )

        match = RSYNC_FILES_TRANSFERRED.search(result.output or "")
        if match:
            uploaded = int(match.group(1).replace(',', ''))
        else:
            uploaded = len(find_files(extracted, "*"))

        logger.info(f"Uploaded {uploaded} MU Plugin files")
        return uploaded

    def validate(self, remote_dir: str) -> Optional[str]:
        """
        Look for the plugin files on the remote host

        Returns:
            Warning message, or None when the plugin was found
        """
        logger.info("Validating MU Plugin installation...")
        quoted = shlex.quote(remote_dir.rstrip('/'))
        check = (f"ls -la {quoted}/kinsta-mu-plugins.php "
                 f"{quoted}/kinsta-mu-plugins/ 2>/dev/null")

        result = self.shell.run(check, connect_timeout=SSH_TEST_CONNECT_TIMEOUT)
        if KINSTA_MU_PLUGIN_MARKER in (result.output or ""):
            logger.info("MU Plugin installation validated successfully")
            return None

        message = "Could not validate MU Plugin installation - files may not be accessible via SSH"
        logger.warning(message)
        return message
