"""Exception definitions for kinsta-deploy"""

from typing import List, Optional

from ..constants import ErrorCode, InstallStage


class DeployToolError(Exception):
    """Base exception for kinsta-deploy"""

    def __init__(self, message: str, error_code: str = None):
        super().__init__(message)
        self.error_code = error_code


class ConfigurationError(DeployToolError):
    """Required configuration is missing or invalid"""

    def __init__(self, message: str = None, missing: Optional[List[str]] = None,
                 error_code: str = None):
        self.missing = list(missing or [])
        if message is None:
            message = f"Missing required environment variables: {' '.join(self.missing)}"
        if error_code is None:
            error_code = ErrorCode.CONFIG_MISSING if self.missing else ErrorCode.CONFIG_INVALID
        super().__init__(message, error_code)


class DependencyError(ConfigurationError):
    """A wrapped command-line tool is not installed"""

    def __init__(self, tool: str, hint: str = None):
        message = f"Required tool not found on PATH: {tool}"
        if hint:
            message = f"{message} ({hint})"
        super().__init__(message, error_code=ErrorCode.DEPENDENCY_MISSING)
        self.tool = tool


class SourceNotFoundError(DeployToolError):
    """Local source directory does not exist"""

    def __init__(self, source_path: str):
        super().__init__(f"Source directory '{source_path}' does not exist",
                         ErrorCode.SOURCE_NOT_FOUND)
        self.source_path = source_path


class ConnectivityError(DeployToolError):
    """SSH or SFTP session could not be established"""

    def __init__(self, message: str):
        super().__init__(message, ErrorCode.CONNECTION_FAILED)


class TransferError(DeployToolError):
    """Synchronization subprocess returned non-zero"""

    def __init__(self, message: str, returncode: int = None):
        super().__init__(message, ErrorCode.TRANSFER_FAILED)
        self.returncode = returncode


class DegradedStepError(DeployToolError):
    """Failure of a step the deployment tolerates"""
    pass


class PluginInstallError(DegradedStepError):
    """MU plugin installation failed at a given stage"""

    stage: InstallStage = None

    def __init__(self, message: str, error_code: str = None):
        super().__init__(message, error_code)


class DownloadError(PluginInstallError):
    stage = InstallStage.DOWNLOAD

    def __init__(self, message: str):
        super().__init__(message, ErrorCode.PLUGIN_DOWNLOAD_FAILED)


class ArchiveVerificationError(PluginInstallError):
    stage = InstallStage.VERIFY

    def __init__(self, message: str):
        super().__init__(message, ErrorCode.PLUGIN_NOT_ARCHIVE)


class ExtractionError(PluginInstallError):
    stage = InstallStage.EXTRACT

    def __init__(self, message: str):
        super().__init__(message, ErrorCode.PLUGIN_EXTRACT_FAILED)


class UploadError(PluginInstallError):
    stage = InstallStage.UPLOAD

    def __init__(self, message: str):
        super().__init__(message, ErrorCode.PLUGIN_UPLOAD_FAILED)


class CachePurgeError(DegradedStepError):
    """Remote cache purge command failed"""

    def __init__(self, message: str):
        super().__init__(message, ErrorCode.CACHE_PURGE_FAILED)
