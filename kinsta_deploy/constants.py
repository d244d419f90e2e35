"""Global constants for kinsta-deploy"""

from enum import Enum

APP_NAME = "kinsta-deploy"
LOG_FORMAT = "%(message)s"

# Environment variables
ENV_HOST_IP = "KINSTA_HOST_IP"
ENV_USERNAME = "KINSTA_USERNAME"
ENV_PASSWORD = "KINSTA_PASSWORD"
ENV_PORT = "KINSTA_PORT"
ENV_TARGET_PATH = "TARGET_PATH"
ENV_SOURCE_PATH = "SOURCE_PATH"
ENV_EXCLUDE_PATTERNS = "EXCLUDE_PATTERNS"
ENV_DRY_RUN = "DRY_RUN"
ENV_VERBOSE = "VERBOSE"
ENV_INSTALL_MU_PLUGIN = "INSTALL_KINSTA_MU_PLUGIN"
ENV_MU_PLUGIN_PATH = "KINSTA_MU_PLUGIN_PATH"
ENV_PURGE_CACHE = "PURGE_KINSTA_CACHE"
ENV_TRANSFER_METHOD = "TRANSFER_METHOD"
ENV_STATS_FILE = "DEPLOYMENT_STATS_FILE"

# Checked in this order so the missing list is stable
REQUIRED_ENV_VARS = [
    ENV_HOST_IP,
    ENV_USERNAME,
    ENV_PASSWORD,
    ENV_PORT,
    ENV_TARGET_PATH,
]

# Default configuration values
DEFAULT_SOURCE_PATH = "."
DEFAULT_EXCLUDE_PATTERNS = ".git,.github,node_modules,.env,.DS_Store,*.log"
DEFAULT_MU_PLUGIN_PATH = "wp-content/mu-plugins"
DEFAULT_STATS_FILE = "/tmp/deployment_stats.txt"
DEFAULT_TRANSFER_METHOD = "rsync"

# Kinsta MU plugin
KINSTA_MU_PLUGIN_URL = "https://kinsta.com/kinsta-tools/kinsta-mu-plugins.zip"
KINSTA_MU_PLUGIN_ARCHIVE = "kinsta-mu-plugins.zip"
KINSTA_MU_PLUGIN_MARKER = "kinsta-mu-plugins"
DOWNLOAD_TIMEOUT = 60  # seconds
DOWNLOAD_CHUNK_SIZE = 64 * 1024

# Remote cache management
WP_CLI_CACHE_PURGE = "wp kinsta cache purge --all"
WP_CLI_VERSION = "wp --version"
CACHE_PURGE_SCRIPT_NAME = "wp_cache_purge.sh"
CACHE_PURGE_SUCCESS_MARKERS = ("success", "purged", "cleared", "flushed")

# Tool timeouts, passed to the wrapped binaries
RSYNC_TIMEOUT = 300
SSH_TEST_CONNECT_TIMEOUT = 10
SSH_COMMAND_CONNECT_TIMEOUT = 30
SSH_OPTIONS = [
    "-o", "StrictHostKeyChecking=no",
    "-o", "UserKnownHostsFile=/dev/null",
]
LFTP_NET_TIMEOUT = 30
LFTP_MAX_RETRIES = 3
LFTP_RECONNECT_INTERVAL = 5
LFTP_PARALLEL = 3

# Upper bound for blocking subprocess calls that have no tool-level timeout
SUBPROCESS_TIMEOUT = 3600

# Scratch directory prefix for a single run
SCRATCH_PREFIX = "kinsta-deploy-"


class TransferMethod(Enum):
    RSYNC = "rsync"
    LFTP = "lftp"


class StepStatus(Enum):
    SUCCESS = "success"
    FAILED = "failed"
    SKIPPED = "skipped"
    DEGRADED = "degraded"


class InstallStage(Enum):
    DOWNLOAD = "download"
    VERIFY = "verify"
    EXTRACT = "extract"
    UPLOAD = "upload"


class StatsSource(Enum):
    PRIMARY = "primary"
    SECONDARY = "secondary"
    FALLBACK = "fallback"
    DRY_RUN = "dry_run"


# Error codes
class ErrorCode:
    CONFIG_MISSING = "KD001"
    CONFIG_INVALID = "KD002"
    DEPENDENCY_MISSING = "KD003"
    SOURCE_NOT_FOUND = "KD004"
    CONNECTION_FAILED = "KD005"
    TRANSFER_FAILED = "KD006"
    PLUGIN_DOWNLOAD_FAILED = "KD010"
    PLUGIN_NOT_ARCHIVE = "KD011"
    PLUGIN_EXTRACT_FAILED = "KD012"
    PLUGIN_UPLOAD_FAILED = "KD013"
    CACHE_PURGE_FAILED = "KD020"


# Display constants
EMOJI_SUCCESS = "✓"
EMOJI_ERROR = "✗"
EMOJI_WARNING = "⚠"
