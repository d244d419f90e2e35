"""Configuration data models"""

from dataclasses import dataclass, field
from typing import Dict, List, Any, Tuple

from ..constants import (
    DEFAULT_SOURCE_PATH,
    DEFAULT_EXCLUDE_PATTERNS,
    DEFAULT_MU_PLUGIN_PATH,
    DEFAULT_STATS_FILE,
    DEFAULT_TRANSFER_METHOD,
)


@dataclass(frozen=True)
class ExcludePatternList:
    """Ordered glob patterns excluded from synchronization

    Glob semantics belong to the wrapped tool; this class only renders
    the per-tool flags.
    """

    patterns: Tuple[str, ...] = ()

    @classmethod
    def parse(cls, value: str) -> 'ExcludePatternList':
        """Parse a comma-separated pattern list

        Entries are trimmed and empty entries dropped; order is preserved.
        """
        if not value:
            return cls()
        patterns = tuple(p.strip() for p in value.split(',') if p.strip())
        return cls(patterns)

    def rsync_flags(self) -> List[str]:
        return [f"--exclude={pattern}" for pattern in self.patterns]

    def lftp_flags(self) -> List[str]:
        return [f"--exclude-glob={pattern}" for pattern in self.patterns]

    def __iter__(self):
        return iter(self.patterns)

    def __len__(self) -> int:
        return len(self.patterns)

    def __str__(self) -> str:
        return ",".join(self.patterns)


@dataclass(frozen=True)
class DeploymentConfig:
    """Complete configuration for one deployment run"""

    host: str
    username: str
    password: str = field(repr=False)
    port: int
    target_path: str

    source_path: str = DEFAULT_SOURCE_PATH
    exclude_patterns: ExcludePatternList = field(
        default_factory=lambda: ExcludePatternList.parse(DEFAULT_EXCLUDE_PATTERNS)
    )
    dry_run: bool = False
    verbose: bool = False
    install_mu_plugin: bool = True
    mu_plugin_path: str = DEFAULT_MU_PLUGIN_PATH
    purge_cache: bool = True

    transfer_method: str = DEFAULT_TRANSFER_METHOD
    stats_file: str = DEFAULT_STATS_FILE

    @property
    def remote_mu_plugin_path(self) -> str:
        """Full remote directory of the MU plugin"""
        return f"{self.target_path.rstrip('/')}/{self.mu_plugin_path.strip('/')}"

    @property
    def ssh_destination(self) -> str:
        return f"{self.username}@{self.host}"

    def to_dict(self, mask_secrets: bool = True) -> Dict[str, Any]:
        """Convert to dictionary"""
        return {
            "host": self.host,
            "username": self.username,
            "password": "********" if mask_secrets else self.password,
            "port": self.port,
            "target_path": self.target_path,
            "source_path": self.source_path,
            "exclude_patterns": list(self.exclude_patterns),
            "dry_run": self.dry_run,
            "verbose": self.verbose,
            "install_mu_plugin": self.install_mu_plugin,
            "mu_plugin_path": self.mu_plugin_path,
            "purge_cache": self.purge_cache,
            "transfer_method": self.transfer_method,
            "stats_file": self.stats_file,
        }
