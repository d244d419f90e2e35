"""Operation result models"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Any

from ..constants import StepStatus, InstallStage, StatsSource


@dataclass
class CommandResult:
    """Outcome of one wrapped command"""

    command: List[str]
    returncode: int
    output: str = ""

    @property
    def success(self) -> bool:
        return self.returncode == 0


@dataclass
class TransferStats:
    """Approximate transfer statistics scraped from tool output"""

    files_transferred: int = 0
    bytes_transferred: int = 0
    elapsed_seconds: int = 0
    estimated: bool = True
    source: StatsSource = StatsSource.FALLBACK

    def to_lines(self) -> List[str]:
        """Render the statistics file lines"""
        return [
            f"FILES_TRANSFERRED:{self.files_transferred}",
            f"BYTES_TRANSFERRED:{self.bytes_transferred}",
            f"DEPLOYMENT_TIME:{self.elapsed_seconds}",
            f"STATS_ESTIMATED:{'true' if self.estimated else 'false'}",
        ]


@dataclass
class StepResult:
    """Result of a step whose failure does not fail the deployment"""

    name: str
    status: StepStatus
    message: str = ""
    failed_stage: Optional[InstallStage] = None
    error_code: Optional[str] = None
    warnings: List[str] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return self.status in (StepStatus.SUCCESS, StepStatus.SKIPPED)

    def add_warning(self, message: str) -> None:
        self.warnings.append(message)

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "name": self.name,
            "status": self.status.value,
            "message": self.message,
        }
        if self.failed_stage:
            data["failed_stage"] = self.failed_stage.value
        if self.error_code:
            data["error_code"] = self.error_code
        if self.warnings:
            data["warnings"] = self.warnings
        return data


@dataclass
class DeployResult:
    """Result of a full deployment run"""

    success: bool
    stats: TransferStats = field(default_factory=TransferStats)
    dry_run: bool = False
    transfer_failed_in_dry_run: bool = False
    plugin: Optional[StepResult] = None
    cache: Optional[StepResult] = None
    stats_file: Optional[str] = None
    error: Optional[str] = None

    @property
    def exit_code(self) -> int:
        return 0 if self.success else 1

    @property
    def degraded_steps(self) -> List[StepResult]:
        return [step for step in (self.plugin, self.cache)
                if step is not None and not step.success]

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "success": self.success,
            "dry_run": self.dry_run,
            "files_transferred": self.stats.files_transferred,
            "bytes_transferred": self.stats.bytes_transferred,
            "deployment_time": self.stats.elapsed_seconds,
            "stats_estimated": self.stats.estimated,
        }
        if self.plugin:
            data["plugin"] = self.plugin.to_dict()
        if self.cache:
            data["cache"] = self.cache.to_dict()
        if self.error:
            data["error"] = self.error
        return data
