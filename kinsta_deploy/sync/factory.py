"""Remote synchronizer factory"""

from pathlib import Path
from typing import Dict, Optional, Type

from .base import RemoteSynchronizer
from .rsync import RsyncSynchronizer
from .lftp import LftpSynchronizer
from ..constants import TransferMethod
from ..models.config import DeploymentConfig
from ..utils.process_utils import CommandRunner


class SynchronizerFactory:
    """Factory for creating synchronizer instances"""

    # Registry of transfer methods
    _synchronizers: Dict[TransferMethod, Type[RemoteSynchronizer]] = {
        TransferMethod.RSYNC: RsyncSynchronizer,
        TransferMethod.LFTP: LftpSynchronizer,
    }

    @classmethod
    def create(cls,
               config: DeploymentConfig,
               scratch_dir: Path,
               method: Optional[str] = None,
               runner: Optional[CommandRunner] = None) -> RemoteSynchronizer:
        """Create the synchronizer for a transfer method

        Args:
            config: Deployment configuration
            scratch_dir: Per-run scratch directory
            method: Transfer method name, defaults to config.transfer_method
            runner: Optional command runner

        Returns:
            Synchronizer instance

        Raises:
            ValueError: If the method is not supported
        """
        name = method or config.transfer_method
        try:
            method_enum = TransferMethod(name)
        except ValueError:
            raise ValueError(f"Invalid transfer method: {name}")

        if method_enum not in cls._synchronizers:
            raise ValueError(f"Unsupported transfer method: {name}")

        return cls._synchronizers[method_enum](config, scratch_dir, runner)

    @classmethod
    def get_synchronizer_class(cls, method: str) -> Type[RemoteSynchronizer]:
        """Registered class for a transfer method name"""
        try:
            return cls._synchronizers[TransferMethod(method)]
        except (ValueError, KeyError):
            raise ValueError(f"Unsupported transfer method: {method}")

    @classmethod
    def get_supported_methods(cls) -> list[str]:
        return [m.value for m in cls._synchronizers.keys()]
