"""Remote synchronizers for kinsta-deploy"""

from .base import RemoteSynchronizer
from .ssh import RemoteShell
from .rsync import RsyncSynchronizer
from .lftp import LftpSynchronizer
from .factory import SynchronizerFactory

__all__ = [
    'RemoteSynchronizer',
    'RemoteShell',
    'RsyncSynchronizer',
    'LftpSynchronizer',
    'SynchronizerFactory',
]
