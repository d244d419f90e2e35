"""CLI commands"""

from . import deploy
from . import steps
from . import doctor
from . import config

__all__ = [
    "deploy",
    "steps",
    "doctor",
    "config",
]
