"""CLI decorators"""

from .config import config_option, load_cli_config

__all__ = [
    'config_option',
    'load_cli_config',
]
