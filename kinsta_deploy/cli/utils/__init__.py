"""CLI utility functions"""

from .output import (
    console,
    format_deploy_result,
    format_step_result,
    format_yaml,
    print_error,
    print_warning,
)

__all__ = [
    'console',
    'format_deploy_result',
    'format_step_result',
    'format_yaml',
    'print_error',
    'print_warning',
]
