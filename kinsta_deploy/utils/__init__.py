"""Utility functions for kinsta-deploy"""

from .file_utils import (
    get_directory_size,
    scan_directory,
    find_files,
    write_private_file,
    safe_remove,
)

from .formatting import (
    format_size,
    format_duration,
    pluralize,
)

from .process_utils import (
    CommandRunner,
    run_command,
    require_tool,
    format_command,
)

__all__ = [
    # File utilities
    "get_directory_size",
    "scan_directory",
    "find_files",
    "write_private_file",
    "safe_remove",

    # Formatting utilities
    "format_size",
    "format_duration",
    "pluralize",

    # Process utilities
    "CommandRunner",
    "run_command",
    "require_tool",
    "format_command",
]
