"""Core functionality for kinsta-deploy"""

from .config_loader import load_config, load_config_file, parse_bool, find_missing
from .stats_extractor import (
    StatsExtractor,
    RsyncStatsExtractor,
    LftpStatsExtractor,
    get_stats_extractor,
)
from .stats_writer import write_stats_file, read_stats_file

__all__ = [
    "load_config",
    "load_config_file",
    "parse_bool",
    "find_missing",
    "StatsExtractor",
    "RsyncStatsExtractor",
    "LftpStatsExtractor",
    "get_stats_extractor",
    "write_stats_file",
    "read_stats_file",
]
