"""Statistics handoff file read by the calling workflow"""

from pathlib import Path
from typing import Dict, Union

from ..models.result import TransferStats


def write_stats_file(stats: TransferStats, path: Union[str, Path]) -> Path:
    """
    Write one KEY:value line per statistic

    The first three lines are FILES_TRANSFERRED, BYTES_TRANSFERRED and
    DEPLOYMENT_TIME; STATS_ESTIMATED follows.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text("\n".join(stats.to_lines()) + "\n", encoding='utf-8')
    return path


def read_stats_file(path: Union[str, Path]) -> Dict[str, str]:
    """Parse a statistics file back into a dict"""
    values = {}
    for line in Path(path).read_text(encoding='utf-8').splitlines():
        if ':' in line:
            key, value = line.split(':', 1)
            values[key.strip()] = value.strip()
    return values
