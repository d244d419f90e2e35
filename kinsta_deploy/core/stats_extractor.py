"""Best-effort transfer statistics from wrapped tool output

The text formats of rsync and lftp are not a stable contract, so every
number produced here is advisory. Each transport has a primary and a
secondary pattern set; when both miss, bytes fall back to the size of the
source tree and files fall back to zero. Anything other than a primary
match is flagged as estimated.
"""

import logging
import re
from pathlib import Path
from typing import Dict, Optional, Type

from ..constants import StatsSource, TransferMethod
from ..models.result import TransferStats
from ..utils.file_utils import get_directory_size

logger = logging.getLogger(__name__)

_NUMBER = r'(\d+(?:,\d{3})*)'


def _to_int(text: str) -> int:
    return int(text.replace(',', ''))


def _search_int(pattern: re.Pattern, output: str) -> Optional[int]:
    match = pattern.search(output)
    if match:
        return _to_int(match.group(1))
    return None


class StatsExtractor:
    """Base extractor, subclasses supply the per-tool patterns"""

    def primary_files(self, output: str) -> Optional[int]:
        return None

    def primary_bytes(self, output: str) -> Optional[int]:
        return None

    def secondary_files(self, output: str) -> Optional[int]:
        return None

    def secondary_bytes(self, output: str) -> Optional[int]:
        return None

    def extract(self,
                output: str,
                source_path: Path,
                dry_run: bool = False,
                elapsed_seconds: int = 0) -> TransferStats:
        """
        Recover file and byte counts from tool output

        Args:
            output: Combined stdout/stderr of the transfer tool
            source_path: Local tree used for the size fallback
            dry_run: Never report scraped counts for a dry run
            elapsed_seconds: Carried into the result

        Returns:
            TransferStats
        """
        if dry_run:
            return TransferStats(
                files_transferred=0,
                bytes_transferred=get_directory_size(Path(source_path)),
                elapsed_seconds=elapsed_seconds,
                estimated=True,
                source=StatsSource.DRY_RUN
            )

        output = output or ""

        files, files_source = self._first_match(
            self.primary_files, self.secondary_files, output
        )
        if files is None:
            files = 0

        size, bytes_source = self._first_match(
            self.primary_bytes, self.secondary_bytes, output
        )
        if size is None:
            logger.debug("No byte count in transfer output, using source tree size")
            size = get_directory_size(Path(source_path))

        # The weaker of the two sources describes the result
        order = [StatsSource.PRIMARY, StatsSource.SECONDARY, StatsSource.FALLBACK]
        source = max(files_source, bytes_source, key=order.index)

        return TransferStats(
            files_transferred=files,
            bytes_transferred=size,
            elapsed_seconds=elapsed_seconds,
            estimated=source != StatsSource.PRIMARY,
            source=source
        )

    @staticmethod
    def _first_match(primary, secondary, output: str):
        value = primary(output)
        if value is not None:
            return value, StatsSource.PRIMARY
        value = secondary(output)
        if value is not None:
            return value, StatsSource.SECONDARY
        return None, StatsSource.FALLBACK


class RsyncStatsExtractor(StatsExtractor):
    """Reads the --stats summary, else the verbose file list"""

    FILES_TRANSFERRED = re.compile(
        r'Number of (?:regular )?files transferred:\s*' + _NUMBER
    )
    BYTES_TRANSFERRED = re.compile(
        r'Total transferred file size:\s*' + _NUMBER + r'\s*bytes'
    )
    BYTES_SENT = re.compile(r'^sent\s+' + _NUMBER + r'\s+bytes', re.MULTILINE)
    FILE_LIST_START = "sending incremental file list"

    def primary_files(self, output: str) -> Optional[int]:
        return _search_int(self.FILES_TRANSFERRED, output)

    def primary_bytes(self, output: str) -> Optional[int]:
        return _search_int(self.BYTES_TRANSFERRED, output)

    def secondary_files(self, output: str) -> Optional[int]:
        """Count entries of the verbose file list, skipping directories"""
        lines = output.splitlines()
        try:
            start = next(i for i, line in enumerate(lines)
                         if line.strip() == self.FILE_LIST_START)
        except StopIteration:
            return None

        count = 0
        for line in lines[start + 1:]:
            entry = line.strip()
            if not entry:
                break
            if entry.endswith('/') or entry.startswith('deleting ') or entry == './':
                continue
            # --progress lines carry a percentage column
            if re.match(r'^\d[\d,]*\s+\d+%', entry):
                continue
            count += 1
        return count

    def secondary_bytes(self, output: str) -> Optional[int]:
        return _search_int(self.BYTES_SENT, output)


class LftpStatsExtractor(StatsExtractor):
    """Reads the mirror summary, else counts transfer lines"""

    NEW_FILES = re.compile(r'^New:\s*' + _NUMBER + r'\s+files?', re.MULTILINE)
    MODIFIED_FILES = re.compile(r'^Modified:\s*' + _NUMBER + r'\s+files?', re.MULTILINE)
    BYTES_TRANSFERRED = re.compile(_NUMBER + r'\s+bytes transferred')
    TRANSFER_LINE = re.compile(r'^Transferring file', re.MULTILINE)

    def primary_files(self, output: str) -> Optional[int]:
        new = _search_int(self.NEW_FILES, output)
        modified = _search_int(self.MODIFIED_FILES, output)
        if new is None and modified is None:
            return None
        return (new or 0) + (modified or 0)

    def primary_bytes(self, output: str) -> Optional[int]:
        return _search_int(self.BYTES_TRANSFERRED, output)

    def secondary_files(self, output: str) -> Optional[int]:
        count = len(self.TRANSFER_LINE.findall(output))
        return count if count else None


_EXTRACTORS: Dict[str, Type[StatsExtractor]] = {
    TransferMethod.RSYNC.value: RsyncStatsExtractor,
    TransferMethod.LFTP.value: LftpStatsExtractor,
}


def get_stats_extractor(transfer_method: str) -> StatsExtractor:
    """Extractor matching a transfer method name"""
    try:
        return _EXTRACTORS[transfer_method]()
    except KeyError:
        raise ValueError(f"No statistics extractor for transfer method: {transfer_method}")
