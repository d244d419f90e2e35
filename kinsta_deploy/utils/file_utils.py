"""File operation utilities"""

import fnmatch
import os
import shutil
from pathlib import Path
from typing import Iterable, List, Optional


def get_directory_size(directory: Path) -> int:
    """
    Total size in bytes of all regular files under a directory

    Args:
        directory: Directory path

    Returns:
        Size in bytes, 0 if the directory does not exist
    """
    if not directory.is_dir():
        return 0

    total = 0
    for path in directory.rglob('*'):
        try:
            if path.is_file() and not path.is_symlink():
                total += path.stat().st_size
        except OSError:
            continue
    return total


def _is_excluded(relative: Path, patterns: Iterable[str]) -> bool:
    for pattern in patterns:
        pattern = pattern.rstrip('/')
        if any(fnmatch.fnmatch(part, pattern) for part in relative.parts):
            return True
        if fnmatch.fnmatch(relative.as_posix(), pattern):
            return True
    return False


def scan_directory(directory: Path,
                   exclude_patterns: Optional[Iterable[str]] = None) -> List[Path]:
    """
    Scan directory for files

    A file is skipped when any path component, or its relative path,
    matches one of the exclude patterns. Only used for the pre-transfer
    file count, the wrapped tool applies its own matching.

    Args:
        directory: Directory to scan
        exclude_patterns: Glob patterns to exclude

    Returns:
        Sorted list of file paths
    """
    patterns = list(exclude_patterns or [])
    files = []

    for root, dirs, filenames in os.walk(directory):
        root_path = Path(root)
        rel_root = root_path.relative_to(directory)

        # Prune excluded directories in place
        dirs[:] = [d for d in dirs if not _is_excluded(rel_root / d, patterns)]

        for name in filenames:
            relative = rel_root / name
            if not _is_excluded(relative, patterns):
                files.append(root_path / name)

    return sorted(files)


def find_files(directory: Path, pattern: str, limit: Optional[int] = None) -> List[Path]:
    """List files matching a glob pattern recursively, up to limit entries"""
    matches = sorted(p for p in directory.rglob(pattern) if p.is_file())
    if limit is not None:
        return matches[:limit]
    return matches


def write_private_file(path: Path, content: str, mode: int = 0o600) -> Path:
    """Write a file readable only by the current user"""
    path.parent.mkdir(parents=True, exist_ok=True)
    fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, mode)
    with os.fdopen(fd, 'w', encoding='utf-8') as f:
        f.write(content)
    return path


def safe_remove(path: Path) -> bool:
    """
    Safely remove file or directory

    Args:
        path: Path to remove

    Returns:
        True if successful
    """
    try:
        if path.is_file() or path.is_symlink():
            path.unlink()
        elif path.is_dir():
            shutil.rmtree(path)
        return True
    except OSError:
        return False
