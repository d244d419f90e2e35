"""Subprocess helpers for the wrapped command-line tools"""

import logging
import os
import shlex
import shutil
import subprocess
import threading
from pathlib import Path
from typing import Callable, Dict, List, Optional

from ..api.exceptions import DependencyError
from ..constants import SUBPROCESS_TIMEOUT
from ..models.result import CommandResult

logger = logging.getLogger(__name__)

# Signature shared by run_command and the fakes used in tests
CommandRunner = Callable[..., CommandResult]

TIMEOUT_RETURNCODE = 124


def run_command(cmd: List[str],
                log_path: Optional[Path] = None,
                env: Optional[Dict[str, str]] = None,
                timeout: Optional[int] = SUBPROCESS_TIMEOUT) -> CommandResult:
    """
    Run a command and collect its combined stdout/stderr

    Args:
        cmd: Command and arguments
        log_path: If given, every output line is appended to this file
        env: Extra environment variables layered over os.environ
        timeout: Seconds before the process is killed

    Returns:
        CommandResult with return code and output

    Raises:
        DependencyError: If the executable is not installed
    """
    full_env = None
    if env:
        full_env = os.environ.copy()
        full_env.update(env)

    logger.debug(f"Running: {format_command(cmd)}")

    try:
        if log_path is None:
            completed = subprocess.run(
                cmd,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                text=True,
                env=full_env,
                timeout=timeout
            )
            return CommandResult(cmd, completed.returncode, completed.stdout or "")

        return _run_streaming(cmd, log_path, full_env, timeout)

    except FileNotFoundError:
        raise DependencyError(cmd[0])
    except subprocess.TimeoutExpired as e:
        logger.warning(f"Command timed out after {timeout}s: {cmd[0]}")
        output = e.output or ""
        if isinstance(output, bytes):
            output = output.decode('utf-8', errors='replace')
        return CommandResult(cmd, TIMEOUT_RETURNCODE, output)


def _run_streaming(cmd: List[str],
                   log_path: Path,
                   env: Optional[Dict[str, str]],
                   timeout: Optional[int]) -> CommandResult:
    """Tee output lines to the log file and the debug log

    A timer kills the process once the timeout elapses, so a hung tool
    that never closes its output is still interrupted.
    """
    lines = []
    expired = threading.Event()
    log_path.parent.mkdir(parents=True, exist_ok=True)

    with open(log_path, 'a', encoding='utf-8') as log_file:
        process = subprocess.Popen(
            cmd,
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            text=True,
            errors='replace',
            env=env
        )

        def kill():
            expired.set()
            process.kill()

        timer = threading.Timer(timeout, kill) if timeout else None
        if timer:
            timer.daemon = True
            timer.start()
        try:
            for line in process.stdout:
                log_file.write(line)
                lines.append(line)
                logger.debug(line.rstrip())
            process.wait()
        finally:
            if timer:
                timer.cancel()
            process.stdout.close()

    if expired.is_set():
        raise subprocess.TimeoutExpired(cmd, timeout, output="".join(lines))

    return CommandResult(cmd, process.returncode, "".join(lines))


def require_tool(name: str, hint: str = None) -> str:
    """
    Resolve an executable on PATH

    Raises:
        DependencyError: If the tool is missing
    """
    path = shutil.which(name)
    if not path:
        raise DependencyError(name, hint)
    return path


def format_command(cmd: List[str]) -> str:
    """Shell-quoted rendering of a command for logs"""
    return " ".join(shlex.quote(str(part)) for part in cmd)
