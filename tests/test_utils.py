"""Tests for utility helpers"""

import stat
import subprocess
from unittest.mock import patch, MagicMock

import pytest

from kinsta_deploy.api.exceptions import DependencyError
from kinsta_deploy.utils import (
    format_command,
    format_duration,
    format_size,
    pluralize,
    require_tool,
    run_command,
    safe_remove,
    scan_directory,
    write_private_file,
)
from kinsta_deploy.utils.process_utils import TIMEOUT_RETURNCODE


class TestRunCommand:

    def test_collects_output(self):
        completed = subprocess.CompletedProcess(["rsync"], 0, stdout="done\n")
        with patch("subprocess.run", return_value=completed) as run:
            result = run_command(["rsync", "--version"], env={"SSHPASS": "x"})

        assert result.success
        assert result.output == "done\n"
        kwargs = run.call_args.kwargs
        assert kwargs["stderr"] == subprocess.STDOUT
        assert kwargs["env"]["SSHPASS"] == "x"

    def test_missing_executable(self):
        with patch("subprocess.run", side_effect=FileNotFoundError):
            with pytest.raises(DependencyError) as exc_info:
                run_command(["lftp", "-f", "script"])
        assert exc_info.value.tool == "lftp"

    def test_timeout(self):
        error = subprocess.TimeoutExpired(["ssh"], 60, output=b"partial")
        with patch("subprocess.run", side_effect=error):
            result = run_command(["ssh", "host", "true"], timeout=60)

        assert result.returncode == TIMEOUT_RETURNCODE
        assert result.output == "partial"

    def test_streams_to_log_file(self, tmp_path):
        process = MagicMock()
        process.stdout.__iter__.return_value = iter(["line one\n", "line two\n"])
        process.returncode = 0
        log_path = tmp_path / "logs" / "transfer.log"

        with patch("subprocess.Popen", return_value=process):
            result = run_command(["rsync", "-avz"], log_path=log_path)

        assert result.output == "line one\nline two\n"
        assert log_path.read_text() == "line one\nline two\n"

    def test_streaming_timeout_kills_process(self, tmp_path):
        process = MagicMock()
        process.stdout.__iter__.return_value = iter(["partial\n"])

        class ImmediateTimer:
            def __init__(self, interval, function):
                self.function = function

            def start(self):
                self.function()

            def cancel(self):
                pass

        with patch("subprocess.Popen", return_value=process), \
                patch("kinsta_deploy.utils.process_utils.threading.Timer", ImmediateTimer):
            result = run_command(["lftp", "-f", "script"], log_path=tmp_path / "out.log",
                                 timeout=5)

        process.kill.assert_called_once_with()
        assert result.returncode == TIMEOUT_RETURNCODE
        assert result.output == "partial\n"


def test_require_tool(tools_on_path):
    assert require_tool("rsync") == "/usr/bin/rsync"
    with pytest.raises(DependencyError, match="sshpass"):
        require_tool("sshpass")


def test_format_command_quotes_arguments():
    cmd = ["rsync", "-e", "ssh -p 22", "src/", "user@host:/www/my site"]
    assert format_command(cmd) == "rsync -e 'ssh -p 22' src/ 'user@host:/www/my site'"


def test_scan_directory_applies_excludes(source_dir):
    files = scan_directory(source_dir, [".git", "*.log"])
    relative = sorted(p.relative_to(source_dir).as_posix() for p in files)

    assert relative == ["index.php", "wp-content/themes/style.css"]


def test_write_private_file(tmp_path):
    path = write_private_file(tmp_path / "sub" / "script.txt", "open sftp://...\n")

    assert path.read_text() == "open sftp://...\n"
    assert stat.S_IMODE(path.stat().st_mode) == 0o600


def test_safe_remove(tmp_path):
    target = tmp_path / "scratch"
    (target / "nested").mkdir(parents=True)
    (target / "nested" / "file").write_text("x")

    assert safe_remove(target)
    assert not target.exists()


def test_formatting():
    assert format_size(512) == "512 B"
    assert format_size(2048) == "2.0 KB"
    assert pluralize(1, "file") == "1 file"
    assert pluralize(3, "file") == "3 files"


def test_format_duration():
    assert format_duration(0.25) == "250ms"
    assert format_duration(42) == "42.0s"
    assert format_duration(65) == "1m 5s"
    assert format_duration(3720) == "1h 2m"
