"""Tests for the Kinsta cache purge step"""

import logging
from unittest.mock import MagicMock

import pytest

from kinsta_deploy.api.exceptions import ConnectivityError
from kinsta_deploy.constants import StepStatus
from kinsta_deploy.models import CommandResult
from kinsta_deploy.services.cache_purger import CachePurger, has_success_marker


def _shell(purge=(0, "Success: Purged all caches."), wp_version=(0, "WP-CLI 2.10.0")):
    def run(command, connect_timeout=None, timeout=None):
        if "wp --version" in command:
            return CommandResult(["ssh"], *wp_version)
        return CommandResult(["ssh"], *purge)

    shell = MagicMock()
    shell.run.side_effect = run
    return shell


@pytest.fixture
def uploader():
    uploader = MagicMock()
    uploader.upload_file.return_value = CommandResult(["lftp"], 0, "")
    return uploader


def _purger(config, shell, uploader, tmp_path):
    return CachePurger(config, tmp_path / "scratch", shell=shell, fallback_uploader=uploader)


class TestPurge:

    def test_success(self, make_config, uploader, tmp_path):
        shell = _shell()
        result = _purger(make_config(), shell, uploader, tmp_path).purge()

        assert result.status == StepStatus.SUCCESS
        assert result.warnings == []
        shell.test_connection.assert_called_once()
        commands = [c.args[0] for c in shell.run.call_args_list]
        assert commands[-1] == "cd /www/site/public && wp kinsta cache purge --all"
        assert shell.run.call_args_list[-1].kwargs["connect_timeout"] == 30
        uploader.upload_file.assert_not_called()

    def test_marker_is_case_insensitive(self, make_config, uploader, tmp_path):
        shell = _shell(purge=(0, "CACHE FLUSHED"))
        result = _purger(make_config(), shell, uploader, tmp_path).purge()

        assert result.status == StepStatus.SUCCESS
        assert result.warnings == []

    def test_missing_marker_warns(self, make_config, uploader, tmp_path, caplog):
        shell = _shell(purge=(0, "Done."))
        with caplog.at_level(logging.WARNING):
            result = _purger(make_config(), shell, uploader, tmp_path).purge()

        assert result.status == StepStatus.SUCCESS
        assert any("success confirmation not found" in w for w in result.warnings)
        assert "success confirmation not found" in caplog.text

    def test_missing_wp_cli_only_warns(self, make_config, uploader, tmp_path):
        shell = _shell(wp_version=(127, "bash: wp: command not found"))
        result = _purger(make_config(), shell, uploader, tmp_path).purge()

        assert result.status == StepStatus.SUCCESS
        assert any("WP-CLI" in w for w in result.warnings)

    def test_command_failure_uploads_script(self, make_config, uploader, tmp_path):
        shell = _shell(purge=(1, "Error: 'kinsta' is not a registered wp command."))
        result = _purger(make_config(), shell, uploader, tmp_path).purge()

        assert result.status == StepStatus.DEGRADED
        assert result.error_code == "KD020"
        assert not result.success

        local, remote = uploader.upload_file.call_args[0]
        assert remote == "/www/site/public/wp_cache_purge.sh"
        script = local.read_text()
        assert "cd /www/site/public" in script
        assert "wp kinsta cache purge --all" in script
        assert "bash /www/site/public/wp_cache_purge.sh" in result.message

    def test_connection_failure_and_upload_failure(self, make_config, uploader, tmp_path):
        shell = _shell()
        shell.test_connection.side_effect = ConnectivityError("Connection timed out")
        uploader.upload_file.return_value = CommandResult(["lftp"], 1, "Login failed")

        result = _purger(make_config(), shell, uploader, tmp_path).purge()

        assert result.status == StepStatus.FAILED
        assert result.error_code == "KD005"
        shell.run.assert_not_called()

    def test_dry_run_skips(self, make_config, uploader, tmp_path):
        shell = _shell()
        result = _purger(make_config(dry_run=True), shell, uploader, tmp_path).purge()

        assert result.status == StepStatus.SKIPPED
        shell.test_connection.assert_not_called()
        shell.run.assert_not_called()

    def test_disabled_skips(self, make_config, uploader, tmp_path):
        shell = _shell()
        result = _purger(make_config(purge_cache=False), shell, uploader, tmp_path).purge()

        assert result.status == StepStatus.SKIPPED
        shell.run.assert_not_called()


def test_target_path_is_quoted(base_env, uploader, tmp_path):
    from kinsta_deploy.core.config_loader import load_config

    base_env["TARGET_PATH"] = "/www/my site/public"
    purger = _purger(load_config(base_env), _shell(), uploader, tmp_path)

    assert purger.purge_command == "cd '/www/my site/public' && wp kinsta cache purge --all"


@pytest.mark.parametrize("output,expected", [
    ("Success: Purged all caches.", True),
    ("cache cleared", True),
    ("Object cache FLUSHED", True),
    ("", False),
    ("Warning: nothing happened", False),
])
def test_success_markers(output, expected):
    assert has_success_marker(output) is expected
