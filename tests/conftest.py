"""Shared fixtures for kinsta-deploy tests"""

import io
import struct
import zipfile
from pathlib import Path
from unittest.mock import patch

import pytest

from kinsta_deploy.constants import REQUIRED_ENV_VARS
from kinsta_deploy.core.config_loader import load_config
from kinsta_deploy.models import CommandResult

PASSWORD = "s3cret-pass"

BASE_ENV = {
    "KINSTA_HOST_IP": "203.0.113.10",
    "KINSTA_USERNAME": "sitedeploy",
    "KINSTA_PASSWORD": PASSWORD,
    "KINSTA_PORT": "12345",
    "TARGET_PATH": "/www/site/public",
}

# Every variable the loader reads, cleared so the host environment never leaks in
ALL_ENV_VARS = list(REQUIRED_ENV_VARS) + [
    "SOURCE_PATH",
    "EXCLUDE_PATTERNS",
    "DRY_RUN",
    "VERBOSE",
    "INSTALL_KINSTA_MU_PLUGIN",
    "KINSTA_MU_PLUGIN_PATH",
    "PURGE_KINSTA_CACHE",
    "TRANSFER_METHOD",
    "DEPLOYMENT_STATS_FILE",
]


class FakeRunner:
    """Command runner that records calls instead of spawning processes

    Responses are matched by substring against the joined command line;
    the first matching rule wins and unmatched commands succeed silently.
    """

    def __init__(self):
        self.calls = []
        self.rules = []

    def respond(self, fragment: str, returncode: int = 0, output: str = ""):
        self.rules.append((fragment, returncode, output))
        return self

    def __call__(self, cmd, log_path=None, env=None, timeout=None):
        cmd = [str(part) for part in cmd]
        self.calls.append({"cmd": cmd, "log_path": log_path, "env": env})

        line = " ".join(cmd)
        returncode, output = 0, ""
        for fragment, rc, out in self.rules:
            if fragment in line:
                returncode, output = rc, out
                break

        if log_path is not None:
            Path(log_path).parent.mkdir(parents=True, exist_ok=True)
            with open(log_path, "a", encoding="utf-8") as f:
                f.write(output)

        return CommandResult(cmd, returncode, output)

    def commands_containing(self, fragment: str):
        return [c["cmd"] for c in self.calls if fragment in " ".join(c["cmd"])]


def _which(available):
    def which(name, *args, **kwargs):
        return f"/usr/bin/{name}" if name in available else None
    return which


@pytest.fixture(autouse=True)
def tools_on_path():
    """rsync, lftp and ssh are installed; sshpass is not"""
    with patch("shutil.which", side_effect=_which({"rsync", "lftp", "ssh"})) as which:
        yield which


@pytest.fixture
def with_sshpass(tools_on_path):
    tools_on_path.side_effect = _which({"rsync", "lftp", "ssh", "sshpass"})
    return tools_on_path


@pytest.fixture
def clean_env(monkeypatch):
    for name in ALL_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


@pytest.fixture
def base_env():
    return dict(BASE_ENV)


@pytest.fixture
def source_dir(tmp_path):
    """Small WordPress-like tree with known file sizes"""
    root = tmp_path / "site"
    (root / "wp-content" / "themes").mkdir(parents=True)
    (root / ".git").mkdir()
    (root / "index.php").write_text("<?php // index\n")
    (root / "wp-content" / "themes" / "style.css").write_text("body { margin: 0; }\n")
    (root / "debug.log").write_text("noise\n")
    (root / ".git" / "HEAD").write_text("ref: refs/heads/main\n")
    return root


@pytest.fixture
def make_config(base_env, source_dir, tmp_path):
    def factory(**overrides):
        env = dict(base_env)
        env["SOURCE_PATH"] = str(source_dir)
        env["DEPLOYMENT_STATS_FILE"] = str(tmp_path / "stats" / "deployment_stats.txt")
        return load_config(env, **overrides)
    return factory


@pytest.fixture
def runner():
    return FakeRunner()


@pytest.fixture
def plugin_zip_bytes():
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w") as zf:
        zf.writestr("kinsta-mu-plugins.php", "<?php // loader\n")
        zf.writestr("kinsta-mu-plugins/cache.php", "<?php // cache\n")
    return buffer.getvalue()


@pytest.fixture
def unsupported_zip_bytes():
    """Valid ZIP structure whose member uses an unknown compression method"""
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w") as zf:
        zf.writestr("kinsta-mu-plugins.php", "<?php // loader\n")
    data = bytearray(buffer.getvalue())
    method = struct.pack("<H", 97)
    data[8:10] = method
    central = data.index(b"PK\x01\x02")
    data[central + 10:central + 12] = method
    return bytes(data)
