"""Load a DeploymentConfig from environment variables

Values come from the process environment, optionally layered over a YAML
file that uses the same variable names as keys. Nothing here touches the
network, so a missing variable is always reported before any session opens.
"""

import logging
import os
from pathlib import Path
from typing import Dict, Mapping, Optional, Union

import yaml

from ..api.exceptions import ConfigurationError
from ..constants import (
    ENV_HOST_IP,
    ENV_USERNAME,
    ENV_PASSWORD,
    ENV_PORT,
    ENV_TARGET_PATH,
    ENV_SOURCE_PATH,
    ENV_EXCLUDE_PATTERNS,
    ENV_DRY_RUN,
    ENV_VERBOSE,
    ENV_INSTALL_MU_PLUGIN,
    ENV_MU_PLUGIN_PATH,
    ENV_PURGE_CACHE,
    ENV_TRANSFER_METHOD,
    ENV_STATS_FILE,
    REQUIRED_ENV_VARS,
    DEFAULT_SOURCE_PATH,
    DEFAULT_EXCLUDE_PATTERNS,
    DEFAULT_MU_PLUGIN_PATH,
    DEFAULT_STATS_FILE,
    DEFAULT_TRANSFER_METHOD,
    TransferMethod,
)
from ..models.config import DeploymentConfig, ExcludePatternList

logger = logging.getLogger(__name__)


def parse_bool(value: Optional[str], default: bool = False) -> bool:
    """Only the literal string "true" enables a flag"""
    if value is None or str(value).strip() == "":
        return default
    return str(value).strip().lower() == "true"


def find_missing(values: Mapping[str, str]) -> list:
    """Names of required variables that are absent or empty, in fixed order"""
    return [name for name in REQUIRED_ENV_VARS
            if not str(values.get(name) or "").strip()]


def load_config_file(config_file: Union[str, Path]) -> Dict[str, str]:
    """
    Read a YAML file of variable-name keys

    ${VAR} references are expanded from the environment before parsing.

    Raises:
        ConfigurationError: If the file is missing or not a mapping
    """
    path = Path(config_file)
    if not path.exists():
        raise ConfigurationError(f"Configuration file not found: {path}")

    with open(path, 'r', encoding='utf-8') as f:
        content = f.read()

    content = os.path.expandvars(content)

    try:
        data = yaml.safe_load(content) or {}
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML in {path}: {e}")

    if not isinstance(data, dict):
        raise ConfigurationError(f"Configuration file must contain a mapping: {path}")

    values = {}
    for key, value in data.items():
        if value is None:
            continue
        if isinstance(value, bool):
            value = "true" if value else "false"
        elif isinstance(value, (list, tuple)):
            value = ",".join(str(v) for v in value)
        values[str(key).upper()] = str(value)
    return values


def _parse_port(raw: str) -> int:
    try:
        port = int(str(raw).strip())
    except ValueError:
        raise ConfigurationError(f"{ENV_PORT} must be an integer, got '{raw}'")
    if not 1 <= port <= 65535:
        raise ConfigurationError(f"{ENV_PORT} out of range: {port}")
    return port


def _parse_transfer_method(raw: Optional[str]) -> str:
    method = (raw or DEFAULT_TRANSFER_METHOD).strip().lower()
    valid = [m.value for m in TransferMethod]
    if method not in valid:
        raise ConfigurationError(
            f"{ENV_TRANSFER_METHOD} must be one of {', '.join(valid)}, got '{raw}'"
        )
    return method


def load_config(environ: Optional[Mapping[str, str]] = None,
                config_file: Optional[Union[str, Path]] = None,
                **overrides) -> DeploymentConfig:
    """
    Build the deployment configuration

    Args:
        environ: Variable source, defaults to os.environ
        config_file: Optional YAML file whose values sit beneath environ
        **overrides: Field values that win over both (used by CLI flags);
            None values are ignored

    Returns:
        Immutable DeploymentConfig

    Raises:
        ConfigurationError: Listing every missing required variable
    """
    env = dict(os.environ if environ is None else environ)

    values: Dict[str, str] = {}
    if config_file:
        values.update(load_config_file(config_file))
    values.update({k: v for k, v in env.items() if v is not None and v != ""})

    missing = find_missing(values)
    if missing:
        raise ConfigurationError(missing=missing)

    config_values = dict(
        host=values[ENV_HOST_IP].strip(),
        username=values[ENV_USERNAME].strip(),
        password=values[ENV_PASSWORD],
        port=_parse_port(values[ENV_PORT]),
        target_path=values[ENV_TARGET_PATH].strip(),
        source_path=values.get(ENV_SOURCE_PATH) or DEFAULT_SOURCE_PATH,
        exclude_patterns=ExcludePatternList.parse(
            values.get(ENV_EXCLUDE_PATTERNS, DEFAULT_EXCLUDE_PATTERNS)
        ),
        dry_run=parse_bool(values.get(ENV_DRY_RUN), False),
        verbose=parse_bool(values.get(ENV_VERBOSE), False),
        install_mu_plugin=parse_bool(values.get(ENV_INSTALL_MU_PLUGIN), True),
        mu_plugin_path=values.get(ENV_MU_PLUGIN_PATH) or DEFAULT_MU_PLUGIN_PATH,
        purge_cache=parse_bool(values.get(ENV_PURGE_CACHE), True),
        transfer_method=_parse_transfer_method(values.get(ENV_TRANSFER_METHOD)),
        stats_file=values.get(ENV_STATS_FILE) or DEFAULT_STATS_FILE,
    )

    for key, value in overrides.items():
        if value is None:
            continue
        if key not in config_values:
            raise ConfigurationError(f"Unknown configuration field: {key}")
        if key == "transfer_method":
            value = _parse_transfer_method(value)
        config_values[key] = value

    config = DeploymentConfig(**config_values)
    logger.debug(f"Loaded configuration: {config.to_dict()}")
    return config
