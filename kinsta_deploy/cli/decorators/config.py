"""Configuration loading helpers for CLI commands"""

import logging
from typing import Callable

import click

from ..utils.output import console, print_error
from ...api.exceptions import ConfigurationError
from ...core.config_loader import load_config
from ...models import DeploymentConfig


def config_option(func: Callable) -> Callable:
    """Add the --config option for a YAML file of variable-name keys"""
    return click.option(
        '--config', 'config_file',
        type=click.Path(exists=True, dir_okay=False),
        help='YAML file with configuration values (environment wins)'
    )(func)


def load_cli_config(ctx: click.Context, config_file=None, **overrides) -> DeploymentConfig:
    """Load configuration or exit 1 with every missing variable listed

    A VERBOSE=true configuration raises console logging to INFO unless
    output was silenced with -q.
    """
    try:
        config = load_config(config_file=config_file, **overrides)
    except ConfigurationError as e:
        print_error(str(e))
        for name in e.missing:
            console.print(f"  - {name}")
        ctx.exit(1)

    if config.verbose and not (ctx.obj and ctx.obj.quiet):
        root = logging.getLogger()
        if root.level > logging.INFO:
            root.setLevel(logging.INFO)

    return config
