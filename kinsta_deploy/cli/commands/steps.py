"""Standalone MU plugin and cache purge commands"""

import click

from ..decorators import config_option, load_cli_config
from ..utils.output import format_step_result, print_error
from ...api import Deployer
from ...api.exceptions import DeployToolError
from ...constants import StepStatus


def _finish(ctx, result, title):
    format_step_result(result, title)
    if result.status == StepStatus.FAILED:
        ctx.exit(1)


@click.command(name='install-mu-plugin')
@config_option
@click.option('--dry-run', is_flag=True, help='Only show where the plugin would go')
@click.pass_context
def install_mu_plugin(ctx, config_file, dry_run):
    """Install the Kinsta MU plugin without deploying the site

    Downloads the plugin archive, verifies and extracts it, then uploads
    it to TARGET_PATH/KINSTA_MU_PLUGIN_PATH with the configured transfer
    method. Exits 1 if any stage fails.
    """
    config = load_cli_config(ctx, config_file, dry_run=True if dry_run else None,
                             install_mu_plugin=True)
    try:
        result = Deployer(config).install_mu_plugin()
    except DeployToolError as e:
        print_error("MU plugin installation failed", e)
        ctx.exit(1)

    _finish(ctx, result, "MU plugin")


@click.command(name='purge-cache')
@config_option
@click.option('--dry-run', is_flag=True, help='Only show the command that would run')
@click.pass_context
def purge_cache(ctx, config_file, dry_run):
    """Purge the Kinsta cache through WP-CLI over SSH

    When SSH execution fails, a purge script is uploaded for manual
    execution and the command exits 0 with a warning. Exits 1 only when
    both the purge and the script upload fail.
    """
    config = load_cli_config(ctx, config_file, dry_run=True if dry_run else None,
                             purge_cache=True)
    try:
        result = Deployer(config).purge_cache()
    except DeployToolError as e:
        print_error("Cache purge failed", e)
        ctx.exit(1)

    _finish(ctx, result, "Cache purge")
