"""Configuration inspection commands"""

import click

from ..decorators import config_option, load_cli_config
from ..utils.output import console, format_yaml, print_error
from ...api import Deployer
from ...api.exceptions import DeployToolError


@click.command(name='show-config')
@config_option
@click.pass_context
def show_config(ctx, config_file):
    """Show the resolved configuration with the password masked"""
    config = load_cli_config(ctx, config_file)
    format_yaml(config.to_dict(mask_secrets=True), title="Deployment Configuration")


@click.command(name='build-command')
@config_option
@click.option('--dry-run', is_flag=True, help='Include the dry-run flag')
@click.option('--method', type=click.Choice(['rsync', 'lftp']),
              help='Transfer method (default: TRANSFER_METHOD or rsync)')
@click.pass_context
def build_command(ctx, config_file, dry_run, method):
    """Print the synchronization command without running it

    Examples:

        # rsync command line
        kinsta-deploy build-command

        # lftp script, password masked
        kinsta-deploy build-command --method lftp
    """
    config = load_cli_config(ctx, config_file, dry_run=True if dry_run else None,
                             transfer_method=method)
    try:
        command = Deployer(config).build_command()
    except (DeployToolError, ValueError) as e:
        print_error("Cannot build command", e)
        ctx.exit(1)

    console.print(command, markup=False, highlight=False, soft_wrap=True)
