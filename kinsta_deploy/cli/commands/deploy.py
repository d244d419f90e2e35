"""Deploy command implementation"""

import click

from ..decorators import config_option, load_cli_config
from ..utils.output import format_deploy_result, console
from ...api import Deployer
from ...api.exceptions import DeployToolError
from ...models import DeployResult


@click.command()
@config_option
@click.option('--dry-run', is_flag=True, help='Simulate the transfer, skip plugin and cache steps')
@click.option('--method', type=click.Choice(['rsync', 'lftp']),
              help='Transfer method (default: TRANSFER_METHOD or rsync)')
@click.option('--stats-file', type=click.Path(dir_okay=False),
              help='Where to write deployment statistics')
@click.pass_context
def deploy(ctx, config_file, dry_run, method, stats_file):
    """Deploy the site to Kinsta

    Synchronizes SOURCE_PATH to TARGET_PATH on the Kinsta host, then
    installs the Kinsta MU plugin and purges the Kinsta cache when enabled.
    Plugin and cache failures are reported as warnings and do not fail
    the deployment.

    Examples:

        # Deploy using environment variables
        kinsta-deploy deploy

        # Preview what would be transferred
        kinsta-deploy deploy --dry-run

        # Use lftp mirroring instead of rsync
        kinsta-deploy deploy --method lftp
    """
    config = load_cli_config(
        ctx,
        config_file,
        dry_run=True if dry_run else None,
        transfer_method=method,
        stats_file=stats_file,
    )

    mode = "[yellow]DRY RUN[/yellow]" if config.dry_run else "[green]LIVE[/green]"
    console.print(
        f"\n[cyan]Deploying {config.source_path} to "
        f"{config.ssh_destination}:{config.target_path} ({mode})...[/cyan]"
    )

    try:
        result = Deployer(config).deploy()
    except DeployToolError as e:
        message = f"{e} ({e.error_code})" if e.error_code else str(e)
        format_deploy_result(DeployResult(success=False, dry_run=config.dry_run, error=message))
        ctx.exit(1)

    format_deploy_result(result)
