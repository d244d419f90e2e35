"""Main CLI entry point for kinsta-deploy"""

import sys
import logging

import click
from rich.console import Console
from rich.logging import RichHandler

from ..__version__ import __version__
from ..constants import APP_NAME, LOG_FORMAT

# Import all commands
from .commands import (
    deploy,
    steps,
    doctor,
    config,
)

console = Console()


def setup_logging(verbose: bool = False, debug: bool = False) -> None:
    """Setup logging configuration

    Args:
        verbose: Enable verbose output (INFO level)
        debug: Enable debug output (DEBUG level)
    """
    if debug:
        level = logging.DEBUG
    elif verbose:
        level = logging.INFO
    else:
        level = logging.WARNING

    # Configure rich handler
    logging.basicConfig(
        level=level,
        format=LOG_FORMAT,
        handlers=[
            RichHandler(
                console=console,
                show_time=debug,
                show_path=debug,
                rich_tracebacks=True,
                tracebacks_suppress=[click]
            )
        ]
    )

    # Adjust third-party loggers
    logging.getLogger("urllib3").setLevel(logging.WARNING)


class Context:
    """CLI context object"""

    def __init__(self):
        self.verbose: bool = False
        self.debug: bool = False
        self.quiet: bool = False


@click.group(name=APP_NAME)
@click.version_option(__version__, prog_name=APP_NAME)
@click.option('-v', '--verbose', is_flag=True, help='Enable verbose output')
@click.option('-d', '--debug', is_flag=True, help='Enable debug output')
@click.option('-q', '--quiet', is_flag=True, help='Suppress all output except errors')
@click.pass_context
def cli(ctx, verbose, debug, quiet):
    """Kinsta Deploy - Deploy WordPress sites to Kinsta

    Mirrors a local site tree to a Kinsta host with rsync or lftp,
    installs the Kinsta MU plugin and purges the Kinsta cache.

    Configuration comes from environment variables (KINSTA_HOST_IP,
    KINSTA_USERNAME, KINSTA_PASSWORD, KINSTA_PORT, TARGET_PATH and
    optional settings), optionally layered over a YAML file.
    """
    # Setup logging
    if quiet:
        logging.disable(logging.CRITICAL)
    else:
        setup_logging(verbose=verbose, debug=debug)

    ctx.obj = Context()
    ctx.obj.verbose = verbose
    ctx.obj.debug = debug
    ctx.obj.quiet = quiet


# Register commands
cli.add_command(deploy.deploy)
cli.add_command(steps.install_mu_plugin)
cli.add_command(steps.purge_cache)
cli.add_command(doctor.doctor)
cli.add_command(config.show_config)
cli.add_command(config.build_command)


def main():
    """Main entry point for the CLI application

    This function handles:
    - Keyboard interrupts (exit code 130)
    - Usage errors reported by click
    - Unexpected exceptions with proper error display
    """
    try:
        rv = cli.main(prog_name=APP_NAME, standalone_mode=False)

    except (KeyboardInterrupt, click.exceptions.Abort):
        console.print("\n[yellow]Operation cancelled by user[/yellow]")
        sys.exit(130)

    except click.ClickException as e:
        e.show()
        sys.exit(e.exit_code)

    except Exception as e:
        console.print(f"[red]Unexpected error: {e}[/red]")
        if '--debug' in sys.argv or '-d' in sys.argv:
            console.print_exception()
        sys.exit(1)

    sys.exit(rv if isinstance(rv, int) else 0)


if __name__ == "__main__":
    main()
