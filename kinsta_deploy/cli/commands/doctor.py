"""System diagnostic command"""

import os
import shutil

import click
from rich import box
from rich.console import Console
from rich.table import Table

from ...api.exceptions import ConfigurationError
from ...constants import ENV_TRANSFER_METHOD, DEFAULT_TRANSFER_METHOD
from ...core.config_loader import load_config, load_config_file
from ...sync import SynchronizerFactory

console = Console()

# Hints shown when a tool is missing
INSTALL_HINTS = {
    'rsync': "apt-get install rsync",
    'lftp': "apt-get install lftp",
    'ssh': "apt-get install openssh-client",
    'sshpass': "apt-get install sshpass",
}


class DiagnosticCheck:
    """Base class for diagnostic checks"""

    def __init__(self, name: str, description: str, required: bool = True):
        self.name = name
        self.description = description
        self.required = required
        self.passed = False
        self.message = ""
        self.fixes = []

    def run(self, ctx) -> 'DiagnosticCheck':
        """Run the diagnostic check"""
        raise NotImplementedError


class ToolCheck(DiagnosticCheck):
    """Check a wrapped binary is on PATH"""

    def __init__(self, tool: str, required: bool = True, purpose: str = ""):
        super().__init__(tool, purpose or f"Locate {tool} on PATH", required)
        self.tool = tool

    def run(self, ctx):
        path = shutil.which(self.tool)
        if path:
            self.passed = True
            self.message = path
        else:
            self.passed = False
            self.message = "Not found on PATH"
            if self.tool in INSTALL_HINTS:
                self.fixes = [INSTALL_HINTS[self.tool]]
        return self


class ConfigurationCheck(DiagnosticCheck):
    """Check the required environment variables are set"""

    def __init__(self, config_file=None):
        super().__init__("Configuration", "Load deployment configuration")
        self.config_file = config_file

    def run(self, ctx):
        try:
            config = load_config(config_file=self.config_file)
        except ConfigurationError as e:
            self.passed = False
            self.message = str(e)
            self.fixes = [f"Set {name}" for name in e.missing]
            return self

        self.passed = True
        self.message = f"{config.ssh_destination}:{config.port} -> {config.target_path}"
        return self


def _transfer_method(config_file=None) -> str:
    """TRANSFER_METHOD from the environment, else the config file, else the default"""
    raw = os.environ.get(ENV_TRANSFER_METHOD)
    if not raw and config_file:
        try:
            raw = load_config_file(config_file).get(ENV_TRANSFER_METHOD)
        except ConfigurationError:
            # Reported by the configuration check
            raw = None
    method = (raw or DEFAULT_TRANSFER_METHOD).strip().lower()
    if method in SynchronizerFactory.get_supported_methods():
        return method
    return DEFAULT_TRANSFER_METHOD


def build_checks(config_file=None):
    """Checks for the active transfer method plus optional helpers"""
    synchronizer_cls = SynchronizerFactory.get_synchronizer_class(_transfer_method(config_file))
    required = set(synchronizer_cls.required_tools)

    checks = [
        ToolCheck('ssh', True, "Remote shell for checks and WP-CLI"),
        ToolCheck('rsync', 'rsync' in required, "rsync transfer method"),
        ToolCheck('lftp', 'lftp' in required, "lftp transfer method and cache script fallback"),
        ToolCheck('sshpass', False, "Password authentication for ssh and rsync"),
        ConfigurationCheck(config_file),
    ]
    return checks


@click.command()
@click.option('--config', 'config_file', type=click.Path(exists=True, dir_okay=False),
              help='YAML file with configuration values')
@click.pass_context
def doctor(ctx, config_file):
    """Run system diagnostics

    Checks that the tools used by the configured transfer method are
    installed and that the configuration loads. Optional tools are
    reported but never fail the check.

    Examples:

        # Run all checks
        kinsta-deploy doctor

        # Check the lftp pathway
        TRANSFER_METHOD=lftp kinsta-deploy doctor
    """
    console.print("[bold]Kinsta Deploy Diagnostics[/bold]\n")

    checks = [check.run(ctx) for check in build_checks(config_file)]

    table = Table(title="Diagnostic Results", box=box.ROUNDED)
    table.add_column("Check", style="cyan")
    table.add_column("Status", justify="center")
    table.add_column("Details")

    for check in checks:
        if check.passed:
            status = "[green]✓ PASS[/green]"
        elif check.required:
            status = "[red]✗ FAIL[/red]"
        else:
            status = "[yellow]- OPTIONAL[/yellow]"
        table.add_row(check.name, status, check.message)

    console.print(table)

    failed = [c for c in checks if c.required and not c.passed]
    fixes = [fix for c in checks if not c.passed for fix in c.fixes]
    if fixes:
        console.print("\n[bold yellow]Suggested fixes:[/bold yellow]")
        for fix in fixes:
            console.print(f"  • {fix}")

    if failed:
        console.print(f"\n[red]{len(failed)} required check(s) failed[/red]")
        ctx.exit(1)

    console.print("\n[green]All required checks passed[/green]")
