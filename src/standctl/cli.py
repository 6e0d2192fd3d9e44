"""Root CLI group for standctl with global flags and command registration."""

from __future__ import annotations

import click

from standctl import __version__
from standctl.commands import register_commands
from standctl.commands._context import AppContext
from standctl.config.settings import StandSettings


@click.group(invoke_without_command=True)
@click.version_option(version=__version__, prog_name="standctl")
@click.option("--json", "json_output", is_flag=True, help="Structured JSON output.")
@click.option("-q", "--quiet", is_flag=True, help="Minimal output.")
@click.option("-v", "--verbose", is_flag=True, help="Detailed output with debug info.")
@click.option("--log-json", is_flag=True, help="Structured JSON log output to stderr.")
@click.option("-c", "--config", "config_path", default=None, help="Override config file path.")
@click.option("--base-url", default=None, help="Override the API base URL.")
@click.option("--token", default=None, help="Bearer token (default: $STANDCTL_TOKEN).")
@click.pass_context
def cli(
    ctx: click.Context,
    json_output: bool,
    quiet: bool,
    verbose: bool,
    log_json: bool,
    config_path: str | None,
    base_url: str | None,
    token: str | None,
) -> None:
    """standctl — stand sales and buyer roster CLI."""
    ctx.ensure_object(dict)
    settings = StandSettings.from_cli(
        config_path=config_path,
        base_url=base_url,
        token=token,
        json_output=json_output or None,
        quiet=quiet or None,
        verbose=verbose or None,
        log_json=log_json or None,
    )
    app = AppContext(settings)
    ctx.obj = app
    ctx.call_on_close(app.close)
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


register_commands(cli)
