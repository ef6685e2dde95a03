"""CLI entry point for bintest."""

from __future__ import annotations

import functools
import json
import shlex
import sys
from dataclasses import replace
from pathlib import Path
from typing import Any, Callable, Optional

import click

from bintest import __version__
from bintest.config.settings import BuildConfig, load_config
from bintest.registry.executables import acquire
from bintest.runner.command import build_command
from bintest.utils.errors import BinTestError
from bintest.utils.logging import configure_logging, get_logger


class Context:
    """CLI context for sharing state between commands."""

    def __init__(self, config_path: Optional[Path], log_level: str, log_format: str) -> None:
        self.config_path = config_path
        self.log_level = log_level
        self.log_format = log_format
        self.logger = get_logger("cli")

    def load(self) -> BuildConfig:
        """Load the config file, turning config errors into a usage error."""
        result = load_config(self.config_path)
        if result.is_err():
            raise click.UsageError(str(result.unwrap_err()))
        return result.unwrap()


pass_context = click.make_pass_decorator(Context)


def output_json(data: Any) -> None:
    """Output JSON to stdout."""
    click.echo(json.dumps(data, indent=2, default=str))


def build_options(fn: Callable) -> Callable:
    """Add the build option flags; they override values from the config file."""
    options = [
        click.option("--workspace", is_flag=True, help="Build all workspace members"),
        click.option("--quiet", is_flag=True, help="No cargo progress output"),
        click.option("--release", is_flag=True, help="Build in release mode"),
        click.option("--debug", is_flag=True, help="Build in debug mode"),
        click.option("--offline", is_flag=True, help="Build without network access"),
        click.option("--all-targets", is_flag=True, help="Build all targets"),
        click.option("--features", default=None, help="Features to enable"),
        click.option("--profile", default=None, help="Build profile"),
        click.option("--bin", "binaries", multiple=True, help="Build only this binary (can be repeated)"),
        click.option("--example", "examples", multiple=True, help="Build only this example (can be repeated)"),
        click.option(
            "--manifest-path",
            type=click.Path(dir_okay=False, path_type=Path),
            default=None,
            help="Path to Cargo.toml",
        ),
    ]

    @functools.wraps(fn)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        release = kwargs.pop("release")
        debug = kwargs.pop("debug")
        if release and debug:
            raise click.UsageError("--release and --debug are mutually exclusive")

        overrides: dict[str, Any] = {}
        for flag, field_name in (
            ("workspace", "build_workspace"),
            ("quiet", "quiet"),
            ("offline", "offline"),
            ("all_targets", "all_targets"),
        ):
            if kwargs.pop(flag):
                overrides[field_name] = True
        if release or debug:
            overrides["release"] = release

        for name in ("features", "profile"):
            value = kwargs.pop(name)
            if value is not None:
                overrides[name] = value
        for name in ("binaries", "examples"):
            values = kwargs.pop(name)
            if values:
                overrides[name] = tuple(values)
        manifest_path = kwargs.pop("manifest_path")
        if manifest_path is not None:
            overrides["manifest_path"] = str(manifest_path)

        kwargs["overrides"] = overrides
        return fn(*args, **kwargs)

    for option in reversed(options):
        wrapper = option(wrapper)
    return wrapper


def resolve_config(ctx: Context, overrides: dict[str, Any]) -> BuildConfig:
    config = replace(ctx.load(), **overrides)
    result = config.validate()
    if result.is_err():
        raise click.UsageError(str(result.unwrap_err()))
    return config


@click.group()
@click.option(
    "--config",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Path to a bintest.yaml (default: ./bintest.yaml if present)",
)
@click.option(
    "--log-level",
    type=click.Choice(["debug", "info", "warn", "error"], case_sensitive=False),
    default="warn",
    help="Logging level",
)
@click.option(
    "--log-format",
    type=click.Choice(["json", "text"], case_sensitive=False),
    default="text",
    help="Log format",
)
@click.version_option(version=__version__)
@click.pass_context
def cli(ctx: click.Context, config: Optional[Path], log_level: str, log_format: str) -> None:
    """
    bintest - build a cargo project and locate its executables.

    Runs 'cargo build --message-format json' and reports the executables
    it produced, the same way the Python test helper sees them.
    """
    configure_logging(level=log_level, format_type=log_format)
    ctx.obj = Context(config_path=config, log_level=log_level, log_format=log_format)


@cli.command(name="list")
@build_options
@pass_context
def list_command(ctx: Context, overrides: dict[str, Any]) -> None:
    """Build and print every executable as a JSON object of name to path."""
    config = resolve_config(ctx, overrides)
    try:
        executables = acquire(config)
    except BinTestError as e:
        ctx.logger.error("list_failed", error=str(e))
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    output_json({name: str(path) for name, path in executables.list_executables()})


@cli.command()
@click.argument("name")
@build_options
@pass_context
def which(ctx: Context, name: str, overrides: dict[str, Any]) -> None:
    """Build and print the path of executable NAME."""
    config = resolve_config(ctx, overrides)
    try:
        executables = acquire(config)
        command = executables.command(name)
    except BinTestError as e:
        ctx.logger.error("which_failed", name=name, error=str(e))
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    click.echo(str(command.program))


@cli.command()
@build_options
@pass_context
def command(ctx: Context, overrides: dict[str, Any]) -> None:
    """Print the cargo command line without running it."""
    config = resolve_config(ctx, overrides)
    click.echo(shlex.join(build_command(config)))


def main() -> None:
    """Main entry point."""
    cli()


if __name__ == "__main__":
    main()
