"""CLI entrypoint for validgen."""

import sys
from pathlib import Path

import click

from . import __version__
from .config import GenerateConfig, find_config, load_config
from .log import setup_logging


def _resolve_config(
    ctx: click.Context,
    source: Path | None,
    out: Path | None,
    outpkg: str | None,
) -> GenerateConfig:
    """Defaults < config file < command line."""
    config_path: Path | None = ctx.obj["config_path"]
    if config_path is None:
        config_path = find_config(Path.cwd())

    config = GenerateConfig()
    if config_path is not None:
        try:
            config = load_config(config_path)
        except ValueError as e:
            raise click.ClickException(f"invalid config {config_path}: {e}")

    return config.override(
        source=source,
        output=out,
        package=outpkg,
        debug=True if ctx.obj["debug"] else None,
    )


def _generate_options(fn):
    fn = click.option(
        "--outpkg",
        type=str,
        default=None,
        help="Package clause of the generated file (default: main)",
    )(fn)
    fn = click.option(
        "--out",
        type=click.Path(dir_okay=False, path_type=Path),
        default=None,
        help="Generated file to write (default: generated.go)",
    )(fn)
    fn = click.option(
        "--in",
        "source",
        type=click.Path(dir_okay=False, path_type=Path),
        default=None,
        help="Go source file to scan (default: main.go)",
    )(fn)
    return fn


@click.group()
@click.version_option(__version__, prog_name="validgen")
@click.option(
    "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="validgen.toml or pyproject.toml with [tool.validgen] (defaults to auto-detected)",
)
@click.option("--debug", is_flag=True, help="Enable debug logs")
@click.pass_context
def cli(ctx: click.Context, config_path: Path | None, debug: bool) -> None:
    """validgen - Generate Validate() methods for Go structs from `validate` tags.

    Supported directives: required, eqfield=<Field>, gte=<Field>.
    """
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path
    ctx.obj["debug"] = debug


@cli.command()
@_generate_options
@click.option("--dry-run", is_flag=True, help="Show plan and diff without writing")
@click.pass_context
def generate(
    ctx: click.Context,
    source: Path | None,
    out: Path | None,
    outpkg: str | None,
    dry_run: bool,
) -> None:
    """Scan a Go file and write Validate() methods for its tagged structs.

    \b
    Examples:
        validgen generate --in models.go --out models_validate.go --outpkg models
        validgen generate --dry-run
    """
    from .commands.generate import run_generate

    config = _resolve_config(ctx, source, out, outpkg)
    log = setup_logging(config.debug)
    exit_code = run_generate(config, dry_run=dry_run, log=log)
    sys.exit(exit_code)


@cli.command()
@_generate_options
@click.pass_context
def watch(ctx: click.Context, source: Path | None, out: Path | None, outpkg: str | None) -> None:
    """Regenerate on every change to the source file (Ctrl+C to stop)."""
    from .commands.watch_cmd import run_watch

    config = _resolve_config(ctx, source, out, outpkg)
    log = setup_logging(config.debug)
    exit_code = run_watch(config, log=log)
    sys.exit(exit_code)


@cli.command()
@click.argument("raw")
@click.option("--json", "output_json", is_flag=True, help="Output directives as JSON")
@click.pass_context
def tags(ctx: click.Context, raw: str, output_json: bool) -> None:
    """Parse a raw struct tag and show its directives.

    \b
    Example:
        validgen tags '`validate:"required,eqfield=Other" json:"name"`'
    """
    from .commands.tags_cmd import run_tags

    log = setup_logging(ctx.obj["debug"])
    exit_code = run_tags(raw, output_json=output_json, log=log)
    sys.exit(exit_code)


@cli.command()
@click.option("--json", "output_json", is_flag=True, help="Output registry as JSON")
def directives(output_json: bool) -> None:
    """List the registered directives."""
    from .commands.tags_cmd import run_directives

    exit_code = run_directives(output_json=output_json)
    sys.exit(exit_code)


def main() -> None:
    cli(obj={})


if __name__ == "__main__":
    main()
