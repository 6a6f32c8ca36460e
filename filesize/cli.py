from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Optional

import click

from filesize.config_loader import apply_env_overrides, load_config
from filesize.env_loader import load_env_file
from filesize.errors import SizeError
from filesize.logging_setup import correlation_context, get_logger, setup_logging
from filesize.size_parser import format_size, parse_size, validate_size

LOGGER = get_logger(__name__, "PARSE")


class SizeParamType(click.ParamType):
    """Click parameter type converting "4k", "1.5MiB", ... to a byte count."""

    name = "size"

    def convert(self, value, param, ctx):
        if isinstance(value, int):
            return value
        try:
            return parse_size(value)
        except SizeError as exc:
            self.fail(str(exc), param, ctx)


SIZE = SizeParamType()


@click.group()
@click.option(
    "--env-file",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Load FILESIZE_* variables from a .env file first.",
)
@click.pass_context
def main(ctx: click.Context, env_file: Optional[Path]) -> None:
    """Parse and format human-readable file sizes."""
    if env_file is not None:
        load_env_file(env_file)
    setup_logging()
    ctx.with_resource(correlation_context())
    LOGGER.debug("CLI bootstrap completed", extra={"category": "CONFIG"})


@main.command()
@click.argument("value")
def parse(value: str) -> None:
    """Print the byte count of VALUE (for example 4k, 1.5MiB, 100B)."""
    try:
        size = parse_size(value)
    except SizeError as exc:
        LOGGER.warning("Parse failed value=%r error=%s", value, exc)
        raise click.ClickException(str(exc)) from exc
    LOGGER.debug("Parsed value=%r bytes=%s", value, size)
    click.echo(size)


@main.command(name="format", context_settings={"ignore_unknown_options": True})
@click.argument("size", type=int)
def format_command(size: int) -> None:
    """Print SIZE bytes using the largest fitting binary unit."""
    text = format_size(size)
    LOGGER.debug("Formatted bytes=%s text=%s", size, text, extra={"category": "FORMAT"})
    click.echo(text)


@main.command()
@click.argument("value")
@click.option("--max", "max_size", type=SIZE, default=None, help="Reject values larger than this size.")
def validate(value: str, max_size: Optional[int]) -> None:
    """Check that VALUE is a valid size without printing its byte count."""
    error = validate_size(value)
    if error is not None:
        LOGGER.warning("Validation failed value=%r error=%s", value, error)
        raise click.ClickException(str(error))
    if max_size is not None and parse_size(value) > max_size:
        LOGGER.warning("Validation failed value=%r max_bytes=%s", value, max_size)
        raise click.ClickException(f"size exceeds maximum of {format_size(max_size)}: {value.strip()}")
    click.echo("ok")


@main.command(name="check-config")
@click.argument("config_path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
def check_config(config_path: Path) -> None:
    """Validate a YAML config file and list its size limits."""
    try:
        cfg = apply_env_overrides(load_config(config_path))
    except ValueError as exc:
        LOGGER.warning("Config check failed path=%s", config_path, extra={"category": "ERRORS"})
        raise click.ClickException(str(exc)) from exc
    if "FILESIZE_LOG_LEVEL" not in os.environ:
        logging.getLogger().setLevel(cfg.settings.log_level)
    for name in sorted(cfg.limits):
        size = cfg.limit_bytes(name)
        click.echo(f"{name}\t{size}\t{format_size(size)}")


if __name__ == "__main__":
    main()
