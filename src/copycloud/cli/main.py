"""Command line entry point: ``copycloud put|get|ls|rm|mv``."""

from __future__ import annotations

import functools
from pathlib import Path
from typing import Any, Callable, Optional

import click
from pydantic import ValidationError

from copycloud.client.api import CloudApi
from copycloud.config.config import CloudApiConfig
from copycloud.core.errors import CloudApiError
from copycloud.monitoring.metrics import generate_latest
from copycloud.utils.formatting import human_size
from copycloud.utils.logging import configure_logging


def build_api(config: CloudApiConfig) -> CloudApi:
    return CloudApi(config)


def _api(ctx: click.Context) -> CloudApi:
    state = ctx.find_object(dict)
    if state.get("api") is None:
        state["api"] = ctx.with_resource(build_api(state["config"]))
    return state["api"]


def _fail_cleanly(func: Callable[..., Any]) -> Callable[..., Any]:
    """Turn client failures into a one-line error and exit status 1."""

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return func(*args, **kwargs)
        except (CloudApiError, FileNotFoundError, ValueError) as exc:
            raise click.ClickException(str(exc)) from exc

    return wrapper


@click.group()
@click.option(
    "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False),
    envvar="COPYCLOUD_CONFIG",
    help="YAML config file (defaults to COPYCLOUD_* environment variables).",
)
@click.option("--log-level", default="WARNING", show_default=True)
@click.option("--json-logs/--console-logs", default=False, show_default=True)
@click.option(
    "--metrics-out",
    type=click.Path(dir_okay=False),
    help="Write Prometheus metrics to this file on exit.",
)
@click.pass_context
def cli(
    ctx: click.Context,
    config_path: Optional[str],
    log_level: str,
    json_logs: bool,
    metrics_out: Optional[str],
) -> None:
    """Client for the chunked cloud file store."""
    configure_logging(log_level, json_output=json_logs)
    try:
        config = (
            CloudApiConfig.from_yaml(config_path)
            if config_path
            else CloudApiConfig.from_env()
        )
    except (ValidationError, ValueError) as exc:
        raise click.ClickException(f"Invalid configuration: {exc}") from exc
    ctx.obj = {"config": config, "api": None}

    if metrics_out:
        ctx.call_on_close(lambda: Path(metrics_out).write_bytes(generate_latest()))


@cli.command()
@click.argument("local_path", type=click.Path(exists=True, dir_okay=False))
@click.argument("remote_path")
@click.option("--chunk-size", type=click.IntRange(min=1), default=None, help="Part size in bytes.")
@click.pass_context
@_fail_cleanly
def put(ctx: click.Context, local_path: str, remote_path: str, chunk_size: Optional[int]) -> None:
    """Upload LOCAL_PATH to REMOTE_PATH."""
    manifest = _api(ctx).upload_file(local_path, remote_path, chunk_size=chunk_size)
    click.echo(
        f"Created {remote_path} ({human_size(manifest.total_size)}, "
        f"{len(manifest.parts)} parts)"
    )


@cli.command()
@click.argument("remote_path")
@click.argument("local_path", type=click.Path(dir_okay=False))
@click.pass_context
@_fail_cleanly
def get(ctx: click.Context, remote_path: str, local_path: str) -> None:
    """Download REMOTE_PATH to LOCAL_PATH."""
    written = _api(ctx).download_file(remote_path, local_path)
    click.echo(f"Saved {remote_path} to {local_path} ({human_size(written)})")


@cli.command(name="ls")
@click.argument("remote_path", default="/")
@click.pass_context
@_fail_cleanly
def list_command(ctx: click.Context, remote_path: str) -> None:
    """List REMOTE_PATH."""
    for item in _api(ctx).list_path(remote_path):
        click.echo(f"{item.type or '-':<4} {human_size(item.size):>10}  {item.path}")


@cli.command()
@click.argument("remote_path")
@click.pass_context
@_fail_cleanly
def rm(ctx: click.Context, remote_path: str) -> None:
    """Remove the file at REMOTE_PATH."""
    _api(ctx).remove_file(remote_path)
    click.echo(f"Removed {remote_path}")


@cli.command()
@click.argument("source")
@click.argument("destination")
@click.pass_context
@_fail_cleanly
def mv(ctx: click.Context, source: str, destination: str) -> None:
    """Rename SOURCE to DESTINATION."""
    meta = _api(ctx).rename(source, destination)
    click.echo(f"Renamed {source} -> {meta.path}")


if __name__ == "__main__":
    cli()
