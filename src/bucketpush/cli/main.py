"""
Main CLI entry point.

``bucketpush SOURCE DESTINATION`` pushes the files matching SOURCE (a
comma-separated list of globs) to DESTINATION (``<provider>://<bucket>``).
Values not given on the command line fall back to ``bucketpush.yaml``.
"""

import asyncio
import time
from pathlib import Path

import typer

from bucketpush import __version__
from bucketpush.config import Config, load_config
from bucketpush.core.paths import split_patterns
from bucketpush.core.push import push
from bucketpush.exceptions import BucketPushError
from bucketpush.providers import create_provider, parse_destination
from bucketpush.types import PushResult
from bucketpush.utils.logging import get_logger, setup_logging_from_config

logger = get_logger("bucketpush.cli")

DEFAULT_CONCURRENCY = 3


def version_callback(value: bool):
    """Callback to display version and exit."""
    if value:
        typer.echo(f"bucketpush version {__version__}")
        raise typer.Exit()


app = typer.Typer(
    name="bucketpush",
    help="bucketpush - Push local files to S3, Google Cloud Storage or Azure Blob Storage",
    add_completion=False,
)


def format_summary(result: PushResult, elapsed_seconds: float) -> str:
    """One-line run summary, e.g. ``Finished in 2s. (Uploaded 3. Deleted 0. Skipped 1.)``."""
    summary = result.summary()
    line = (
        f"Finished in {round(elapsed_seconds)}s. "
        f"(Uploaded {summary['uploaded']}. Deleted {summary['deleted']}. Skipped {summary['skipped']}.)"
    )
    if summary["errors"]:
        line += f" Errors {summary['errors']}."
    return line


def _configure_logging(config: Config, verbose: bool) -> None:
    data = dict(config.data)
    if verbose:
        data["logging"] = {**(config.get("logging") or {}), "level": "DEBUG"}
    setup_logging_from_config(data, project_dir=config.path.parent if config.path else None)


@app.command()
def main_command(
    source: str | None = typer.Argument(None, help="Source files glob (comma-separated for several)"),
    destination: str | None = typer.Argument(None, help="Destination, e.g. s3://my-bucket or azure://container"),
    concurrency: int | None = typer.Option(
        None, "--concurrency", "-c", min=1, help=f"Parallel uploads (default: {DEFAULT_CONCURRENCY})"
    ),
    prefix: str | None = typer.Option(None, "--prefix", help="Key prefix prepended to every uploaded file"),
    cwd: Path | None = typer.Option(None, "--cwd", help="Directory the source globs are resolved against"),
    account_name: str | None = typer.Option(None, "--account-name", help="Azure storage account name"),
    account_key: str | None = typer.Option(None, "--account-key", help="Azure storage account key"),
    public: bool = typer.Option(False, "--public", help="Make uploaded objects publicly readable"),
    force: bool = typer.Option(False, "--force", "-f", help="Upload every file (bypass change detection)"),
    delete: bool = typer.Option(False, "--delete", help="Delete remote files with no local counterpart"),
    dry_run: bool = typer.Option(False, "--dry-run", help="List and report, but do not upload or delete"),
    cache_control: str | None = typer.Option(None, "--cache-control", help="Cache-Control header for uploads"),
    list_metadata: bool = typer.Option(False, "--list-metadata", help="Fetch remote metadata while listing"),
    config_path: Path | None = typer.Option(None, "--config", help="Config file (default: ./bucketpush.yaml)"),
    verbose: bool = typer.Option(False, "--verbose", help="Verbose output"),
    fail_on_error: bool = typer.Option(
        True, "--fail-on-error/--no-fail-on-error", help="Exit with status 1 when any file failed"
    ),
    version: bool = typer.Option(
        False,
        "--version",
        "-v",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
) -> None:
    """
    Push files to the remote file service.
    """
    try:
        config = load_config(config_path)
    except BucketPushError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1) from e

    _configure_logging(config, verbose)

    source = source or config.get("source")
    destination = destination or config.get("destination")
    if not source or not destination:
        typer.echo("Error: SOURCE and DESTINATION are required (as arguments or in the config file)", err=True)
        raise typer.Exit(1)

    if concurrency is None:
        concurrency = config.get("concurrency", DEFAULT_CONCURRENCY)

    options = config.push_options()
    options.update(
        files=split_patterns(source),
        concurrency=concurrency,
        dry_run=dry_run,
        logger=get_logger("bucketpush.push"),
    )
    if force:
        options["only_upload_changes"] = False
    if delete:
        options["should_delete_extra_files"] = True
    if public:
        options["make_public"] = True
    if list_metadata:
        options["list_include_metadata"] = True
    if cache_control is not None:
        options["cache_control"] = cache_control
    if cwd is not None:
        options["current_working_directory"] = cwd

    try:
        parsed = parse_destination(destination)
        if prefix is None:
            prefix = options.get("dest_path_prefix", "")
        # s3://bucket/site/ --prefix v2/ -> "site/v2/"
        options["dest_path_prefix"] = parsed.path + prefix
        provider_options = {"concurrency": concurrency, **config.provider_options()}
        if account_name is not None:
            provider_options["account_name"] = account_name
        if account_key is not None:
            provider_options["account_key"] = account_key
        options["provider"] = create_provider(destination, **provider_options)

        start = time.monotonic()
        result = asyncio.run(push(**options))
    except BucketPushError as e:
        logger.error(f"Push failed: {e}")
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1) from e
    except FileNotFoundError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1) from e

    typer.echo(format_summary(result, time.monotonic() - start))

    if result.has_errors and fail_on_error:
        raise typer.Exit(1)


def main():
    """Main CLI entry point."""
    app()


if __name__ == "__main__":
    main()
