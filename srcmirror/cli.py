"""CLI interface for srcmirror."""

import logging
from pathlib import Path
from typing import Any, Optional

import click

from .api import S3StoreClient
from .cli_progress import run_sync_with_progress
from .config import config
from .exceptions import SrcMirrorConfigError, SrcMirrorError, ValidationError
from .filesystem import list_targets
from .output import OutputFormatter
from .sync import PageCursor, SyncEngine, validate_request
from .utils import DEFAULT_BRANCH, DEFAULT_EXCLUDE_PATTERNS, format_size

logger = logging.getLogger(__name__)


def _build_client(ctx: Any) -> S3StoreClient:
    """Create a store client from global options and configuration."""
    return S3StoreClient(
        bucket=ctx.obj["bucket"] or config.require_bucket(),
        region=ctx.obj["region"] or config.region,
        endpoint_url=ctx.obj["endpoint_url"] or config.endpoint_url,
    )


def _mount_root(ctx: Any) -> Path:
    return Path(ctx.obj["mount_root"]) if ctx.obj["mount_root"] else config.mount_root


@click.group()
@click.option("--bucket", envvar="SRCMIRROR_BUCKET", help="Source bucket name")
@click.option("--region", help="AWS region of the bucket")
@click.option("--endpoint-url", help="Endpoint URL for S3-compatible stores")
@click.option(
    "--mount-root",
    type=click.Path(file_okay=False),
    help="Root directory of the local mirror",
)
@click.option("--quiet", "-q", is_flag=True, help="Suppress non-essential output")
@click.option("--json", is_flag=True, help="Output in JSON format")
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    help="Enable verbose/debug logging output",
)
@click.version_option(package_name="srcmirror")
@click.pass_context
def main(
    ctx: Any,
    bucket: Optional[str],
    region: Optional[str],
    endpoint_url: Optional[str],
    mount_root: Optional[str],
    quiet: bool,
    json: bool,
    verbose: bool,
) -> None:
    """srcmirror - Mirror source trees from object storage onto a shared mount."""
    ctx.ensure_object(dict)
    ctx.obj["bucket"] = bucket
    ctx.obj["region"] = region
    ctx.obj["endpoint_url"] = endpoint_url
    ctx.obj["mount_root"] = mount_root
    ctx.obj["out"] = OutputFormatter(json_output=json, quiet=quiet)

    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            datefmt="%H:%M:%S",
        )
        logging.getLogger("srcmirror").setLevel(logging.DEBUG)
        # botocore is very chatty at DEBUG
        logging.getLogger("botocore").setLevel(logging.INFO)
    else:
        logging.basicConfig(level=logging.WARNING)


@main.command()
@click.argument("owner")
@click.argument("repo")
@click.option(
    "--branch", "-b", default=DEFAULT_BRANCH, show_default=True, help="Branch name"
)
@click.option(
    "--clean",
    is_flag=True,
    help="DELETE the existing local copy before syncing (irreversible)",
)
@click.option(
    "--workers",
    type=int,
    default=None,
    help="Number of parallel downloads (default: SRCMIRROR_MAX_WORKERS or 1)",
)
@click.option(
    "--include",
    "include_paths",
    multiple=True,
    help="Only sync keys under this relative path (repeatable, e.g. app/)",
)
@click.option(
    "--exclude",
    "exclude_patterns",
    multiple=True,
    help="Skip keys matching this regular expression (repeatable)",
)
@click.option(
    "--default-excludes",
    is_flag=True,
    help="Also skip node_modules, .git, dist, caches and compiled files",
)
@click.option("--no-progress", is_flag=True, help="Disable progress display")
@click.pass_context
def sync(
    ctx: Any,
    owner: str,
    repo: str,
    branch: str,
    clean: bool,
    workers: Optional[int],
    include_paths: tuple[str, ...],
    exclude_patterns: tuple[str, ...],
    default_excludes: bool,
    no_progress: bool,
) -> None:
    """Mirror OWNER/REPO/BRANCH from the bucket onto the local mount.

    Files are written to MOUNT_ROOT/OWNER/REPO/BRANCH. Existing files are
    overwritten; local files that no longer exist remotely are only removed
    with --clean, which deletes the whole directory first.

    Only one sync per OWNER/REPO/BRANCH may run at a time.

    Examples:
        srcmirror sync acme web                      # Sync acme/web/main
        srcmirror sync acme web -b develop --clean   # Full rebuild of develop
        srcmirror sync acme web --include app/ --default-excludes
        srcmirror sync acme web --workers 8          # Parallel downloads
    """
    out: OutputFormatter = ctx.obj["out"]

    if workers is not None and workers < 1:
        out.error("Workers must be at least 1")
        ctx.exit(1)

    excludes = list(exclude_patterns)
    if default_excludes:
        excludes.extend(DEFAULT_EXCLUDE_PATTERNS)

    try:
        request = validate_request(
            {
                "owner": owner,
                "repo": repo,
                "branch": branch,
                "clean": clean,
                "include_paths": list(include_paths),
                "exclude_patterns": excludes,
            }
        )
    except ValidationError as e:
        out.error(str(e))
        ctx.exit(1)
        return  # Unreachable, but helps type checker

    try:
        client = _build_client(ctx)
        engine = SyncEngine(
            client,
            mount_root=_mount_root(ctx),
            page_size=config.page_size,
            max_workers=workers or config.max_workers,
        )
    except SrcMirrorConfigError as e:
        out.error(str(e))
        ctx.exit(1)
        return

    target_dir = engine.target_dir_for(request)
    if not out.quiet and not out.json_output:
        out.info(f"Source: s3://{client.bucket}/{request.prefix}")
        out.info(f"Target: {target_dir}")
        if request.clean:
            out.warning(f"Clean sync: {target_dir} will be deleted first")
        out.info("")

    show_progress = not (no_progress or out.quiet or out.json_output)
    result = run_sync_with_progress(engine, request, show_progress=show_progress)

    if out.json_output:
        out.output_json(result.to_response())
    elif result.success or result.cancelled:
        out.print_summary(
            "Sync Cancelled" if result.cancelled else "Sync Complete",
            [
                ("Files synced", str(result.files_synced)),
                ("Total size", f"{result.total_size_mb} MB"),
                ("Skipped", str(result.files_skipped)),
                ("Filtered", str(result.files_filtered)),
                ("Target", str(result.target_dir)),
            ],
        )
        for skipped in result.skipped[:10]:
            out.warning(f"Skipped {skipped.key}: {skipped.error}")
        if result.files_skipped > 10:
            out.warning(f"... and {result.files_skipped - 10} more skipped file(s)")

    if result.cancelled:
        out.warning("Sync cancelled by user")
        ctx.exit(130)  # Standard exit code for SIGINT
    elif not result.success:
        out.error(result.error or "Sync failed")
        ctx.exit(1)


@main.command()
@click.pass_context
def targets(ctx: Any) -> None:
    """List synced OWNER/REPO/BRANCH directories under the mount root."""
    out: OutputFormatter = ctx.obj["out"]
    mount_root = _mount_root(ctx)
    found = list_targets(mount_root)

    if out.json_output:
        out.output_json({"mountRoot": str(mount_root), "targets": found})
        return

    if not found:
        out.info(f"No synced targets under {mount_root}")
        return

    for target in found:
        click.echo(target)


@main.command(name="ls")
@click.argument("owner")
@click.argument("repo")
@click.option(
    "--branch", "-b", default=DEFAULT_BRANCH, show_default=True, help="Branch name"
)
@click.pass_context
def ls(ctx: Any, owner: str, repo: str, branch: str) -> None:
    """List remote keys under OWNER/REPO/BRANCH."""
    out: OutputFormatter = ctx.obj["out"]

    try:
        request = validate_request({"owner": owner, "repo": repo, "branch": branch})
        client = _build_client(ctx)
        cursor = PageCursor(client, request.prefix, page_size=config.page_size)

        objects = [d for d in cursor.iter_objects() if not d.is_directory_marker]
    except SrcMirrorError as e:
        out.error(str(e))
        ctx.exit(1)
        return

    if out.json_output:
        out.output_json(
            [
                {"key": d.key[len(request.prefix) :], "size": d.size}
                for d in objects
            ]
        )
        return

    total = 0
    for descriptor in objects:
        total += descriptor.size
        rel = descriptor.key[len(request.prefix) :]
        click.echo(f"{format_size(descriptor.size):>10}  {rel}")

    out.info(f"\n{len(objects)} file(s), {format_size(total)}")


@main.group(name="config")
def config_group() -> None:
    """Show or change stored configuration."""


@config_group.command(name="show")
@click.pass_context
def config_show(ctx: Any) -> None:
    """Show the effective configuration."""
    out: OutputFormatter = ctx.obj["out"]
    values = config.as_dict()

    if out.json_output:
        out.output_json(values)
        return

    for key, value in values.items():
        click.echo(f"{key}={value if value is not None else ''}")


@config_group.command(name="set")
@click.argument("key")
@click.argument("value")
@click.pass_context
def config_set(ctx: Any, key: str, value: str) -> None:
    """Store KEY=VALUE in ~/.config/srcmirror/config."""
    out: OutputFormatter = ctx.obj["out"]
    try:
        config.save_value(key, value)
    except SrcMirrorConfigError as e:
        out.error(str(e))
        ctx.exit(1)
        return
    out.success(f"Saved {key} to {config.config_file}")


if __name__ == "__main__":
    main()
