"""CLI interface for pyspaces."""

import logging
from pathlib import Path
from typing import Any, Callable, Optional

import click

from . import __version__
from .api import SpacesClient
from .config import SpacesCredentials, config
from .exceptions import SpacesAPIError, SpacesConfigError, SpacesError
from .output import OutputFormatter
from .utils import DEFAULT_CONTENT_DIR, format_size, format_timestamp

logger = logging.getLogger(__name__)


def credential_options(func: Callable) -> Callable:
    """Add options overriding the configured credentials."""
    options = [
        click.option("--region", help="Spaces region, e.g. nyc3 [SPACES_REGION]"),
        click.option("--bucket", help="Bucket name [SPACES_NAME]"),
        click.option("--key", help="Access key ID [SPACES_KEY]"),
        click.option("--secret", help="Secret access key [SPACES_SECRET]"),
        click.option("--endpoint", help="Endpoint URL override [SPACES_ENDPOINT]"),
    ]
    for option in reversed(options):
        func = option(func)
    return func


def create_client(
    ctx: Any,
    out: OutputFormatter,
    region: Optional[str],
    bucket: Optional[str],
    key: Optional[str],
    secret: Optional[str],
    endpoint: Optional[str],
) -> SpacesClient:
    """Resolve credentials and build a client, exiting on missing config."""
    try:
        credentials = config.credentials(
            region=region, name=bucket, key=key, secret=secret, endpoint=endpoint
        )
    except SpacesConfigError as e:
        out.error(str(e))
        ctx.exit(1)
        raise  # Unreachable, but helps type checker
    logger.debug(f"Using {credentials!r}")
    return SpacesClient(credentials=credentials)


@click.group()
@click.option("--quiet", "-q", is_flag=True, help="Suppress non-essential output")
@click.option("--json", is_flag=True, help="Output in JSON format")
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    help="Enable verbose/debug logging output",
)
@click.version_option(version=__version__, prog_name="pyspaces")
@click.pass_context
def main(ctx: Any, quiet: bool, json: bool, verbose: bool) -> None:
    """PySpaces - Deploy a static content directory to DigitalOcean Spaces."""
    ctx.ensure_object(dict)
    ctx.obj["out"] = OutputFormatter(json_output=json, quiet=quiet)
    ctx.obj["verbose"] = verbose

    # Configure logging based on verbose flag
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            datefmt="%H:%M:%S",
        )
        logging.getLogger("pyspaces").setLevel(logging.DEBUG)
        # botocore is very chatty at DEBUG
        logging.getLogger("botocore").setLevel(logging.INFO)
    else:
        # Set default logging level to WARNING to suppress debug/info messages
        logging.basicConfig(level=logging.WARNING)


@main.command()
@click.option("--region", prompt="Spaces region (e.g. nyc3)", help="Spaces region")
@click.option("--bucket", prompt="Bucket name", help="Bucket name")
@click.option("--key", prompt="Access key ID", help="Access key ID")
@click.option(
    "--secret", prompt="Secret access key", hide_input=True, help="Secret access key"
)
@click.option("--endpoint", default=None, help="Endpoint URL override")
@click.pass_context
def init(
    ctx: Any,
    region: str,
    bucket: str,
    key: str,
    secret: str,
    endpoint: Optional[str],
) -> None:
    """Initialize pyspaces configuration.

    Stores your credentials in ~/.config/pyspaces/config for future use.
    """
    out: OutputFormatter = ctx.obj["out"]

    credentials = SpacesCredentials(
        region=region, name=bucket, key=key, secret=secret, endpoint=endpoint
    )

    try:
        out.info("Validating credentials...")
        client = SpacesClient(credentials=credentials)
        try:
            next(client.iter_objects(page_size=1, max_items=1), None)
            out.success("✓ Credentials are valid")
        except SpacesAPIError as e:
            out.error(f"Credential validation failed: {e}")
            if not click.confirm("Save credentials anyway?", default=False):
                out.warning("Configuration cancelled.")
                ctx.exit(1)
        finally:
            client.close()

        config.save_credentials(credentials)
        out.print_summary(
            "Initialization Complete",
            [
                ("Status", "✓ Configuration saved successfully"),
                ("Config file", str(config.get_config_path())),
                ("Bucket", f"{bucket} ({credentials.endpoint_url})"),
            ],
        )
    except OSError as e:
        out.error(f"Initialization failed: {e}")
        ctx.exit(1)


@main.command()
@click.argument(
    "base_dir", type=click.Path(exists=True, file_okay=False, path_type=Path)
)
@click.option(
    "--content-dir",
    default=DEFAULT_CONTENT_DIR,
    show_default=True,
    help="Directory under BASE_DIR that is mirrored to the bucket",
)
@click.option(
    "--dry-run", is_flag=True, help="Show what would be synced without syncing"
)
@click.option(
    "--workers",
    "-j",
    type=int,
    default=1,
    help="Number of parallel workers (default: 1)",
)
@click.option(
    "--overwrite",
    is_flag=True,
    help="Replace changed objects with a single upload instead of delete+upload",
)
@click.option(
    "--lenient",
    is_flag=True,
    help="Treat failed existence checks and fetches as missing files and skip "
    "unreadable local paths",
)
@click.option(
    "--timeout",
    type=float,
    default=None,
    help="Abort the sync after this many seconds",
)
@click.option(
    "--hash-threshold",
    type=int,
    default=32,
    show_default=True,
    help="Compare files of at least this size (MB) by SHA-256, 0 to disable",
)
@click.option("--no-progress", is_flag=True, help="Disable per-file output")
@credential_options
@click.pass_context
def sync(
    ctx: Any,
    base_dir: Path,
    content_dir: str,
    dry_run: bool,
    workers: int,
    overwrite: bool,
    lenient: bool,
    timeout: Optional[float],
    hash_threshold: int,
    no_progress: bool,
    region: Optional[str],
    bucket: Optional[str],
    key: Optional[str],
    secret: Optional[str],
    endpoint: Optional[str],
) -> None:
    """Mirror BASE_DIR/content into the bucket.

    Remote objects without a local counterpart are deleted, new files are
    uploaded and changed files are replaced. Uploaded objects are public.

    Examples:
        pyspaces sync ./site                    # Sync ./site/content
        pyspaces sync ./site --dry-run          # Preview changes
        pyspaces sync ./site -j 8               # Eight parallel workers
        pyspaces sync . --content-dir public    # Sync ./public
    """
    from .sync import SyncEngine

    out: OutputFormatter = ctx.obj["out"]

    if workers < 1:
        out.error("Workers must be at least 1")
        ctx.exit(1)
    if hash_threshold < 0:
        out.error("Hash threshold cannot be negative")
        ctx.exit(1)
    if timeout is not None and timeout <= 0:
        out.error("Timeout must be positive")
        ctx.exit(1)

    client = create_client(ctx, out, region, bucket, key, secret, endpoint)

    try:
        engine_out = OutputFormatter(
            json_output=out.json_output, quiet=no_progress or out.quiet
        )
        engine = SyncEngine(client, engine_out, lenient=lenient)

        stats = engine.sync(
            base_dir,
            content_dir=content_dir,
            dry_run=dry_run,
            max_workers=workers,
            overwrite=overwrite,
            hash_threshold=hash_threshold * 1024 * 1024 if hash_threshold else None,
            timeout=timeout,
        )

        if out.json_output:
            out.output_json(stats)

    except KeyboardInterrupt:
        out.warning("\nSync cancelled by user")
        ctx.exit(130)
    except SpacesAPIError as e:
        out.error(f"API error: {e}")
        ctx.exit(1)
    except (SpacesError, ValueError, OSError) as e:
        out.error(str(e))
        ctx.exit(1)
    finally:
        client.close()


@main.command("ls")
@click.option("--prefix", "-p", default="", help="Only list keys with this prefix")
@credential_options
@click.pass_context
def ls(
    ctx: Any,
    prefix: str,
    region: Optional[str],
    bucket: Optional[str],
    key: Optional[str],
    secret: Optional[str],
    endpoint: Optional[str],
) -> None:
    """List objects in the bucket (directory markers are hidden)."""
    out: OutputFormatter = ctx.obj["out"]
    client = create_client(ctx, out, region, bucket, key, secret, endpoint)

    try:
        objects = [
            o for o in client.list_objects(prefix=prefix) if not o.is_directory_marker
        ]
    except SpacesAPIError as e:
        out.error(f"API error: {e}")
        ctx.exit(1)
        return
    finally:
        client.close()

    if out.json_output:
        out.output_json(
            [
                {
                    "key": o.key,
                    "size": o.size,
                    "etag": o.etag,
                    "last_modified": format_timestamp(o.last_modified),
                }
                for o in objects
            ]
        )
        return

    if not objects:
        out.info("No objects found")
        return

    out.print_table(
        f"{client.bucket} ({len(objects)} object(s))",
        ["Key", "Size", "Last Modified"],
        [
            [o.key, format_size(o.size), format_timestamp(o.last_modified) or "-"]
            for o in objects
        ],
    )
