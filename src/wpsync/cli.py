"""CLI entry point for wpsync."""

import sys
from pathlib import Path

import click

from wpsync.config import DEFAULT_CONFIG_FILE, ConfigError, create_default_config, load_config
from wpsync.fingerprints import FingerprintStoreError
from wpsync.manifest import ManifestFetchError, ManifestParseError, fetch_manifest, parse_manifest
from wpsync.sync import EntryState, run_sync
from wpsync.utils import get_logger, setup_logging


def _load_config_or_exit(config: str, logger):
    """Load the config file, exiting with status 1 on any problem."""
    try:
        logger.info(f"Loading config from {config}")
        return load_config(Path(config))
    except FileNotFoundError:
        logger.error(f"Config file not found: {config}")
        logger.info("Run 'wpsync init' to create a default config file")
        sys.exit(1)
    except ConfigError as e:
        logger.error(f"Invalid config: {e}")
        sys.exit(1)


@click.group()
@click.option("-v", "--verbose", is_flag=True, help="Enable verbose (debug) output")
@click.option("-q", "--quiet", is_flag=True, help="Only show warnings and errors")
@click.version_option(package_name="wpsync")
@click.pass_context
def cli(ctx: click.Context, verbose: bool, quiet: bool):
    """wpsync - publish Markdown from a manifest to WordPress pages."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["quiet"] = quiet
    setup_logging(verbose=verbose, quiet=quiet)


@cli.command()
@click.option("--config", "-c", default=DEFAULT_CONFIG_FILE, help="Config file path")
@click.option("--force", is_flag=True, help="Publish every entry, even unchanged ones")
@click.option("--dry-run", is_flag=True, help="Show what would be published without writing")
@click.option("--hash-file", default=None, help="Override the fingerprint file path")
@click.pass_context
def sync(ctx: click.Context, config: str, force: bool, dry_run: bool, hash_file: str | None):
    """Publish changed Markdown documents to WordPress."""
    logger = get_logger()

    cfg = _load_config_or_exit(config, logger)
    if hash_file:
        cfg.hash_file = Path(hash_file)

    try:
        report = run_sync(cfg, force=force, dry_run=dry_run)
    except FingerprintStoreError as e:
        logger.error(f"Corrupt fingerprint file: {e}")
        logger.info(f"Repair or remove {cfg.hash_file} to republish everything")
        sys.exit(1)
    except (ManifestFetchError, ManifestParseError) as e:
        logger.error(f"Manifest error: {e}")
        sys.exit(1)

    for outcome in report.outcomes:
        if outcome.state in (EntryState.FETCH_FAILED, EntryState.PUBLISH_FAILED):
            click.echo(f"  FAILED  {outcome.label}: {outcome.message}")

    if not report.ok:
        sys.exit(2)


@cli.command("list")
@click.option("--config", "-c", default=DEFAULT_CONFIG_FILE, help="Config file path")
@click.pass_context
def list_entries(ctx: click.Context, config: str):
    """List manifest entries that would be synced."""
    logger = get_logger()

    cfg = _load_config_or_exit(config, logger)

    try:
        data = fetch_manifest(cfg.source_url, timeout=cfg.timeout, user_agent=cfg.user_agent)
        entries, problems = parse_manifest(data, raw_github_urls=cfg.raw_github_urls)
    except (ManifestFetchError, ManifestParseError) as e:
        logger.error(f"Manifest error: {e}")
        sys.exit(1)

    click.echo(f"Found {len(entries)} entries:\n")

    for entry in entries:
        collection = entry.collection or cfg.collection
        if entry.content_id is not None:
            click.echo(f"  {entry.slug}  ({collection}/{entry.content_id})")
        else:
            parent = entry.parent_slug or "-"
            click.echo(f"  {entry.slug}  (parent: {parent}, order: {entry.order})")
        click.echo(f"    <- {entry.source_url}")
        click.echo()

    if problems:
        click.echo(f"Invalid entries ({len(problems)}):\n")
        for problem in problems:
            click.echo(f"  {problem.label}: {problem.reason}")


@cli.command()
@click.option("--wordpress-domain", prompt="WordPress site URL", help="WordPress site URL")
@click.option("--source-url", prompt="Manifest URL", help="URL of the manifest JSON")
@click.option("--output", "-o", default=DEFAULT_CONFIG_FILE, help="Output config file path")
@click.pass_context
def init(ctx: click.Context, wordpress_domain: str, source_url: str, output: str):
    """Create a default config file."""
    logger = get_logger()

    output_path = Path(output)

    if output_path.exists():
        if not click.confirm(f"{output} already exists. Overwrite?"):
            logger.info("Aborted")
            sys.exit(0)

    config_content = create_default_config(wordpress_domain, source_url)
    output_path.write_text(config_content, encoding="utf-8")

    logger.info(f"Created {output}")
    logger.info("Set 'username' and 'apikey' (an application password) in the config file")
    logger.info("Then run 'wpsync sync' to start publishing")


def main():
    """Entry point for the CLI."""
    cli()


if __name__ == "__main__":
    main()
