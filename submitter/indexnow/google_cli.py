"""Command-line entry point: notify the Google Indexing API about changed pages.

    google-indexing-submit                         # auto-detect from git (HEAD~1..HEAD)
    google-indexing-submit --before <sha>          # diff against a specific commit
    google-indexing-submit --sitemap               # every URL from the sitemaps
    google-indexing-submit --urls "/blog/my-post"  # specific paths, comma separated
    google-indexing-submit --type URL_DELETED      # notify removal (default URL_UPDATED)
    google-indexing-submit --dry-run               # print instead of submitting

Credentials come from SERVICE_ACCOUNT (JSON string, CI) or service_account.json.
"""

import asyncio
from pathlib import Path
from typing import Optional

import click

from indexnow.cli import configured_domains, resolve_paths, source_options
from indexnow.google_indexing import (
    NOTIFICATION_TYPES,
    GoogleIndexingClient,
    ServiceAccountError,
    get_access_token,
    load_service_account_info,
)


async def run(
    access_token: str,
    notification_type: str,
    before: Optional[str],
    urls: Optional[str],
    use_sitemap: bool,
    dry_run: bool,
    repo_root: Path,
) -> tuple[int, int]:
    """Resolve and publish. Returns (succeeded, failed) URL counts."""
    domains = configured_domains()
    if not domains:
        raise click.ClickException("No site domains configured (SITE_URL / SITE_URL_ALT)")

    client = GoogleIndexingClient(access_token)
    try:
        paths = await resolve_paths(client, domains[0], before, urls, use_sitemap, repo_root)
        paths = sorted(set(paths))
        if not paths:
            click.echo("\nNo URLs to submit.")
            return 0, 0

        click.echo(
            f"\n[submit] Sending {len(paths)} URLs x {len(domains)} domains "
            "to Google Indexing API..."
        )

        succeeded = failed = 0
        for domain in domains:
            click.echo(f"\n  --- {domain} ---")
            if dry_run:
                for p in paths:
                    click.echo(f"  [dry-run] {notification_type} -> https://{domain}{p}")
                succeeded += len(paths)
                continue

            for path, result in zip(paths, await client.publish(domain, paths, notification_type)):
                url = f"https://{domain}{path}"
                if result.ok:
                    succeeded += 1
                    click.echo(f"  OK {url} -> {result.status_code} ({result.detail})")
                else:
                    failed += 1
                    status = result.status_code or "FAILED"
                    click.secho(f"  FAIL {url} -> {status}: {result.detail}", fg="red", err=True)
        return succeeded, failed
    finally:
        await client.close()


@click.command()
@source_options
@click.option(
    "--type",
    "notification_type",
    type=click.Choice(NOTIFICATION_TYPES),
    default="URL_UPDATED",
    show_default=True,
    help="Notification sent for every URL.",
)
def main(before, urls, use_sitemap, dry_run, repo_root, notification_type):
    """Submit changed site pages to the Google Indexing API."""
    click.echo("=== Google Indexing API Submission ===\n")
    click.echo(f"[type] {notification_type}")

    access_token = ""
    if dry_run:
        click.echo("\n[auth] Skipped for dry run.\n")
    else:
        click.echo("\n[auth] Loading service account...")
        try:
            info = load_service_account_info()
            click.echo(f"  Using service account: {info.get('client_email', 'unknown')}")
            access_token = get_access_token(info)
        except ServiceAccountError as exc:
            raise click.ClickException(str(exc)) from exc
        click.echo("  Access token obtained.\n")

    succeeded, failed = asyncio.run(
        run(access_token, notification_type, before, urls, use_sitemap, dry_run, repo_root)
    )
    click.echo("\n=== Done ===")
    click.echo(f"  Total: {succeeded} succeeded, {failed} failed")
    if failed:
        raise SystemExit(1)


if __name__ == "__main__":
    main()
