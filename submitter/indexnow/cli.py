"""Command-line entry point: work out changed pages and submit them to IndexNow.

    indexnow-submit                         # auto-detect from git (HEAD~1..HEAD)
    indexnow-submit --before <sha>          # diff against a specific commit
    indexnow-submit --sitemap               # every URL from the sitemaps
    indexnow-submit --urls "/blog/my-post"  # specific paths, comma separated
    indexnow-submit --dry-run               # print instead of submitting
"""

import asyncio
from pathlib import Path
from typing import Optional
from urllib.parse import urlparse

import click

from indexnow.changes import changed_files, urls_for_changes
from indexnow.client import IndexNowClient, SiteClient
from indexnow.config import settings


def configured_domains() -> list[str]:
    domains: list[str] = []
    for url in (settings.site_url, settings.site_url_alt):
        host = urlparse(url).hostname if url else None
        if host and host not in domains:
            domains.append(host)
    return domains


async def resolve_paths(
    client: SiteClient,
    domain: str,
    before: Optional[str],
    urls: Optional[str],
    use_sitemap: bool,
    repo_root: Path,
) -> list[str]:
    """Pick the URL paths to submit. Priority: --urls, --sitemap, git diff."""
    if urls:
        paths = [u.strip() for u in urls.split(",") if u.strip()]
        click.echo(f"[mode] Manual URLs: {len(paths)} paths provided")
        return paths

    if use_sitemap:
        click.echo("[mode] Sitemap: fetching all URLs from sitemaps...")
        paths = await client.fetch_sitemap_paths(domain)
        click.echo(f"  Found {len(paths)} URLs from sitemaps")
        return paths

    click.echo("[mode] Git diff detection")
    files = changed_files(before, repo_root)
    if not files:
        click.echo("  No changed files detected. Falling back to sitemap...")
        paths = await client.fetch_sitemap_paths(domain)
        click.echo(f"  Found {len(paths)} URLs from sitemaps")
        return paths

    click.echo(f"  {len(files)} files changed:")
    for f in files:
        click.echo(f"    {f}")

    paths = urls_for_changes(files, repo_root)
    if paths:
        click.echo(f"\n  Mapped to {len(paths)} unique URL paths:")
        for p in paths:
            click.echo(f"    {p}")
    else:
        click.echo("\n  No indexable page changes detected.")
    return paths


async def run(
    before: Optional[str],
    urls: Optional[str],
    use_sitemap: bool,
    dry_run: bool,
    repo_root: Path,
) -> bool:
    """Resolve and submit. Returns False when any submission failed."""
    domains = configured_domains()
    if not domains:
        raise click.ClickException("No site domains configured (SITE_URL / SITE_URL_ALT)")

    client = IndexNowClient(settings.indexnow_key)
    try:
        paths = await resolve_paths(client, domains[0], before, urls, use_sitemap, repo_root)
        paths = sorted(set(paths))
        if not paths:
            click.echo("\nNo URLs to submit.")
            return True

        click.echo(
            f"\n[IndexNow] Submitting {len(paths)} URL paths for {len(domains)} domains...\n"
        )

        all_ok = True
        for domain in domains:
            if dry_run:
                click.echo(f"[dry-run] Would submit {len(paths)} URLs to IndexNow for {domain}:")
                for p in paths:
                    click.echo(f"  https://{domain}{p}")
                continue

            for result in await client.submit(domain, paths):
                if result.ok:
                    click.echo(
                        f"  {domain} -> HTTP {result.status_code} ({result.detail}) "
                        f"[{result.url_count} URLs]"
                    )
                else:
                    all_ok = False
                    status = f"HTTP {result.status_code}" if result.status_code else "FAILED"
                    click.secho(
                        f"  {domain} -> {status} ({result.detail}) [{result.url_count} URLs]",
                        fg="red",
                        err=True,
                    )
        return all_ok
    finally:
        await client.close()


def source_options(func):
    """The URL-source flags shared by every submitter command."""
    options = [
        click.option("--before", metavar="SHA", help="Diff against this commit instead of HEAD~1."),
        click.option("--urls", help="Comma-separated URL paths to submit."),
        click.option(
            "--sitemap", "use_sitemap", is_flag=True, help="Submit every URL from the sitemaps."
        ),
        click.option("--dry-run", is_flag=True, help="Print what would be submitted."),
        click.option(
            "--repo-root",
            type=click.Path(file_okay=False, path_type=Path),
            default=".",
            show_default=True,
            help="Repository root used for git diff and the posts directory.",
        ),
    ]
    for option in reversed(options):
        func = option(func)
    return func


@click.command()
@source_options
def main(before, urls, use_sitemap, dry_run, repo_root):
    """Submit changed site pages to IndexNow (Bing, Yandex, Seznam, Naver)."""
    if not settings.indexnow_key and not dry_run:
        raise click.ClickException("INDEXNOW_KEY is not set")

    click.echo("=== IndexNow Submission ===\n")
    ok = asyncio.run(run(before, urls, use_sitemap, dry_run, repo_root))
    click.echo("\n=== Done ===")
    if not ok:
        raise SystemExit(1)


if __name__ == "__main__":
    main()
