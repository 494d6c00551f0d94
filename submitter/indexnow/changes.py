"""Map changed repository files to the public URL paths they affect."""

import re
import subprocess
from pathlib import Path
from typing import Optional

import structlog

from indexnow.config import settings

log = structlog.get_logger(__name__)

STATIC_PAGES = [
    "",
    "/blog",
    "/projects",
    "/about",
    "/resume",
    "/faq",
    "/contact",
    "/uses",
    "/resources",
    "/ai-summary",
    "/press",
    "/projects/retro-portfolio",
    "/projects/retro-portfolio/about",
    "/projects/retro-portfolio/experience",
    "/projects/retro-portfolio/projects",
    "/projects/retro-portfolio/skills",
    "/projects/retro-portfolio/contact",
]

RETRO_PORTFOLIO_PAGES = [p for p in STATIC_PAGES if p.startswith("/projects/retro-portfolio")]

_POST = re.compile(r"^portfolio/src/lib/posts/(.+)\.md$")
_ROUTE_PAGE = re.compile(r"^portfolio/src/routes/(.+?)/\+page\.(svelte|ts|server\.ts)$")
_SITE_WIDE = [
    re.compile(r"^portfolio/src/routes/\+layout"),
    re.compile(r"^portfolio/src/app\.(html|css)$"),
    re.compile(r"^portfolio/src/lib/components/layout/"),
    re.compile(r"^portfolio/src/lib/config/site\.ts$"),
    re.compile(r"^portfolio/src/lib/components/.*(SEO|seo)"),
]
_BLOG_WIDE = [
    re.compile(r"^portfolio/src/lib/utils/blog\.ts$"),
    re.compile(r"^portfolio/src/lib/components/blog/"),
]
_NON_PAGE_SUFFIXES = (".xml", ".json", ".txt")


def blog_post_paths(repo_root: Path = Path(".")) -> list[str]:
    """/blog/<slug> for every markdown post in the posts directory."""
    candidates = [repo_root / settings.posts_dir]
    parts = Path(settings.posts_dir).parts
    if parts and parts[0] == "portfolio":
        # Running from inside portfolio/
        candidates.append(repo_root.joinpath(*parts[1:]))

    for posts_dir in candidates:
        if posts_dir.is_dir():
            return sorted(f"/blog/{p.stem}" for p in posts_dir.glob("*.md"))
    return []


def source_file_to_urls(file_path: str, repo_root: Path = Path(".")) -> list[str]:
    """Public URL paths (no domain) affected by a change to `file_path`."""
    post = _POST.match(file_path)
    if post:
        return [f"/blog/{post.group(1)}", "/blog"]

    route = _ROUTE_PAGE.match(file_path)
    if route:
        route_path = route.group(1)
        # blog/[slug] pages map onto their listing page
        if "[" in route_path:
            route_path = re.sub(r"/\[.*$", "", route_path)
        if any(suffix in route_path for suffix in _NON_PAGE_SUFFIXES):
            return []
        return [f"/{route_path}"]

    if any(p.match(file_path) for p in _SITE_WIDE):
        return list(STATIC_PAGES)

    if any(p.match(file_path) for p in _BLOG_WIDE):
        return ["/blog", *blog_post_paths(repo_root)]

    if file_path.startswith("portfolio/static/"):
        if file_path.endswith(_NON_PAGE_SUFFIXES):
            return []
        return ["/"]

    if file_path.startswith("frontend/"):
        return list(RETRO_PORTFOLIO_PAGES)

    return []


def changed_files(before: Optional[str] = None, repo_root: Path = Path(".")) -> list[str]:
    """Files changed between `before` (default HEAD~1) and HEAD.

    A failing git call yields no files; the caller falls back to the sitemap.
    """
    ref = before or "HEAD~1"
    try:
        result = subprocess.run(
            ["git", "diff", "--name-only", ref, "HEAD"],
            cwd=repo_root,
            capture_output=True,
            text=True,
            check=True,
        )
    except (OSError, subprocess.CalledProcessError) as exc:
        stderr = getattr(exc, "stderr", None) or str(exc)
        log.warning("git_diff_failed", ref=ref, error=stderr.strip())
        return []

    return [line for line in result.stdout.splitlines() if line.strip()]


def urls_for_changes(files: list[str], repo_root: Path = Path(".")) -> list[str]:
    """Union of the URL paths for every changed file, in first-seen order."""
    urls: dict[str, None] = {}
    for file_path in files:
        for url in source_file_to_urls(file_path, repo_root):
            urls[url] = None
    return list(urls)
