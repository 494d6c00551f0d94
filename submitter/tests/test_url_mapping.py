"""Tests for mapping changed files to public URL paths."""

import subprocess

import pytest

from indexnow import changes
from indexnow.changes import (
    RETRO_PORTFOLIO_PAGES,
    STATIC_PAGES,
    blog_post_paths,
    changed_files,
    source_file_to_urls,
    urls_for_changes,
)


@pytest.fixture
def repo(tmp_path):
    posts = tmp_path / "portfolio" / "src" / "lib" / "posts"
    posts.mkdir(parents=True)
    (posts / "first-post.md").write_text("# First")
    (posts / "second-post.md").write_text("# Second")
    (posts / "notes.txt").write_text("not a post")
    return tmp_path


def test_blog_post_maps_to_post_and_listing():
    assert source_file_to_urls("portfolio/src/lib/posts/react-hooks.md") == [
        "/blog/react-hooks",
        "/blog",
    ]


@pytest.mark.parametrize(
    "file_path,expected",
    [
        ("portfolio/src/routes/about/+page.svelte", ["/about"]),
        ("portfolio/src/routes/projects/retro-portfolio/+page.ts", ["/projects/retro-portfolio"]),
        ("portfolio/src/routes/blog/[slug]/+page.server.ts", ["/blog"]),
        ("portfolio/src/routes/blog-sitemap.xml/+page.ts", []),
        ("portfolio/src/routes/feed.json/+page.ts", []),
    ],
)
def test_route_pages(file_path, expected):
    assert source_file_to_urls(file_path) == expected


@pytest.mark.parametrize(
    "file_path",
    [
        "portfolio/src/routes/+layout.svelte",
        "portfolio/src/app.css",
        "portfolio/src/app.html",
        "portfolio/src/lib/components/layout/Header.svelte",
        "portfolio/src/lib/config/site.ts",
        "portfolio/src/lib/components/SEO.svelte",
    ],
)
def test_site_wide_changes_submit_static_pages(file_path):
    assert source_file_to_urls(file_path) == STATIC_PAGES


def test_blog_components_submit_listing_and_every_post(repo):
    urls = source_file_to_urls("portfolio/src/lib/components/blog/Card.svelte", repo)

    assert urls == ["/blog", "/blog/first-post", "/blog/second-post"]


def test_static_assets():
    assert source_file_to_urls("portfolio/static/images/me.png") == ["/"]
    assert source_file_to_urls("portfolio/static/robots.txt") == []
    assert source_file_to_urls("portfolio/static/manifest.json") == []


def test_frontend_changes_map_to_retro_portfolio():
    assert source_file_to_urls("frontend/src/components/DesktopApp.tsx") == RETRO_PORTFOLIO_PAGES


def test_unrelated_files_map_to_nothing():
    assert source_file_to_urls("README.md") == []
    assert source_file_to_urls("portfolio/worker/index.ts") == []


def test_blog_post_paths_from_inside_portfolio(tmp_path):
    posts = tmp_path / "src" / "lib" / "posts"
    posts.mkdir(parents=True)
    (posts / "only.md").write_text("")

    assert blog_post_paths(tmp_path) == ["/blog/only"]


def test_blog_post_paths_missing_dir(tmp_path):
    assert blog_post_paths(tmp_path) == []


def test_urls_for_changes_deduplicates():
    urls = urls_for_changes(
        [
            "portfolio/src/lib/posts/a.md",
            "portfolio/src/lib/posts/b.md",
            "README.md",
        ]
    )

    assert urls == ["/blog/a", "/blog", "/blog/b"]


def test_changed_files_parses_git_output(monkeypatch):
    calls = []

    def fake_run(cmd, **kwargs):
        calls.append(cmd)
        return subprocess.CompletedProcess(cmd, 0, stdout="a.md\n\nportfolio/b.md\n", stderr="")

    monkeypatch.setattr(changes.subprocess, "run", fake_run)

    assert changed_files("abc123") == ["a.md", "portfolio/b.md"]
    assert calls == [["git", "diff", "--name-only", "abc123", "HEAD"]]


def test_changed_files_defaults_to_previous_commit(monkeypatch):
    calls = []

    def fake_run(cmd, **kwargs):
        calls.append(cmd)
        return subprocess.CompletedProcess(cmd, 0, stdout="", stderr="")

    monkeypatch.setattr(changes.subprocess, "run", fake_run)

    assert changed_files() == []
    assert calls[0][3] == "HEAD~1"


def test_changed_files_git_failure_yields_nothing(monkeypatch):
    def fake_run(cmd, **kwargs):
        raise subprocess.CalledProcessError(128, cmd, stderr="fatal: bad revision")

    monkeypatch.setattr(changes.subprocess, "run", fake_run)

    assert changed_files("nope") == []
