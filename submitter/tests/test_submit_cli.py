"""Tests for the indexnow-submit command."""

import json

import httpx
import pytest
from click.testing import CliRunner

from indexnow import cli
from indexnow.client import IndexNowClient


@pytest.fixture
def submissions(monkeypatch):
    """Route every client through a MockTransport and record IndexNow posts."""
    posted = []
    state = {"status": 200, "sitemap": ""}

    def handler(request: httpx.Request) -> httpx.Response:
        if request.method == "GET":
            if request.url.path == "/sitemap.xml":
                return httpx.Response(200, text=state["sitemap"])
            return httpx.Response(404)
        posted.append(json.loads(request.content))
        return httpx.Response(state["status"])

    mock = httpx.MockTransport(handler)
    monkeypatch.setattr(cli, "IndexNowClient", lambda key: IndexNowClient(key, transport=mock))
    monkeypatch.setattr(cli.settings, "indexnow_key", "test-key")
    monkeypatch.setattr(cli.settings, "site_url", "https://umesh-malik.com")
    monkeypatch.setattr(cli.settings, "site_url_alt", "https://umesh-malik.in")
    return posted, state


def test_manual_urls_submitted_to_every_domain(submissions):
    posted, _ = submissions

    result = CliRunner().invoke(cli.main, ["--urls", "/blog/b, /blog/a,/blog/a"])

    assert result.exit_code == 0, result.output
    assert [p["host"] for p in posted] == ["umesh-malik.com", "umesh-malik.in"]
    assert posted[0]["urlList"] == ["https://umesh-malik.com/blog/a", "https://umesh-malik.com/blog/b"]


def test_dry_run_posts_nothing(submissions, monkeypatch):
    posted, _ = submissions
    monkeypatch.setattr(cli.settings, "indexnow_key", "")

    result = CliRunner().invoke(cli.main, ["--urls", "/about", "--dry-run"])

    assert result.exit_code == 0, result.output
    assert posted == []
    assert "https://umesh-malik.in/about" in result.output


def test_missing_key_is_an_error(submissions, monkeypatch):
    monkeypatch.setattr(cli.settings, "indexnow_key", "")

    result = CliRunner().invoke(cli.main, ["--urls", "/about"])

    assert result.exit_code == 1
    assert "INDEXNOW_KEY" in result.output


def test_git_diff_mode_maps_changed_files(submissions, monkeypatch):
    posted, _ = submissions
    seen = {}

    def fake_changed_files(before, repo_root):
        seen["before"] = before
        return ["portfolio/src/lib/posts/new-post.md"]

    monkeypatch.setattr(cli, "changed_files", fake_changed_files)

    result = CliRunner().invoke(cli.main, ["--before", "abc123"])

    assert result.exit_code == 0, result.output
    assert seen["before"] == "abc123"
    assert posted[0]["urlList"] == [
        "https://umesh-malik.com/blog",
        "https://umesh-malik.com/blog/new-post",
    ]


def test_no_indexable_changes_exits_cleanly(submissions, monkeypatch):
    posted, _ = submissions
    monkeypatch.setattr(cli, "changed_files", lambda before, repo_root: ["README.md"])

    result = CliRunner().invoke(cli.main, [])

    assert result.exit_code == 0
    assert posted == []
    assert "No URLs to submit." in result.output


def test_empty_diff_falls_back_to_sitemap(submissions, monkeypatch):
    posted, state = submissions
    state["sitemap"] = "<urlset><url><loc>https://umesh-malik.com/uses</loc></url></urlset>"
    monkeypatch.setattr(cli, "changed_files", lambda before, repo_root: [])

    result = CliRunner().invoke(cli.main, [])

    assert result.exit_code == 0, result.output
    assert posted[0]["urlList"] == ["https://umesh-malik.com/uses"]


def test_rejected_submission_exits_nonzero_but_tries_all_domains(submissions):
    posted, state = submissions
    state["status"] = 403

    result = CliRunner().invoke(cli.main, ["--urls", "/about"])

    assert result.exit_code == 1
    assert len(posted) == 2


def test_configured_domains_skips_blank_and_duplicates(monkeypatch):
    monkeypatch.setattr(cli.settings, "site_url", "https://umesh-malik.com")
    monkeypatch.setattr(cli.settings, "site_url_alt", "")
    assert cli.configured_domains() == ["umesh-malik.com"]

    monkeypatch.setattr(cli.settings, "site_url_alt", "https://umesh-malik.com/")
    assert cli.configured_domains() == ["umesh-malik.com"]
