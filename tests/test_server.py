"""Tests for the HTTP endpoint."""

import runpy
import sys
from datetime import datetime, timezone
from pathlib import Path
from unittest.mock import Mock, patch

import pytest
import requests

sys.path.insert(0, "scripts")

from aggregator import compose_stats
from classifier import classify_repositories
from errors import ConfigurationError, UpstreamError
from models import CountTable, Repository
from server import create_app


def make_stats():
    repos = [Repository("a", "alice", False, stars=2, languages=(("Go", 10),))]
    return compose_stats(
        5,
        classify_repositories(repos, "alice"),
        CountTable(),
        CountTable(),
        now=datetime(2025, 2, 3, tzinfo=timezone.utc),
    )


@pytest.fixture
def client():
    app = create_app({"username": "alice", "api": {}})
    app.config["TESTING"] = True
    return app.test_client()


class TestStatsEndpoint:
    """Test /api/github-stats."""

    @patch("server.StatsPipeline")
    def test_success(self, mock_pipeline, client):
        mock_pipeline.return_value.run.return_value = make_stats()

        resp = client.get("/api/github-stats")

        assert resp.status_code == 200
        assert resp.headers["Cache-Control"] == "no-cache"
        data = resp.get_json()
        assert data["contributions"] == 5
        assert data["repositories"]["personal"] == {"public": 1, "private": 0, "total": 1}

    @patch("server.StatsPipeline")
    def test_missing_configuration(self, mock_pipeline, client):
        mock_pipeline.return_value.run.side_effect = ConfigurationError("Missing GitHub configuration: GITHUB_TOKEN")

        resp = client.get("/api/github-stats")

        assert resp.status_code == 401
        assert resp.get_json() == {"error": "No GitHub username or token found."}

    @patch("server.StatsPipeline")
    def test_upstream_failure(self, mock_pipeline, client):
        mock_pipeline.return_value.run.side_effect = UpstreamError("GitHub GraphQL error: 502", status=502)

        resp = client.get("/api/github-stats")

        assert resp.status_code == 500
        assert resp.get_json() == {"error": "Failed to fetch GitHub stats"}

    @patch("fetcher.requests.post")
    def test_non_json_graphql_body(self, mock_post, client, monkeypatch):
        monkeypatch.setenv("GITHUB_TOKEN", "t")
        mock_post.return_value = Mock(status_code=200, headers={})
        mock_post.return_value.json.side_effect = requests.exceptions.JSONDecodeError("Expecting value", "<html>", 0)

        resp = client.get("/api/github-stats")

        assert resp.status_code == 500
        assert resp.get_json() == {"error": "Failed to fetch GitHub stats"}


class TestPage:
    """Test the rendered page route."""

    @patch("server.StatsPipeline")
    def test_renders_view(self, mock_pipeline, client):
        mock_pipeline.return_value.run.return_value = make_stats()

        resp = client.get("/?category=personal&visibility=public")

        assert resp.status_code == 200
        html = resp.get_data(as_text=True)
        assert "personal-public-toggle" in html
        assert 'id="stars-count">2<' in html

    @patch("server.StatsPipeline")
    def test_error_page(self, mock_pipeline, client):
        mock_pipeline.return_value.run.side_effect = UpstreamError("GitHub GraphQL error: 502", status=502)

        resp = client.get("/")

        assert resp.status_code == 500
        assert "Failed to load GitHub statistics" in resp.get_data(as_text=True)


class TestHealthz:

    def test_reports_token(self, client, monkeypatch):
        monkeypatch.setenv("GITHUB_TOKEN", "t")
        assert client.get("/healthz").get_json() == {"ok": True, "token_configured": True}

        monkeypatch.delenv("GITHUB_TOKEN")
        assert client.get("/healthz").get_json() == {"ok": True, "token_configured": False}


class TestMain:
    """Test running the server module directly."""

    @patch("flask.Flask.run")
    @patch("generate_stats.setup_logging")
    def test_uses_shared_logging_setup(self, mock_setup, mock_run, monkeypatch):
        monkeypatch.delenv("PORT", raising=False)

        runpy.run_path(str(Path(__file__).parent.parent / "scripts" / "server.py"), run_name="__main__")

        mock_setup.assert_called_once_with()
        assert mock_run.call_args.kwargs["port"] == 5000
