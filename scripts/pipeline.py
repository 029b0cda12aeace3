"""End-to-end stats collection: harvest, reconcile, compose."""

import logging
import os
from enum import Enum

from aggregator import compose_stats
from classifier import classify_repositories
from errors import ConfigurationError
from fetcher import fetch_search_items, fetch_total_contributions, fetch_user_repos
from reconciler import reconcile_search_items

log = logging.getLogger(__name__)


class PipelineState(Enum):
    IDLE = "idle"
    HARVESTING = "harvesting"
    RECONCILING = "reconciling"
    COMPOSED = "composed"
    FAILED = "failed"


def resolve_credentials(config: dict) -> tuple[str, str]:
    """Return (token, username) or raise ConfigurationError."""
    token = (os.environ.get("GITHUB_TOKEN") or "").strip()
    username = (config.get("username") or os.environ.get("GITHUB_USERNAME") or "").strip()

    missing = []
    if not token:
        missing.append("GITHUB_TOKEN")
    if not username:
        missing.append("username")
    if missing:
        raise ConfigurationError(f"Missing GitHub configuration: {', '.join(missing)}")

    return token, username


class StatsPipeline:
    """One stats collection per ``run()``; each call starts from idle."""

    def __init__(self, config: dict = None):
        self.config = config or {}
        self.state = PipelineState.IDLE
        self.warnings = []

    def _enter(self, state: PipelineState):
        log.debug(f"Pipeline {self.state.value} -> {state.value}")
        self.state = state

    def run(self) -> dict:
        self.state = PipelineState.IDLE
        self.warnings = []

        token, username = resolve_credentials(self.config)

        try:
            self._enter(PipelineState.HARVESTING)
            log.info(f"Fetching contributions for {username}...")
            contributions = fetch_total_contributions(token, username, self.config)
            log.info(f"Fetching repositories for {username}...")
            repos = fetch_user_repos(token, username, self.config)
            partitions = classify_repositories(repos, username)

            self._enter(PipelineState.RECONCILING)
            log.info("Searching pull requests and issues...")
            search = fetch_search_items(token, username, self.config)
            self.warnings = [r["warning"] for r in search.values() if r["warning"] is not None]
            pull_requests = reconcile_search_items(search["pull_requests"]["items"], partitions)
            issues = reconcile_search_items(search["issues"]["items"], partitions)

            stats = compose_stats(contributions, partitions, pull_requests, issues)
        except Exception:
            self._enter(PipelineState.FAILED)
            raise

        self._enter(PipelineState.COMPOSED)
        log.info(
            f"Summary: {contributions} contributions, "
            f"{stats['repositories']['overall']} repos, "
            f"{stats['pullRequests']['overall']} PRs, "
            f"{stats['issues']['overall']} issues"
        )
        if self.warnings:
            log.warning(f"Completed with {len(self.warnings)} degraded search(es)")
        return stats


def collect_stats(config: dict = None) -> dict:
    """Run the pipeline once and return the summary."""
    return StatsPipeline(config).run()
