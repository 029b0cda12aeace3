"""Tests for stats composition."""

import sys
from datetime import datetime, timezone

import pytest

sys.path.insert(0, "scripts")

from aggregator import breakdown_for, compose_stats
from classifier import classify_repositories
from models import CountTable, Ownership, Repository, Visibility

NOW = datetime(2025, 1, 27, 12, 0, tzinfo=timezone.utc)


def make_repos():
    return [
        Repository("site", "alice", False, stars=5, languages=(("JavaScript", 80), ("CSS", 20))),
        Repository("notes", "alice", True, stars=2, languages=(("JavaScript", 10),)),
        Repository("lib", "acme", False, stars=40, languages=(("Rust", 1000), ("Shell", 5))),
        Repository("infra", "acme", True, stars=0, languages=(("HCL", 300),)),
    ]


def make_counts(cells):
    counts = CountTable()
    for ownership, visibility, n in cells:
        for _ in range(n):
            counts.increment(ownership, visibility)
    return counts


def compose(repos=None, prs=None, issues=None, contributions=0):
    partitions = classify_repositories(make_repos() if repos is None else repos, "alice")
    return compose_stats(
        contributions,
        partitions,
        prs or CountTable(),
        issues or CountTable(),
        now=NOW,
    )


class TestBreakdownFor:
    """Test the per-subset helper."""

    def test_shape(self):
        partitions = classify_repositories(make_repos(), "alice")
        result = breakdown_for(partitions, len)

        assert result == {
            "personal": {"public": 1, "private": 1, "total": 2},
            "collaborator": {"public": 1, "private": 1, "total": 2},
            "overall": 4,
        }


class TestComposeStats:
    """Test the final summary structure."""

    def test_top_level_keys(self):
        stats = compose(contributions=12)

        assert set(stats) == {
            "contributions", "pullRequests", "issues", "repositories",
            "stars", "languages", "lastUpdated",
        }
        assert stats["contributions"] == 12
        assert stats["lastUpdated"] == NOW.isoformat()

    def test_stars(self):
        stats = compose()

        assert stats["stars"]["personal"] == {"public": 5, "private": 2, "total": 7}
        assert stats["stars"]["collaborator"] == {"public": 40, "private": 0, "total": 40}
        assert stats["stars"]["overall"] == 47

    def test_counts_totals_are_consistent(self):
        prs = make_counts([
            (Ownership.PERSONAL, Visibility.PUBLIC, 3),
            (Ownership.PERSONAL, Visibility.PRIVATE, 1),
            (Ownership.COLLABORATOR, Visibility.PUBLIC, 2),
        ])
        issues = make_counts([(Ownership.COLLABORATOR, Visibility.PRIVATE, 4)])
        stats = compose(prs=prs, issues=issues)

        for metric in ("pullRequests", "issues", "repositories", "stars"):
            for ownership in ("personal", "collaborator"):
                cell = stats[metric][ownership]
                assert cell["total"] == cell["public"] + cell["private"]
            assert stats[metric]["overall"] == (
                stats[metric]["personal"]["total"] + stats[metric]["collaborator"]["total"]
            )

        assert stats["pullRequests"]["overall"] == 6
        assert stats["issues"]["collaborator"]["private"] == 4

    def test_languages_per_partition(self):
        stats = compose()
        langs = stats["languages"]

        personal_total = {l["name"]: l["percentage"] for l in langs["personal"]["total"]}
        assert personal_total["JavaScript"] == pytest.approx(90 / 110 * 100)
        assert personal_total["CSS"] == pytest.approx(20 / 110 * 100)

        # Same language, different share per partition
        assert langs["personal"]["private"] == [{"name": "JavaScript", "percentage": 100.0}]
        assert langs["personal"]["public"][0]["percentage"] == pytest.approx(80.0)

    def test_languages_recomputed_for_overall(self):
        stats = compose()
        overall = stats["languages"]["overall"]

        total = 80 + 20 + 10 + 1000 + 5 + 300
        shares = {l["name"]: l["percentage"] for l in overall}
        assert shares["Rust"] == pytest.approx(1000 / total * 100)
        assert overall[-1]["name"] == "Other"
        assert sum(shares.values()) == pytest.approx(100.0)

    def test_all_language_lists_valid(self):
        stats = compose()
        langs = stats["languages"]
        lists = [langs["overall"]] + [
            langs[o][v] for o in ("personal", "collaborator") for v in ("public", "private", "total")
        ]

        for entries in lists:
            if not entries:
                continue
            assert sum(l["percentage"] for l in entries) == pytest.approx(100.0)
            for l in entries:
                if l["name"] != "Other":
                    assert l["percentage"] >= 1.0
            assert all(l["name"] != "Other" for l in entries[:-1])

    def test_empty_harvest(self):
        stats = compose(repos=[])

        assert stats["repositories"]["overall"] == 0
        assert stats["stars"]["personal"] == {"public": 0, "private": 0, "total": 0}
        assert stats["languages"]["overall"] == []
        assert stats["pullRequests"]["overall"] == 0
