"""Compose partitioned GitHub stats into the summary structure."""

from datetime import datetime, timezone
from typing import Callable

from classifier import RepositoryPartitions
from languages import aggregate_languages
from models import CategoryBreakdown, CountTable, Ownership, Visibility


def breakdown_for(partitions: RepositoryPartitions, compute: Callable) -> dict:
    """Apply ``compute`` to every subset and shape the results.

    Returns ``{"personal": {public, private, total}, "collaborator": {...},
    "overall": ...}``. Every subset is computed independently, so values that
    are not additive (language percentages) are correct per subset.
    """
    result = {}
    for ownership in Ownership:
        result[ownership.value] = CategoryBreakdown(
            public=compute(partitions.get(ownership, Visibility.PUBLIC)),
            private=compute(partitions.get(ownership, Visibility.PRIVATE)),
            total=compute(partitions.get(ownership, Visibility.TOTAL)),
        ).to_dict()
    result["overall"] = compute(partitions.overall)
    return result


def count_breakdown(counts: CountTable) -> dict:
    """Shape reconciled PR/issue counts like the other breakdowns."""
    result = {o.value: counts.breakdown(o).to_dict() for o in Ownership}
    result["overall"] = counts.overall
    return result


def total_stars(repos) -> int:
    return sum(repo.stars for repo in repos)


def compose_stats(
    contributions: int,
    partitions: RepositoryPartitions,
    pull_requests: CountTable,
    issues: CountTable,
    now: datetime = None,
) -> dict:
    """Assemble the final summary. Pure apart from the timestamp."""
    now = now or datetime.now(timezone.utc)

    return {
        "contributions": contributions,
        "pullRequests": count_breakdown(pull_requests),
        "issues": count_breakdown(issues),
        "repositories": breakdown_for(partitions, len),
        "stars": breakdown_for(partitions, total_stars),
        "languages": breakdown_for(partitions, aggregate_languages),
        "lastUpdated": now.isoformat(),
    }
