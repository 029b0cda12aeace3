"""Match REST search results back to harvested repositories."""

import logging
from urllib.parse import urlparse

from classifier import RepositoryPartitions
from models import CountTable

log = logging.getLogger(__name__)


def parse_repository_url(url: str | None) -> tuple[str, str] | None:
    """Extract (owner, name) from an API url like .../repos/<owner>/<name>."""
    if not url:
        return None
    parts = [p for p in urlparse(url).path.split("/") if p]
    if "repos" not in parts:
        return None
    rest = parts[parts.index("repos") + 1:]
    if len(rest) < 2:
        return None
    return rest[0], rest[1]


def reconcile_search_items(items: list[dict], partitions: RepositoryPartitions) -> CountTable:
    """Count search items per (ownership, visibility) cell.

    Items whose repository was not harvested (capped harvest, forks, repos of
    other people) are dropped.
    """
    counts = CountTable()
    dropped = 0

    for item in items:
        ref = parse_repository_url(item.get("repository_url"))
        cell = partitions.lookup(*ref) if ref else None
        if cell is None:
            dropped += 1
            log.debug(f"Unmatched search item: {item.get('html_url') or item.get('repository_url')}")
            continue
        counts.increment(*cell)

    if dropped:
        log.debug(f"Dropped {dropped} of {len(items)} search items with no harvested repository")

    return counts
