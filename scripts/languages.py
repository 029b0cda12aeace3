"""Language usage percentages for a set of repositories."""

from collections import defaultdict
from typing import Iterable

from models import Repository

OTHER = "Other"
THRESHOLD = 1.0


def aggregate_languages(repos: Iterable[Repository], threshold: float = THRESHOLD) -> list[dict]:
    """Sum language bytes across repos and convert to percentages.

    Entries below ``threshold`` percent are folded into a trailing "Other"
    entry, which is only added when the folded share is positive.
    """
    sizes = defaultdict(int)
    total_size = 0

    for repo in repos:
        for name, size in repo.languages:
            sizes[name] += size
            total_size += size

    languages = [
        {"name": name, "percentage": (size / total_size) * 100 if total_size > 0 else 0.0}
        for name, size in sizes.items()
    ]
    languages.sort(key=lambda x: x["percentage"], reverse=True)

    kept = []
    other = 0.0
    for lang in languages:
        if lang["percentage"] >= threshold:
            kept.append(lang)
        else:
            other += lang["percentage"]

    if other > 0:
        kept.append({"name": OTHER, "percentage": other})

    return kept
