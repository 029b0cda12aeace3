"""Split harvested repositories by ownership and visibility."""

from dataclasses import dataclass

from models import Ownership, Repository, Visibility, identity_key


@dataclass(frozen=True)
class RepositoryPartitions:
    """Read-only subsets of one harvest.

    ``subsets`` has an entry for every (ownership, visibility) pair, the
    ``Visibility.TOTAL`` entries being the union of public and private for
    that ownership. ``overall`` is every repository.
    """
    subsets: dict
    overall: tuple[Repository, ...]
    index: dict

    def get(self, ownership: Ownership, visibility: Visibility) -> tuple[Repository, ...]:
        return self.subsets[(ownership, visibility)]

    def lookup(self, owner: str, name: str) -> tuple[Ownership, Visibility] | None:
        """Return the cell a repository was classified into, or None if not harvested."""
        return self.index.get(identity_key(owner, name))


def ownership_of(repo: Repository, username: str) -> Ownership:
    if repo.owner.lower() == username.lower():
        return Ownership.PERSONAL
    return Ownership.COLLABORATOR


def classify_repositories(repos: list[Repository], username: str) -> RepositoryPartitions:
    """Partition repositories into personal/collaborator x public/private."""
    cells: dict[tuple[Ownership, Visibility], list[Repository]] = {
        (o, v): [] for o in Ownership for v in (Visibility.PUBLIC, Visibility.PRIVATE)
    }
    index = {}

    for repo in repos:
        cell = (ownership_of(repo, username), repo.visibility)
        cells[cell].append(repo)
        index[repo.key] = cell

    subsets = {cell: tuple(members) for cell, members in cells.items()}
    for ownership in Ownership:
        subsets[(ownership, Visibility.TOTAL)] = (
            subsets[(ownership, Visibility.PUBLIC)] + subsets[(ownership, Visibility.PRIVATE)]
        )

    overall = subsets[(Ownership.PERSONAL, Visibility.TOTAL)] + subsets[(Ownership.COLLABORATOR, Visibility.TOTAL)]

    return RepositoryPartitions(subsets=subsets, overall=overall, index=index)
