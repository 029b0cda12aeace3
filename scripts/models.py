"""Data types shared by the stats pipeline."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Generic, TypeVar

T = TypeVar("T")


class Ownership(Enum):
    PERSONAL = "personal"
    COLLABORATOR = "collaborator"


class Visibility(Enum):
    PUBLIC = "public"
    PRIVATE = "private"
    TOTAL = "total"


@dataclass(frozen=True)
class Repository:
    """One non-fork repository from the harvest."""
    name: str
    owner: str
    is_private: bool
    stars: int = 0
    languages: tuple[tuple[str, int], ...] = ()

    @property
    def key(self) -> tuple[str, str]:
        return identity_key(self.owner, self.name)

    @property
    def visibility(self) -> Visibility:
        return Visibility.PRIVATE if self.is_private else Visibility.PUBLIC

    @classmethod
    def from_node(cls, node: dict) -> "Repository":
        """Build from a GraphQL repository node."""
        edges = (node.get("languages") or {}).get("edges") or []
        languages = tuple(
            (edge["node"]["name"], edge.get("size") or 0)
            for edge in edges
            if edge.get("node") and edge["node"].get("name")
        )
        return cls(
            name=node["name"],
            owner=node["owner"]["login"],
            is_private=bool(node.get("isPrivate")),
            stars=node.get("stargazerCount") or 0,
            languages=languages,
        )


def identity_key(owner: str, name: str) -> tuple[str, str]:
    """GitHub owner and repo names are case-insensitive."""
    return owner.lower(), name.lower()


@dataclass
class CategoryBreakdown(Generic[T]):
    public: T
    private: T
    total: T

    def get(self, visibility: Visibility) -> T:
        if visibility is Visibility.PUBLIC:
            return self.public
        if visibility is Visibility.PRIVATE:
            return self.private
        return self.total

    def to_dict(self) -> dict:
        return {"public": self.public, "private": self.private, "total": self.total}


@dataclass
class CountTable:
    """PR or issue counts per (ownership, visibility) cell."""
    cells: dict[tuple[Ownership, Visibility], int] = field(default_factory=dict)

    def increment(self, ownership: Ownership, visibility: Visibility) -> None:
        for slot in (visibility, Visibility.TOTAL):
            self.cells[(ownership, slot)] = self.cells.get((ownership, slot), 0) + 1

    def get(self, ownership: Ownership, visibility: Visibility) -> int:
        return self.cells.get((ownership, visibility), 0)

    def breakdown(self, ownership: Ownership) -> CategoryBreakdown[int]:
        return CategoryBreakdown(
            public=self.get(ownership, Visibility.PUBLIC),
            private=self.get(ownership, Visibility.PRIVATE),
            total=self.get(ownership, Visibility.TOTAL),
        )

    @property
    def overall(self) -> int:
        return sum(self.get(o, Visibility.TOTAL) for o in Ownership)
