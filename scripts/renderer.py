"""HTML rendering of a stats summary from Jinja2 templates."""

from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

from jinja2 import Environment, FileSystemLoader, select_autoescape

from models import Ownership, Visibility

LANGUAGES_COLLAPSED = 5


@dataclass(frozen=True)
class ViewFilter:
    """Which slice of the summary a page shows. ``ownership=None`` is overall."""
    ownership: Ownership | None = None
    visibility: Visibility = Visibility.TOTAL

    @classmethod
    def parse(cls, category: str | None, visibility: str | None) -> "ViewFilter":
        """Build from query-string values, falling back to overall/total."""
        try:
            ownership = Ownership(category) if category and category != "overall" else None
            vis = Visibility(visibility) if visibility else Visibility.TOTAL
        except ValueError:
            return cls()
        if ownership is None:
            return cls()
        return cls(ownership, vis)

    @property
    def category(self) -> str:
        return self.ownership.value if self.ownership else "overall"


def toggle_category(view: ViewFilter, ownership: Ownership) -> ViewFilter:
    """Clicking an ownership summary selects its total, or goes back to overall."""
    if view.ownership is ownership and view.visibility is Visibility.TOTAL:
        return ViewFilter()
    return ViewFilter(ownership, Visibility.TOTAL)


def toggle_visibility(view: ViewFilter, ownership: Ownership, visibility: Visibility) -> ViewFilter:
    """Clicking public/private selects it, or goes back to the ownership total."""
    if view.ownership is ownership and view.visibility is visibility:
        return ViewFilter(ownership, Visibility.TOTAL)
    return ViewFilter(ownership, visibility)


def _pick(metric: dict, view: ViewFilter):
    if view.ownership is None:
        return metric["overall"]
    return metric[view.ownership.value][view.visibility.value]


def view_query(view: ViewFilter) -> str:
    if view.ownership is None:
        return "?category=overall&visibility=total"
    return f"?category={view.ownership.value}&visibility={view.visibility.value}"


def toggle_links(view: ViewFilter) -> dict:
    """Target query strings for every clickable filter on the page."""
    return {
        ownership.value: {
            "summary": view_query(toggle_category(view, ownership)),
            "public": view_query(toggle_visibility(view, ownership, Visibility.PUBLIC)),
            "private": view_query(toggle_visibility(view, ownership, Visibility.PRIVATE)),
        }
        for ownership in Ownership
    }


def select_view(stats: dict, view: ViewFilter) -> dict:
    """Values of the filter-dependent counters for one view."""
    return {
        "stars": _pick(stats["stars"], view) or 0,
        "pull_requests": _pick(stats["pullRequests"], view) or 0,
        "issues": _pick(stats["issues"], view) or 0,
        "languages": _pick(stats["languages"], view) or [],
    }


def render_html(
    stats: dict,
    template_path: Path,
    username: str,
    view: ViewFilter = None,
    expanded: bool = False,
) -> str:
    """Render the stats page for one view filter."""
    view = view or ViewFilter()
    template_dir = template_path.parent
    template_name = template_path.name

    env = Environment(
        loader=FileSystemLoader(template_dir),
        autoescape=select_autoescape(["html", "j2"]),
    )
    template = env.get_template(template_name)

    selected = select_view(stats, view)
    languages = selected["languages"]
    shown = languages if expanded else languages[:LANGUAGES_COLLAPSED]

    last_updated = stats.get("lastUpdated")
    try:
        last_updated = datetime.fromisoformat(last_updated).strftime("%Y-%m-%d")
    except (TypeError, ValueError):
        pass

    context = {
        "stats": stats,
        "username": username,
        "view": view,
        "selected": selected,
        "languages": shown,
        "hidden_languages": len(languages) - len(shown),
        "last_updated": last_updated,
        "ownerships": [o.value for o in Ownership],
        "links": toggle_links(view),
        "expanded": expanded,
        "collapsible": len(languages) > LANGUAGES_COLLAPSED,
        "view_query": view_query(view),
    }

    return template.render(**context)


def render_error(template_path: Path, error: Exception) -> str:
    env = Environment(
        loader=FileSystemLoader(template_path.parent),
        autoescape=select_autoescape(["html", "j2"]),
    )
    return env.get_template(template_path.name).render(error=str(error), stats=None)
