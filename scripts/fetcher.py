"""GitHub API interactions for contributions, repositories and search."""

import logging
from datetime import datetime, timezone
from concurrent.futures import ThreadPoolExecutor

import requests

from errors import DegradedFetchWarning, UpstreamError
from models import Repository

log = logging.getLogger(__name__)

GITHUB_API = "https://api.github.com"
GITHUB_GRAPHQL = "https://api.github.com/graphql"

# GitHub was founded in 2008
CONTRIBUTIONS_START_YEAR = 2008

# Defaults (can be overridden via config)
DEFAULT_TIMEOUT = 30
DEFAULT_PAGE_SIZE = 100
DEFAULT_MAX_REPOSITORIES = 300
DEFAULT_SEARCH_PAGE_SIZE = 100
DEFAULT_RATE_LIMIT_WARNING = 10
DEFAULT_USER_AGENT = "github-stats-summary"

REPOSITORIES_QUERY = """
query($login: String!, $after: String, $pageSize: Int!) {
  user(login: $login) {
    repositories(first: $pageSize, after: $after, ownerAffiliations: [OWNER, COLLABORATOR], orderBy: {field: UPDATED_AT, direction: DESC}) {
      totalCount
      pageInfo {
        hasNextPage
        endCursor
      }
      nodes {
        name
        owner { login }
        isFork
        isPrivate
        stargazerCount
        languages(first: 10, orderBy: {field: SIZE, direction: DESC}) {
          edges { size node { name } }
        }
      }
    }
  }
}
"""


def api_settings(config: dict = None) -> dict:
    """Resolve the api section of the config against defaults."""
    api_cfg = (config or {}).get("api", {})
    return {
        "timeout": api_cfg.get("request_timeout", DEFAULT_TIMEOUT),
        "page_size": api_cfg.get("page_size", DEFAULT_PAGE_SIZE),
        "max_repositories": api_cfg.get("max_repositories", DEFAULT_MAX_REPOSITORIES),
        "search_page_size": api_cfg.get("search_page_size", DEFAULT_SEARCH_PAGE_SIZE),
        "rate_limit_warning": api_cfg.get("rate_limit_warning", DEFAULT_RATE_LIMIT_WARNING),
        "user_agent": api_cfg.get("user_agent", DEFAULT_USER_AGENT),
    }


def get_headers(token: str, scheme: str = "Bearer", user_agent: str = DEFAULT_USER_AGENT) -> dict:
    """GraphQL takes a Bearer token, REST search the legacy ``token`` scheme."""
    return {
        "Authorization": f"{scheme} {token}",
        "Accept": "application/vnd.github+json",
        "User-Agent": user_agent,
        "X-GitHub-Api-Version": "2022-11-28",
    }


def check_rate_limit(response, threshold: int = DEFAULT_RATE_LIMIT_WARNING) -> int | None:
    """Log a warning when the remaining quota is low. Returns the remaining count."""
    remaining = response.headers.get("X-RateLimit-Remaining")
    if remaining is None or not str(remaining).isdigit():
        return None

    remaining = int(remaining)
    if remaining < threshold:
        reset_time = response.headers.get("X-RateLimit-Reset")
        log.warning(f"GitHub rate limit low: {remaining} requests left (reset at {reset_time})")
    return remaining


def graphql(token: str, query: str, variables: dict, config: dict = None) -> dict:
    """Run one GraphQL request and return its ``data`` payload."""
    settings = api_settings(config)
    try:
        resp = requests.post(
            GITHUB_GRAPHQL,
            headers=get_headers(token, "Bearer", settings["user_agent"]),
            json={"query": query, "variables": variables},
            timeout=settings["timeout"],
        )
    except requests.exceptions.RequestException as e:
        raise UpstreamError(f"GraphQL request failed: {e}") from e

    check_rate_limit(resp, settings["rate_limit_warning"])

    if not 200 <= resp.status_code < 300:
        raise UpstreamError(f"GitHub GraphQL error: {resp.status_code}", status=resp.status_code)

    try:
        data = resp.json()
    except ValueError as e:
        raise UpstreamError(f"GitHub GraphQL error: invalid JSON ({e})", status=resp.status_code) from e

    if data.get("errors"):
        raise UpstreamError(f"GitHub GraphQL error: {data['errors']}", status=resp.status_code, errors=data["errors"])

    return data.get("data") or {}


def search_issues(token: str, query: str, config: dict = None) -> dict:
    """Run one REST issue search.

    A failed search yields no items and a DegradedFetchWarning instead of
    raising, so PR and issue counts undercount rather than abort the run.
    """
    settings = api_settings(config)
    # The query is pre-encoded: GitHub expects literal "+" between qualifiers
    url = f"{GITHUB_API}/search/issues?q={query}&per_page={settings['search_page_size']}"

    try:
        resp = requests.get(
            url,
            headers=get_headers(token, "token", settings["user_agent"]),
            timeout=settings["timeout"],
        )
    except requests.exceptions.RequestException as e:
        warning = DegradedFetchWarning(query, reason=str(e))
        log.warning(str(warning))
        return {"items": [], "total_count": 0, "warning": warning}

    check_rate_limit(resp, settings["rate_limit_warning"])

    if not 200 <= resp.status_code < 300:
        warning = DegradedFetchWarning(query, status=resp.status_code)
        log.warning(str(warning))
        return {"items": [], "total_count": 0, "warning": warning}

    try:
        data = resp.json()
    except ValueError as e:
        warning = DegradedFetchWarning(query, status=resp.status_code, reason=f"invalid JSON ({e})")
        log.warning(str(warning))
        return {"items": [], "total_count": 0, "warning": warning}

    return {
        "items": data.get("items", []),
        "total_count": data.get("total_count", 0),
        "warning": None,
    }


def fetch_search_items(token: str, username: str, config: dict = None) -> dict:
    """Fetch the user's PRs and issues concurrently."""
    queries = {
        "pull_requests": f"type:pr+author:{username}",
        "issues": f"type:issue+author:{username}",
    }

    with ThreadPoolExecutor(max_workers=2) as executor:
        futures = {
            kind: executor.submit(search_issues, token, query, config)
            for kind, query in queries.items()
        }
        results = {kind: future.result() for kind, future in futures.items()}

    for kind, result in results.items():
        log.info(f"Search {kind}: {len(result['items'])} items of {result['total_count']}")

    return results


def build_contributions_query(now: datetime) -> str:
    """One aliased contributionsCollection per year, since each window is capped at a year."""
    fields = []
    for year in range(CONTRIBUTIONS_START_YEAR, now.year + 1):
        start = f"{year}-01-01T00:00:00Z"
        if year == now.year:
            end = now.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")
        else:
            end = f"{year}-12-31T23:59:59Z"
        fields.append(
            f"""
    contributions{year}: contributionsCollection(from: "{start}", to: "{end}") {{
      contributionCalendar {{
        totalContributions
      }}
    }}"""
        )

    return f"""
query($username: String!) {{
  user(login: $username) {{{''.join(fields)}
  }}
}}
"""


def fetch_total_contributions(token: str, username: str, config: dict = None, now: datetime = None) -> int:
    """Sum all-time contributions in a single batched GraphQL request."""
    now = now or datetime.now(timezone.utc)
    data = graphql(token, build_contributions_query(now), {"username": username}, config)
    return sum_contributions(data.get("user") or {})


def sum_contributions(user: dict) -> int:
    """Add up totalContributions over every per-year alias present."""
    total = 0
    for alias, collection in user.items():
        if not alias.startswith("contributions") or not collection:
            continue
        total += collection["contributionCalendar"]["totalContributions"]
    return total


def fetch_user_repos(token: str, username: str, config: dict = None) -> list[Repository]:
    """Fetch the user's repositories using GraphQL pagination.

    Stops at the last page or once ``max_repositories`` nodes were fetched.
    Forks count toward that cap and are dropped afterwards.
    """
    settings = api_settings(config)
    max_repos = settings["max_repositories"]
    nodes = []
    cursor = None
    page = 0

    while True:
        variables = {"login": username, "after": cursor, "pageSize": settings["page_size"]}
        data = graphql(token, REPOSITORIES_QUERY, variables, config)
        page += 1

        repo_data = (data.get("user") or {}).get("repositories")
        if not repo_data:
            log.warning(f"No repository listing returned for {username}")
            break

        nodes.extend(repo_data.get("nodes") or [])
        log.debug(f"Page {page}: {len(nodes)} repositories so far")

        page_info = repo_data.get("pageInfo") or {}
        if not page_info.get("hasNextPage"):
            break
        if max_repos is not None and len(nodes) >= max_repos:
            log.warning(f"Stopped after {len(nodes)} repositories (cap {max_repos})")
            break
        cursor = page_info.get("endCursor")

    repos = [Repository.from_node(node) for node in nodes if not node.get("isFork")]
    log.info(f"Harvested {len(repos)} repositories ({len(nodes) - len(repos)} forks skipped)")
    return repos
