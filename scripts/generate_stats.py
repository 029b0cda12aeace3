#!/usr/bin/env python3
"""Main entry point for generating a GitHub stats summary."""

import argparse
import json
import logging
import sys
from pathlib import Path

import yaml

from errors import ConfigurationError, UpstreamError
from pipeline import StatsPipeline
from renderer import render_html

# Resolve paths relative to repo root
REPO_ROOT = Path(__file__).parent.parent
DEFAULT_CONFIG = REPO_ROOT / "config.yml"
DEFAULT_TEMPLATE = REPO_ROOT / "templates" / "stats.html.j2"

log = logging.getLogger(__name__)

REQUIRED_CONFIG_KEYS = ["output_dir"]


def setup_logging(verbose: bool = False):
    """Configure logging for all modules."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(levelname)s: %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)]
    )


def load_config(config_path: Path) -> dict:
    """Load and validate config file."""
    with open(config_path) as f:
        config = yaml.safe_load(f) or {}

    # Validate required keys
    missing = [k for k in REQUIRED_CONFIG_KEYS if k not in config]
    if missing:
        raise ValueError(f"Missing required config keys: {', '.join(missing)}")

    # Set defaults for optional sections
    config.setdefault("api", {})
    config.setdefault("username", None)

    return config


def get_output_paths(config: dict) -> tuple[Path, Path]:
    """JSON and HTML output locations."""
    output_dir = REPO_ROOT / config["output_dir"]
    return output_dir / "github-stats.json", output_dir / "github-stats.html"


def main():
    parser = argparse.ArgumentParser(description="Generate a GitHub activity stats summary")
    parser.add_argument(
        "--config",
        default=str(DEFAULT_CONFIG),
        help="Config file path",
    )
    parser.add_argument("--username", help="GitHub login (overrides config)")
    parser.add_argument(
        "--max-repos",
        type=int,
        help="Stop repository pagination after this many repositories",
    )
    parser.add_argument(
        "--template",
        default=str(DEFAULT_TEMPLATE),
        help="Template file path",
    )
    parser.add_argument(
        "--html",
        action="store_true",
        help="Also render the HTML page",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Print output to stdout instead of file",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable debug logging",
    )
    args = parser.parse_args()

    # Setup logging
    setup_logging(args.verbose)

    # Load config
    config_path = Path(args.config)
    try:
        config = load_config(config_path)
    except (FileNotFoundError, ValueError) as e:
        log.error(f"Config error: {e}")
        sys.exit(1)

    if args.username:
        config["username"] = args.username
    if args.max_repos is not None:
        config["api"]["max_repositories"] = args.max_repos

    pipeline = StatsPipeline(config)
    try:
        stats = pipeline.run()
    except ConfigurationError as e:
        log.error(f"Config error: {e}")
        sys.exit(1)
    except UpstreamError as e:
        log.error(f"GitHub API error: {e}")
        sys.exit(1)

    for warning in pipeline.warnings:
        log.warning(f"Degraded: {warning}")

    output = json.dumps(stats, indent=2)
    html = None
    if args.html:
        html = render_html(stats, Path(args.template), config["username"] or "")

    if args.dry_run:
        print("\n" + "=" * 60)
        print(output)
        if html:
            print(html)
        return

    json_path, html_path = get_output_paths(config)
    json_path.parent.mkdir(parents=True, exist_ok=True)
    json_path.write_text(output)
    log.info(f"Output written to: {json_path}")
    if html:
        html_path.write_text(html)
        log.info(f"Page written to: {html_path}")


if __name__ == "__main__":
    main()
