#!/usr/bin/env python3
"""Generate the organization's daily and weekly digest reports."""

import argparse
import fnmatch
import json
import os
import sys
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path

import requests
import yaml

from aggregate import SECTION_HEADING, aggregate_commits, build_markdown, drop_bot_commits
from bots import build_known_bots
from fetch import GitHubClient, Item
from report import (NO_UPDATES, assemble_report, daily_front_matter, update_daily_report,
                    weekly_front_matter, weekly_report_path, write_report)
from summarize import DEFAULT_BASE_URL, DEFAULT_MODEL, summary_section
from timeutil import to_display, window_start
from update_index import DEFAULT_INDEX, write_weekly_index

CONFIG_PATH = Path(__file__).parent / "config.yaml"
SEARCH_LIMIT = 100
NEWS_TYPES = ("daily", "weekly")
DEFAULT_EXCLUDE = ("hoa-moe", ".github")


@dataclass(frozen=True)
class Settings:
    org: str
    token: str
    public_repos: frozenset[str] = frozenset()
    news_type: str = ""
    openai_api_key: str = ""
    openai_base_url: str = DEFAULT_BASE_URL
    openai_model: str = DEFAULT_MODEL
    exclude: tuple[str, ...] = DEFAULT_EXCLUDE
    known_bots: frozenset[str] = build_known_bots()
    output_dir: Path = Path("news")
    weekly_index: str = DEFAULT_INDEX


def load_config(config_path: Path = CONFIG_PATH) -> dict:
    """Load configuration from config.yaml, if present."""
    if not config_path.exists():
        return {}
    with open(config_path, encoding="utf-8") as f:
        config = yaml.safe_load(f) or {}
    if not isinstance(config, dict):
        raise ValueError(f"{config_path} must contain a mapping, got {type(config).__name__}")
    return config


def parse_public_repos(value: str | None) -> frozenset[str]:
    """Parse the JSON array of public repository names."""
    if not value:
        return frozenset()
    try:
        repos = json.loads(value)
    except json.JSONDecodeError as e:
        raise ValueError(f"Failed to parse repos_array: {e}") from e
    if not isinstance(repos, list) or not all(isinstance(r, str) for r in repos):
        raise ValueError("Failed to parse repos_array: expected a JSON array of strings")
    return frozenset(repos)


def require(env, name: str) -> str:
    value = env.get(name, "")
    if not value:
        raise ValueError(f"Environment variable {name} not found, please set it first.")
    return value


def load_settings(env, config: dict, command: str) -> Settings:
    """Build settings from the environment and config.yaml."""
    org = require(env, "ORG_NAME")
    public_repos = parse_public_repos(env.get("repos_array"))
    token = env.get("PERSONAL_ACCESS_TOKEN") or env.get("GITHUB_TOKEN") or ""
    if not token:
        raise ValueError("Environment variable PERSONAL_ACCESS_TOKEN not found, please set it first.")

    news_type = ""
    if command == "summary":
        news_type = require(env, "NEWS_TYPE")
        if news_type not in NEWS_TYPES:
            raise ValueError(f"NEWS_TYPE must be one of {', '.join(NEWS_TYPES)}, got {news_type!r}")

    return Settings(
        org=org,
        token=token,
        public_repos=public_repos,
        news_type=news_type,
        openai_api_key=env.get("OPENAI_API_KEY", ""),
        openai_base_url=env.get("OPENAI_BASE_URL") or DEFAULT_BASE_URL,
        openai_model=env.get("OPENAI_MODEL") or DEFAULT_MODEL,
        exclude=tuple(config.get("exclude", DEFAULT_EXCLUDE) or ()),
        known_bots=build_known_bots(config.get("bots")),
        output_dir=Path(config.get("output_dir", "news")),
        weekly_index=config.get("weekly_index", DEFAULT_INDEX),
    )


def filter_by_public_repos(items: list[Item], public_repos: frozenset[str]) -> list[Item]:
    """Keep only items from public repositories; an empty allow-list keeps all."""
    if not public_repos:
        return items
    return [item for item in items if item.repo in public_repos]


def matches_pattern(repo_name: str, pattern: str) -> bool:
    """Check if repo name matches a glob pattern."""
    return fnmatch.fnmatch(repo_name, pattern)


def select_repos(settings: Settings, client) -> list[str]:
    """Repositories whose commits go into the digest."""
    repos = settings.public_repos or client.list_public_repos(settings.org)
    return sorted(
        repo for repo in repos
        if not any(matches_pattern(repo, pattern) for pattern in settings.exclude)
    )


def run_news(settings: Settings, client, now: datetime) -> Path:
    """Refresh the open issues and pull requests sections of the daily report."""
    issues = client.search_open_items("issue", settings.org, SEARCH_LIMIT)
    prs = client.search_open_items("pr", settings.org, SEARCH_LIMIT)

    issues = filter_by_public_repos(issues, settings.public_repos)
    prs = filter_by_public_repos(prs, settings.public_repos)

    path = settings.output_dir / "daily.mdx"
    update_daily_report(path, issues, prs, to_display(now).date())
    print(f"Updated {path} with {len(issues)} issues and {len(prs)} pull requests")
    return path


def run_summary(settings: Settings, client, now: datetime) -> Path | None:
    """Write the commit digest for the configured window."""
    since, display_start = window_start(settings.news_type, now)
    today = to_display(now).date()

    agg = aggregate_commits(
        client, settings.org, select_repos(settings, client), since, settings.known_bots
    )
    # The daily digest shows all activity; the weekly report hides bots.
    commits = agg.commits
    if settings.news_type == "weekly":
        commits = drop_bot_commits(commits, settings.known_bots)

    markdown = build_markdown(commits, agg.titles, settings.org)

    if settings.news_type == "daily":
        # always regenerated so yesterday's commits never linger
        if not markdown:
            markdown = f"{SECTION_HEADING}\n\n{NO_UPDATES}\n\n"
        path = settings.output_dir / "daily.mdx"
        write_report(path, assemble_report(daily_front_matter(today), "", markdown))
        print(f"Wrote {path}")
        return path

    if not commits:
        print("No commits found in the given period of time")
        return None

    summary = summary_section(
        markdown,
        settings.openai_api_key,
        base_url=settings.openai_base_url,
        model=settings.openai_model,
    )
    front_matter = weekly_front_matter(display_start.date(), today)
    path = weekly_report_path(settings.output_dir, display_start.date())
    write_report(path, assemble_report(front_matter, summary, markdown))
    print(f"Wrote {path}")

    index_path = settings.output_dir / "weekly" / settings.weekly_index
    try:
        write_weekly_index(index_path, today)
    except OSError as e:
        print(f"Failed to update weekly index: {e}", file=sys.stderr)
    return path


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="hoa-news", description="Generate organization digest reports.")
    p.add_argument("command", choices=["news", "summary"],
                   help="news: open issues and pull requests; summary: commit digest")
    p.add_argument("--config", type=Path, default=CONFIG_PATH, help="Path to config.yaml.")
    return p


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    args = build_parser().parse_args(argv)

    try:
        settings = load_settings(os.environ, load_config(args.config), args.command)
    except (ValueError, yaml.YAMLError) as e:
        print(e, file=sys.stderr)
        return 1

    client = GitHubClient(settings.token)
    now = datetime.now(timezone.utc)
    try:
        if args.command == "news":
            run_news(settings, client, now)
        else:
            run_summary(settings, client, now)
    except requests.RequestException as e:
        print(f"GitHub API request failed: {e}", file=sys.stderr)
        return 1
    except (OSError, UnicodeDecodeError) as e:
        print(f"Failed to write report: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
