#!/usr/bin/env python3
"""Aggregate commits across repositories into a Markdown digest."""

import sys
from dataclasses import dataclass, field
from datetime import datetime, timezone

import requests

from bots import KNOWN_BOTS, is_bot
from timeutil import parse_utc, to_display, weekday_label

TAG_MARKER = "name:"
SECTION_HEADING = "## 更新内容"


@dataclass(frozen=True)
class CommitEntry:
    author_name: str
    author_login: str
    date: datetime
    message: str
    repo: str


@dataclass
class Aggregate:
    """Commits in a window plus the per-repository facts gathered with them."""

    commits: list[CommitEntry] = field(default_factory=list)
    titles: dict[str, str] = field(default_factory=dict)
    active_repos: set[str] = field(default_factory=set)


def parse_tag_name(text: str) -> str | None:
    """Extract the course title following "name:" in a tag file."""
    _, found, after = text.partition(TAG_MARKER)
    if not found:
        return None
    name = after.split("\n", 1)[0].strip()
    return name or None


def commit_entry(raw: dict, repo: str) -> CommitEntry | None:
    """Build an entry from a raw API commit, or None without a usable date."""
    commit = raw.get("commit") or {}
    author = commit.get("author") or {}
    date = parse_utc(author.get("date"))
    if date is None:
        return None
    return CommitEntry(
        author_name=author.get("name") or "",
        author_login=(raw.get("author") or {}).get("login") or "",
        date=to_display(date),
        message=commit.get("message") or "",
        repo=repo,
    )


def resolve_title(client, org: str, repo: str) -> str | None:
    try:
        return parse_tag_name(client.fetch_repo_tag(org, repo))
    except (requests.RequestException, UnicodeDecodeError) as e:
        print(f"  No course title for {repo}: {e}", file=sys.stderr)
        return None


def aggregate_commits(client, org: str, repos, since: datetime,
                      known_bots: frozenset[str] = KNOWN_BOTS) -> Aggregate:
    """
    Collect commits authored since `since` for every repository.

    Bot commits are kept in the result; they only fail to count as manual
    activity, which is what triggers the course title lookup.
    """
    result = Aggregate()
    since_param = since.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")

    for repo in sorted(repos):
        print(f"Fetching commits for {repo}...")
        try:
            raw_commits = client.list_commits_since(org, repo, since_param)
        except requests.RequestException as e:
            print(f"  Error fetching commits for {repo}: {e}", file=sys.stderr)
            continue

        manual = False
        for raw in raw_commits:
            entry = commit_entry(raw, repo)
            if entry is None or entry.date < since:
                continue
            if not is_bot(entry.author_name, entry.author_login, known_bots):
                manual = True
            result.commits.append(entry)

        if manual:
            result.active_repos.add(repo)
            title = resolve_title(client, org, repo)
            if title:
                result.titles[repo] = title

    return result


def drop_bot_commits(commits: list[CommitEntry],
                     known_bots: frozenset[str] = KNOWN_BOTS) -> list[CommitEntry]:
    return [c for c in commits if not is_bot(c.author_name, c.author_login, known_bots)]


def build_markdown(commits: list[CommitEntry], titles: dict[str, str], org: str) -> str:
    """Render commits newest-first, grouped under one heading per display day."""
    if not commits:
        return ""

    lines = [f"{SECTION_HEADING}\n\n"]
    prev_day = None
    for commit in sorted(commits, key=lambda c: c.date, reverse=True):
        day = commit.date.strftime("%Y-%m-%d")
        if day != prev_day:
            lines.append(
                f"### {weekday_label(commit.date)} ({commit.date.month}.{commit.date.day})\n\n"
            )
            prev_day = day
        title = titles.get(commit.repo) or commit.repo
        message = commit.message.split("\n")[0]
        lines.append(
            f"- {commit.author_name} 在 [{title}](https://github.com/{org}/{commit.repo}) "
            f"中提交了信息：{message}\n\n"
        )
    return "".join(lines)
