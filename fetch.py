#!/usr/bin/env python3
"""Fetch issues, pull requests and commits from the GitHub API."""

from collections.abc import Iterator
from dataclasses import dataclass

import requests

API_URL = "https://api.github.com"
TIMEOUT = 30
PER_PAGE = 100

SEARCH_KINDS = {
    "issue": "is:issue",
    "pr": "is:pr",
}


@dataclass(frozen=True)
class Item:
    """An open issue or pull request."""

    title: str
    url: str
    repo: str
    created_at: str
    author: str
    labels: tuple[str, ...] = ()

    @classmethod
    def from_search(cls, raw: dict) -> "Item":
        """Build an item from one /search/issues result."""
        # repository_url is https://api.github.com/repos/{owner}/{repo}
        repo = (raw.get("repository_url") or "").rstrip("/").rsplit("/", 1)[-1]
        return cls(
            title=raw.get("title", ""),
            url=raw.get("html_url", ""),
            repo=repo,
            created_at=raw.get("created_at", ""),
            author=(raw.get("user") or {}).get("login", ""),
            labels=tuple(label["name"] for label in raw.get("labels") or []),
        )


def get_headers(token: str) -> dict:
    """Get headers for GitHub API requests."""
    if not token:
        raise ValueError("GitHub token not set")
    return {
        "Authorization": f"Bearer {token}",
        "Accept": "application/vnd.github+json",
        "X-GitHub-Api-Version": "2022-11-28",
    }


def iter_pages(url: str, headers: dict, params: dict | None = None) -> Iterator:
    """Yield decoded JSON pages, following Link rel="next" until exhausted."""
    next_url = url
    while next_url:
        response = requests.get(next_url, headers=headers, params=params, timeout=TIMEOUT)
        response.raise_for_status()
        yield response.json()
        next_url = response.links.get("next", {}).get("url")
        # the next link already carries the query string
        params = None


class GitHubClient:
    """Read-only access to one organization's repositories."""

    def __init__(self, token: str, api_url: str = API_URL):
        self.headers = get_headers(token)
        self.api_url = api_url.rstrip("/")

    def search_open_items(self, kind: str, org: str, limit: int = PER_PAGE) -> list[Item]:
        """Search open issues ("issue") or pull requests ("pr") in an org."""
        if kind not in SEARCH_KINDS:
            raise ValueError(f"Unknown search kind: {kind!r}")
        params = {
            "q": f"org:{org} is:open {SEARCH_KINDS[kind]}",
            "per_page": min(limit, PER_PAGE),
        }
        items = []
        for page in iter_pages(f"{self.api_url}/search/issues", self.headers, params):
            for raw in page.get("items", []):
                items.append(Item.from_search(raw))
                if len(items) >= limit:
                    return items
        return items

    def list_commits_since(self, org: str, repo: str, since: str) -> list[dict]:
        """List raw commit records authored since an RFC 3339 timestamp."""
        url = f"{self.api_url}/repos/{org}/{repo}/commits"
        params = {"since": since, "per_page": PER_PAGE}
        commits = []
        for page in iter_pages(url, self.headers, params):
            commits.extend(page)
        return commits

    def fetch_repo_tag(self, org: str, repo: str) -> str:
        """Get the raw tag.txt from a repository's default branch."""
        url = f"{self.api_url}/repos/{org}/{repo}/contents/tag.txt"
        headers = dict(self.headers, Accept="application/vnd.github.raw")
        response = requests.get(url, headers=headers, timeout=TIMEOUT)
        response.raise_for_status()
        return response.content.decode("utf-8")

    def list_public_repos(self, org: str) -> list[str]:
        """Fetch all public, non-archived repository names for an organization."""
        url = f"{self.api_url}/orgs/{org}/repos"
        params = {"per_page": PER_PAGE, "type": "public"}
        repos = []
        for page in iter_pages(url, self.headers, params):
            repos.extend(r["name"] for r in page if not r.get("archived"))
        return repos
