"""Classify commit authors as automation accounts."""

from collections.abc import Iterable

BOT_SUFFIX = "[bot]"

KNOWN_BOTS = frozenset({
    "github actions",
    "github-actions",
    "actions-user",
    "github-actions[bot]",
    "dependabot",
    "dependabot[bot]",
    "renovate",
    "renovate[bot]",
})


def normalize(value: str | None) -> str:
    return (value or "").strip().lower()


def build_known_bots(extra: Iterable[str] | None = None) -> frozenset[str]:
    """Return the built-in bot names plus any configured extras."""
    names = {normalize(name) for name in extra or []}
    names.discard("")
    return KNOWN_BOTS | names


def is_bot(author_name: str | None, author_login: str | None,
           known_bots: frozenset[str] = KNOWN_BOTS) -> bool:
    """Check whether a commit author is an automated account."""
    for field in (normalize(author_name), normalize(author_login)):
        if not field:
            continue
        if field in known_bots or field.endswith(BOT_SUFFIX):
            return True
    return False
