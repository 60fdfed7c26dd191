#!/usr/bin/env python3
"""Render front matter and write daily and weekly report documents."""

from dataclasses import asdict, dataclass
from datetime import date
from pathlib import Path

import yaml

from fetch import Item
from timeutil import utc_to_bjt

ISSUES_HEADING = "## 待解决的 Issues"
PRS_HEADING = "## 待合并的 Pull Requests"
NO_ISSUES = "暂无待解决的 Issues"
NO_PRS = "暂无待合并的 Pull Requests"
NO_UPDATES = "暂无更新"

DAILY_TITLE = "AUTO 更新速递"
DAILY_DESCRIPTION = "每日更新"
WEEKLY_TITLE = "AUTO 周报"


@dataclass(frozen=True)
class Author:
    name: str
    link: str
    image: str


ACTIONS_AUTHOR = Author(
    name="github-actions[bot]",
    link="https://github.com/features/actions",
    image="https://avatars.githubusercontent.com/in/15368",
)
CHATGPT_AUTHOR = Author(
    name="ChatGPT",
    link="https://github.com/openai",
    image="https://github.com/openai.png",
)


def dump_yaml(data: dict) -> str:
    return yaml.safe_dump(data, allow_unicode=True, sort_keys=False,
                          default_flow_style=False, width=4096)


def generate_front_matter(title: str, date_str: str, description: str,
                          authors: list[Author]) -> str:
    """Render the front matter fields, omitting an empty description."""
    fm = {
        "title": title,
        "date": date_str,
        "authors": [asdict(a) for a in authors],
    }
    if description:
        fm["description"] = description
    fm["excludeSearch"] = False
    fm["draft"] = False
    return dump_yaml(fm)


def wrap_front_matter(front_matter: str) -> str:
    return f"---\n{front_matter}---\n\n"


def daily_front_matter(today: date) -> str:
    return generate_front_matter(
        DAILY_TITLE, today.isoformat(), DAILY_DESCRIPTION, [ACTIONS_AUTHOR]
    )


def weekly_front_matter(start: date, end: date) -> str:
    return generate_front_matter(
        f"{WEEKLY_TITLE} {start.isoformat()} - {end.isoformat()}",
        end.isoformat(),
        f"涵盖 {start.isoformat()} 至 {end.isoformat()} 的更新",
        [CHATGPT_AUTHOR],
    )


def render_items(heading: str, empty_line: str, items: list[Item]) -> str:
    """Render one issues or pull requests section."""
    parts = [f"{heading}\n\n"]
    if not items:
        parts.append(f"{empty_line}\n\n")
        return "".join(parts)

    for item in items:
        parts.append(f"### [{item.title}]({item.url})\n\n")
        parts.append(f"- **仓库**: {item.repo}\n")
        parts.append(f"- **创建于**: {utc_to_bjt(item.created_at)}\n")
        parts.append(f"- **作者**: {item.author}\n")
        if item.labels:
            parts.append(f"- **标签**: {', '.join(item.labels)}\n")
        parts.append("\n")
    return "".join(parts)


def update_daily_report(path: Path, issues: list[Item], prs: list[Item], today: date) -> None:
    """
    Replace the issues and pull requests sections of the daily report.

    Everything from the issues heading onward is discarded before the fresh
    sections are appended, so repeated runs never stack duplicates. A missing
    report starts from the daily front matter.
    """
    path = Path(path)
    if path.exists():
        content = path.read_text(encoding="utf-8")
    else:
        content = wrap_front_matter(daily_front_matter(today))

    idx = content.find(ISSUES_HEADING)
    if idx >= 0:
        content = content[:idx]

    content += render_items(ISSUES_HEADING, NO_ISSUES, issues)
    content += render_items(PRS_HEADING, NO_PRS, prs)
    write_report(path, content)


def assemble_report(front_matter: str, summary: str, body: str) -> str:
    """Join front matter, an optional summary and the body in fixed order."""
    out = wrap_front_matter(front_matter)
    if summary:
        out += f"{summary}\n\n"
    return out + body


def weekly_report_path(output_dir: Path, start: date) -> Path:
    return Path(output_dir) / "weekly" / f"weekly-{start.isoformat()}" / "index.mdx"


def write_report(path: Path, content: str) -> None:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        f.write(content)
