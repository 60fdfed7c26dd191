#!/usr/bin/env python3
"""Update the rolling index page of the weekly reports."""

from datetime import date
from pathlib import Path

from report import WEEKLY_TITLE, dump_yaml, write_report

DEFAULT_INDEX = "_index.zh-cn.md"


def weekly_index_content(updated: date) -> str:
    fm = {
        "title": WEEKLY_TITLE,
        "date": updated.isoformat(),
        "description": f"{WEEKLY_TITLE}是由 ChatGPT 每周五发布的一份简报，最近更新于 {updated.isoformat()}。",
    }
    return f"---\n{dump_yaml(fm)}---\n"


def write_weekly_index(path: Path, updated: date) -> None:
    """Overwrite the weekly index with the latest run's date."""
    write_report(Path(path), weekly_index_content(updated))
