from datetime import date
from pathlib import Path

import yaml

from fetch import Item
from report import (ACTIONS_AUTHOR, CHATGPT_AUTHOR, ISSUES_HEADING, PRS_HEADING, assemble_report,
                    daily_front_matter, generate_front_matter, render_items,
                    update_daily_report, weekly_front_matter, weekly_report_path, write_report)
from update_index import write_weekly_index

TODAY = date(2026, 2, 13)


def make_item(title: str, labels: tuple[str, ...] = ()) -> Item:
    return Item(
        title=title,
        url=f"https://github.com/test-org/test-repo/issues/{len(title)}",
        repo="test-repo",
        created_at="2026-02-13T10:00:00Z",
        author="testuser",
        labels=labels,
    )


def front_matter_of(text: str) -> dict:
    assert text.startswith("---\n")
    return yaml.safe_load(text.split("---\n")[1])


def test_generate_front_matter_keys() -> None:
    fm = generate_front_matter("AUTO 更新速递", "2026-02-13", "每日更新", [ACTIONS_AUTHOR])
    for key in ("title:", "date:", "authors:", "description:", "excludeSearch:", "draft:"):
        assert key in fm
    assert "AUTO 更新速递" in fm

    data = yaml.safe_load(fm)
    assert list(data) == ["title", "date", "authors", "description", "excludeSearch", "draft"]
    assert data["date"] == "2026-02-13"
    assert data["authors"] == [{
        "name": "github-actions[bot]",
        "link": "https://github.com/features/actions",
        "image": "https://avatars.githubusercontent.com/in/15368",
    }]
    assert data["excludeSearch"] is False
    assert data["draft"] is False


def test_generate_front_matter_omits_empty_description() -> None:
    fm = generate_front_matter("Test Report", "2026-01-01", "", [CHATGPT_AUTHOR])
    for key in ("title:", "date:", "authors:", "excludeSearch:", "draft:"):
        assert key in fm
    assert "description:" not in fm


def test_weekly_front_matter() -> None:
    data = yaml.safe_load(weekly_front_matter(date(2026, 2, 6), TODAY))
    assert data["title"] == "AUTO 周报 2026-02-06 - 2026-02-13"
    assert data["description"] == "涵盖 2026-02-06 至 2026-02-13 的更新"
    assert data["authors"][0]["name"] == "ChatGPT"


def test_render_items_with_and_without_labels() -> None:
    out = render_items(ISSUES_HEADING, "暂无待解决的 Issues", [
        make_item("Labelled", ("bug", "enhancement")),
        make_item("Plain"),
    ])
    assert out.startswith("## 待解决的 Issues\n\n")
    assert "### [Labelled](https://github.com/test-org/test-repo/issues/8)\n\n" in out
    assert "- **仓库**: test-repo\n" in out
    assert "- **创建于**: 2026-02-13 18:00:00\n" in out
    assert "- **作者**: testuser\n" in out
    assert out.count("- **标签**:") == 1
    assert "- **标签**: bug, enhancement\n" in out


def test_render_items_empty() -> None:
    out = render_items(PRS_HEADING, "暂无待合并的 Pull Requests", [])
    assert out == "## 待合并的 Pull Requests\n\n暂无待合并的 Pull Requests\n\n"


def test_update_daily_report_is_idempotent(tmp_path: Path) -> None:
    path = tmp_path / "daily.mdx"
    head = "---\ntitle: AUTO 更新速递\n---\n\n## 更新内容\n\n- 张三 提交了信息\n\n"
    path.write_text(head, encoding="utf-8")

    update_daily_report(path, [make_item("First issue")], [make_item("First PR")], TODAY)
    update_daily_report(path, [make_item("Second issue")], [], TODAY)

    content = path.read_text(encoding="utf-8")
    assert content.startswith(head)
    assert content.count(ISSUES_HEADING) == 1
    assert content.count(PRS_HEADING) == 1
    assert "First issue" not in content
    assert "First PR" not in content
    assert "Second issue" in content
    assert "暂无待合并的 Pull Requests" in content


def test_update_daily_report_without_sentinel_keeps_file(tmp_path: Path) -> None:
    path = tmp_path / "daily.mdx"
    path.write_text("existing body\n\n", encoding="utf-8")
    update_daily_report(path, [], [], TODAY)
    content = path.read_text(encoding="utf-8")
    assert content.startswith("existing body\n\n## 待解决的 Issues\n\n暂无待解决的 Issues\n\n")


def test_update_daily_report_seeds_missing_file(tmp_path: Path) -> None:
    path = tmp_path / "news" / "daily.mdx"
    update_daily_report(path, [], [], TODAY)
    content = path.read_text(encoding="utf-8")
    data = front_matter_of(content)
    assert data["title"] == "AUTO 更新速递"
    assert data["date"] == "2026-02-13"
    assert ISSUES_HEADING in content


def test_assemble_report_order() -> None:
    fm = daily_front_matter(TODAY)
    with_summary = assemble_report(fm, "## 本周更新摘要\n\n摘要", "## 更新内容\n\n")
    assert with_summary.index("---\n\n## 本周更新摘要") < with_summary.index("## 更新内容")
    without = assemble_report(fm, "", "## 更新内容\n\n")
    assert without == f"---\n{fm}---\n\n## 更新内容\n\n"


def test_weekly_report_path() -> None:
    path = weekly_report_path(Path("news"), date(2026, 2, 6))
    assert path == Path("news/weekly/weekly-2026-02-06/index.mdx")


def test_write_report_overwrites(tmp_path: Path) -> None:
    path = tmp_path / "a" / "b.md"
    write_report(path, "old")
    write_report(path, "测试报告\n")
    assert path.read_text(encoding="utf-8") == "测试报告\n"


def test_write_weekly_index(tmp_path: Path) -> None:
    path = tmp_path / "_index.zh-cn.md"
    path.write_text("stale", encoding="utf-8")
    write_weekly_index(path, TODAY)
    content = path.read_text(encoding="utf-8")
    assert content.endswith("---\n")
    data = front_matter_of(content)
    assert data == {
        "title": "AUTO 周报",
        "date": "2026-02-13",
        "description": "AUTO 周报是由 ChatGPT 每周五发布的一份简报，最近更新于 2026-02-13。",
    }
