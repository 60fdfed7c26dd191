#!/usr/bin/env python3
"""Condense a weekly commit digest into a short summary with an LLM."""

import sys

import requests

DEFAULT_BASE_URL = "https://api.openai.com/v1"
DEFAULT_MODEL = "gpt-5-mini"
TIMEOUT = 60

NO_SUMMARY = "__NO_SUMMARY__"

PROMPT_TEMPLATE = """你将收到一周内学生们在各个课程仓库中的更新记录。
请根据这些原始更新，生成一个简洁清晰的「每周更新摘要」，要求如下：

1. 按照课程进行归类，不需要逐日分开。
2. 同一门课程的多条类似更新请合并，避免重复啰嗦。
3. 重点突出：
   - 新增的资料、作业、代码、讲义、教材、试卷等。
   - 对课程说明/文档的重要修改。
   - 有价值的合并更新（如 OpenCS 内容）。
4. 对琐碎操作（如删除无意义的 README、文件改名、格式小改）只需一句话笼统概括。
5. **如果一周内仅有一个仓库更新，请直接输出 "{sentinel}"，不要生成摘要。**
6. 输出风格应简洁明了，适合在新闻模块展示。
7. 请以 "## 本周更新摘要" 作为第一行标题。

下面是原始更新内容：

{updates}

请生成总结。"""


class SummaryError(RuntimeError):
    """Raised when the summary endpoint cannot produce a summary."""


def build_prompt(markdown: str) -> str:
    return PROMPT_TEMPLATE.format(sentinel=NO_SUMMARY, updates=markdown)


def summarize(markdown: str, api_key: str, base_url: str = DEFAULT_BASE_URL,
              model: str = DEFAULT_MODEL) -> str:
    """Return the model's summary text verbatim."""
    if not api_key:
        raise SummaryError("OPENAI_API_KEY is not set")
    url = f"{(base_url or DEFAULT_BASE_URL).rstrip('/')}/responses"
    headers = {
        "Authorization": f"Bearer {api_key}",
        "Content-Type": "application/json",
    }
    try:
        response = requests.post(
            url,
            headers=headers,
            json={"model": model, "input": build_prompt(markdown)},
            timeout=TIMEOUT,
        )
        response.raise_for_status()
        data = response.json()
    except (requests.RequestException, ValueError) as e:
        raise SummaryError(str(e)) from e

    if not isinstance(data, dict) or "output_text" not in data:
        raise SummaryError("response has no output_text")
    return data["output_text"]


def summary_section(markdown: str, api_key: str, base_url: str = DEFAULT_BASE_URL,
                    model: str = DEFAULT_MODEL) -> str:
    """Return the summary to prepend to a report, or "" to skip it."""
    try:
        text = summarize(markdown, api_key, base_url=base_url, model=model)
    except SummaryError as e:
        print(f"Summary generation failed: {e}, using full report instead.", file=sys.stderr)
        return ""
    if text == NO_SUMMARY:
        return ""
    return text
