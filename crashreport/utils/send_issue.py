#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
File Name   : send_issue.py
Author      : wzw
Date Created: 2026/10/14
Description : GitHub issue 提交与 Gemini 摘要生成
"""
import logging
from typing import Any, Dict, Optional

import requests

from crashreport.config import GEMINI_API_URL, GITHUB_API_URL, USER_AGENT, Settings, is_configured
from crashreport.errors import SubmissionError
from crashreport.utils.sizing import byte_length

logger = logging.getLogger("crashreport.issue")

SUMMARY_SKIPPED = "AI message generation skipped due to missing API key."
SUMMARY_FAILED = "Error generating AI message"
SUMMARY_UNPARSEABLE = "Failed to parse AI message from response."


def _extract_summary(data: Dict[str, Any]) -> Optional[str]:
    """candidates[0].content.parts[*].text"""
    candidates = data.get("candidates")
    if not isinstance(candidates, list) or not candidates:
        return None
    content = candidates[0].get("content") if isinstance(candidates[0], dict) else None
    if not isinstance(content, dict):
        return None
    parts = content.get("parts")
    if isinstance(parts, list):
        texts = [p.get("text") for p in parts if isinstance(p, dict) and isinstance(p.get("text"), str)]
        if texts:
            return "".join(texts)
    # 旧格式直接把 text 放在 content 下
    text = content.get("text")
    return text if isinstance(text, str) else None


def generate_summary(report: str, settings: Settings, session: Optional[requests.Session] = None) -> str:
    """
    把报告原文发送给 Gemini 生成摘要。
    不会抛出异常：缺少 key、请求失败、响应无法解析都返回固定说明文字。
    """
    if not is_configured(settings.gemini_api_key):
        logger.warning("未配置 Gemini API key，跳过 AI 摘要")
        return SUMMARY_SKIPPED

    http = session or requests
    url = f"{GEMINI_API_URL}/{settings.gemini_model}:generateContent"
    payload = {"contents": [{"parts": [{"text": report}]}]}
    try:
        resp = http.post(
            url,
            params={"key": settings.gemini_api_key},
            json=payload,
            headers={"Content-Type": "application/json"},
            timeout=settings.http_timeout,
        )
        resp.raise_for_status()
    except requests.RequestException as e:
        logger.error(f"AI 摘要请求失败: {e}")
        return SUMMARY_FAILED

    try:
        summary = _extract_summary(resp.json())
    except ValueError as e:
        logger.error(f"AI 摘要响应不是合法 JSON: {e}")
        summary = None
    if summary is None:
        logger.error("AI 摘要响应中没有文本")
        return SUMMARY_UNPARSEABLE
    logger.info(f"AI 摘要生成成功，{len(summary)} 字符")
    return summary


def create_github_issue(
        title: str,
        body: str,
        settings: Settings,
        session: Optional[requests.Session] = None,
) -> str:
    """创建 issue 并返回其 html_url，任何失败都抛出 SubmissionError"""
    if not is_configured(settings.github_token):
        raise SubmissionError("GitHub token not configured")
    size = byte_length(body)
    if size > settings.body_limit:
        raise SubmissionError(f"issue body too long: {size} bytes > {settings.body_limit}")

    http = session or requests
    url = f"{GITHUB_API_URL}/repos/{settings.repo_owner}/{settings.repo_name}/issues"
    headers = {
        "Authorization": f"token {settings.github_token}",
        "User-Agent": USER_AGENT,
        "Accept": "application/vnd.github+json",
    }
    try:
        resp = http.post(
            url,
            json={"title": title, "body": body},
            headers=headers,
            timeout=settings.http_timeout,
        )
        resp.raise_for_status()
        data = resp.json()
    except requests.RequestException as e:
        logger.error(f"issue 提交失败: {e}\n标题: {title}")
        raise SubmissionError(f"GitHub request failed: {e}") from e
    except ValueError as e:
        raise SubmissionError(f"GitHub response is not JSON: {e}") from e

    issue_url = data.get("html_url") if isinstance(data, dict) else None
    if not isinstance(issue_url, str):
        raise SubmissionError("GitHub response has no html_url")
    logger.info(f"issue 提交成功: {issue_url}")
    return issue_url
