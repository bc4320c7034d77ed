#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
File Name   : pipeline.py
Author      : wzw
Date Created: 2026/10/14
Description : 一次完整的 采集 -> 汇总 -> 检测 -> 摘要 -> 截断 -> 提交 流程
"""
import logging
from dataclasses import asdict, dataclass
from typing import Any, Callable, Dict, Optional

from crashreport.collector.executor import PrivilegedExecutor
from crashreport.collector.system_command import get_hostname
from crashreport.config import Settings, load_settings
from crashreport.errors import SubmissionError
from crashreport.utils.detector import has_signal
from crashreport.utils.payload import build_payload, issue_title
from crashreport.utils.report import gather_all_errors
from crashreport.utils.send_issue import create_github_issue, generate_summary

logger = logging.getLogger("crashreport.pipeline")

Summarizer = Callable[[str, Settings], str]
Submitter = Callable[[str, str, Settings], str]


@dataclass
class SubmissionResult:
    submitted: bool
    has_errors: bool
    report: str
    issue_url: Optional[str] = None
    summary: Optional[str] = None
    body: Optional[str] = None
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def build_executor(settings: Settings) -> PrivilegedExecutor:
    return PrivilegedExecutor(helper_paths=settings.helper_paths, timeout=settings.command_timeout)


def _summary_input(report: str, notes: Optional[str]) -> str:
    if notes and notes.strip():
        return f"{report}\n== User Comments ==\n{notes.strip()}\n"
    return report


def run_report_cycle(
        settings: Optional[Settings] = None,
        executor: Optional[PrivilegedExecutor] = None,
        notes: Optional[str] = None,
        summarize: Summarizer = generate_summary,
        submit: Submitter = create_github_issue,
) -> SubmissionResult:
    """
    执行一次完整的上报流程。
    没有检测到错误时不会调用任何外部接口；提交失败时报告原文保留在结果中。
    """
    settings = settings or load_settings()
    executor = executor or build_executor(settings)

    hostname = get_hostname(executor)
    report = gather_all_errors(executor, settings, hostname=hostname)

    if not has_signal(report.evidence()):
        logger.info("未检测到明显错误，不提交")
        return SubmissionResult(submitted=False, has_errors=False, report=report.text)

    logger.info("检测到错误，生成 AI 摘要并提交 issue")
    summary = summarize(_summary_input(report.text, notes), settings)
    payload = build_payload(report.text, summary, settings.ping_users, settings.body_limit)
    body = payload.body

    try:
        issue_url = submit(issue_title(hostname), body, settings)
    except SubmissionError as e:
        logger.error(f"提交失败，报告已保留: {e}")
        return SubmissionResult(
            submitted=False, has_errors=True, report=report.text,
            summary=summary, body=body, error=str(e),
        )

    return SubmissionResult(
        submitted=True, has_errors=True, report=report.text,
        issue_url=issue_url, summary=summary, body=body,
    )


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s")
    result = run_report_cycle()
    print(result.report)
    if result.submitted:
        print(f"GitHub issue created: {result.issue_url}")
    elif result.error:
        print(f"Submission failed: {result.error}")
    else:
        print("No significant errors detected.")
