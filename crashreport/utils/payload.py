#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
File Name   : payload.py
Author      : wzw
Date Created: 2026/10/13
Description : 在 issue 正文长度上限内拼装提交内容，系统信息与 AI 摘要各占一半预算
"""
from dataclasses import dataclass
from typing import Tuple

from jinja2 import Template

from crashreport.config import GITHUB_BODY_LIMIT, TRUNCATION_MARKER
from crashreport.utils.sizing import byte_length, cut_bytes

HEADER_TEMPLATE = Template("@{{ mention }}\n\n## System Information\n```\n", keep_trailing_newline=True)
MIDDLE_TEMPLATE = Template("\n```\n\n## AI Generated Summary\n", keep_trailing_newline=True)
TAIL_TEMPLATE = Template("\n", keep_trailing_newline=True)
TITLE_TEMPLATE = Template("Automated Bug Report: System Errors Detected on {{ hostname or '(unknown)' }}")


@dataclass(frozen=True)
class SubmissionPayload:
    header: str
    system_part: str
    middle: str
    ai_part: str
    tail: str

    @property
    def body(self) -> str:
        return self.header + self.system_part + self.middle + self.ai_part + self.tail

    def __len__(self) -> int:
        return byte_length(self.body)


def _fit(text: str, share: int, marker: str) -> str:
    if byte_length(text) <= share:
        return text
    if share < byte_length(marker):
        return ""
    return cut_bytes(text, share - byte_length(marker)) + marker


def split(
        raw_text: str,
        summary_text: str,
        total_budget: int,
        fixed_overhead: str,
        marker: str = TRUNCATION_MARKER,
) -> Tuple[str, str]:
    """
    长度都按 UTF-8 字节计算。
    先扣除固定文本的长度，剩余预算对半分给两部分：
    前一半给 raw_text，余数归 summary_text。
    超出份额的部分截断到 share - 标记长度 再加截断标记；
    份额连标记都放不下时返回空串。
    """
    raw_text = raw_text or ""
    summary_text = summary_text or ""
    available = max(0, total_budget - byte_length(fixed_overhead))
    raw_share = available // 2
    summary_share = available - raw_share
    return _fit(raw_text, raw_share, marker), _fit(summary_text, summary_share, marker)


def issue_title(hostname: str) -> str:
    return TITLE_TEMPLATE.render(hostname=hostname)


def build_payload(
        report: str,
        summary: str,
        mention: str,
        budget: int = GITHUB_BODY_LIMIT,
) -> SubmissionPayload:
    header = HEADER_TEMPLATE.render(mention=mention)
    middle = MIDDLE_TEMPLATE.render()
    tail = TAIL_TEMPLATE.render()
    system_part, ai_part = split(report, summary, budget, header + middle + tail)
    return SubmissionPayload(header, system_part, middle, ai_part, tail)
