#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
File Name   : report.py
Author      : wzw
Date Created: 2026/10/13
Description : 把各采集器的输出按固定顺序拼成一份有大小上限的报告
"""
import logging
from dataclasses import dataclass
from typing import Iterable, Optional, Tuple

from crashreport.collector import log_reader, services, system_command
from crashreport.collector.executor import PrivilegedExecutor
from crashreport.config import EMPTY_PLACEHOLDER, SECTION_LIMIT, TRUNCATION_MARKER, Settings
from crashreport.utils.sizing import byte_length, cut_bytes

logger = logging.getLogger("crashreport.report")

ALLOCATION_ERROR = "Error: Memory allocation failure"

# 报告段落标题，顺序固定
TITLE_METADATA = "System Metadata"
TITLE_FAILED_UNITS = "Systemd Failed Units"
TITLE_JOURNAL = "Journalctl (errors)"
TITLE_DMESG = "Kernel dmesg (err,warn)"
TITLE_PACKAGE_LOG = "Pacman Log Errors"
TITLE_LOG_SCAN = "Other /var/log Matches (grep -i 'error')"
TITLE_UNIT_STATUSES = "Detailed Failed Unit Statuses"

SECTION_TITLES = (
    TITLE_METADATA,
    TITLE_FAILED_UNITS,
    TITLE_JOURNAL,
    TITLE_DMESG,
    TITLE_PACKAGE_LOG,
    TITLE_LOG_SCAN,
    TITLE_UNIT_STATUSES,
)


@dataclass(frozen=True)
class DiagnosticSection:
    title: str
    content: Optional[str]
    limit: int = SECTION_LIMIT


@dataclass(frozen=True)
class AggregatedReport:
    titles: Tuple[str, ...]
    text: str
    contents: Tuple[str, ...] = ()

    def evidence(self) -> str:
        """除元信息外各段落的内容，不含标题，供错误检测使用"""
        return "\n".join(c for t, c in zip(self.titles, self.contents) if t != TITLE_METADATA)

    def __str__(self) -> str:
        return self.text


def truncate(text: str, limit: int, marker: str = TRUNCATION_MARKER) -> str:
    """超过 limit 字节时保留前 limit 个字节并追加截断标记"""
    limit = max(0, limit)
    if byte_length(text) <= limit:
        return text
    return cut_bytes(text, limit) + marker


def section_body(section: DiagnosticSection) -> str:
    """段落正文：空内容用占位符，超长截断"""
    content = section.content
    if content is None or not content.strip():
        return EMPTY_PLACEHOLDER
    try:
        return truncate(content, section.limit)
    except MemoryError:
        logger.error(f"截断段落时内存不足: {section.title}")
        return ALLOCATION_ERROR


def _frame(title: str, body: str) -> str:
    return f"== {title} ==\n{body}\n"


def render_section(section: DiagnosticSection) -> str:
    """== 标题 == 加正文，保证段落数量和顺序不变"""
    return _frame(section.title, section_body(section))


def aggregate(sections: Iterable[DiagnosticSection]) -> AggregatedReport:
    sections = tuple(sections)
    bodies = tuple(section_body(s) for s in sections)
    text = "".join(_frame(s.title, body) for s, body in zip(sections, bodies))
    return AggregatedReport(titles=tuple(s.title for s in sections), text=text, contents=bodies)


def gather_all_errors(
        executor: PrivilegedExecutor,
        settings: Optional[Settings] = None,
        hostname: Optional[str] = None,
) -> AggregatedReport:
    """
    依次运行所有采集器（串行，不并发），按固定顺序汇总。
    任何采集器失败都只影响自己的段落。
    """
    settings = settings or Settings()
    limit = settings.section_limit

    metadata = system_command.collect_metadata(executor, hostname=hostname)
    failed_units, units = services.query_failed_units(executor)
    journal = log_reader.collect_journal_errors(executor)
    dmesg = log_reader.collect_kernel_log(executor)
    package_log = log_reader.collect_package_log(executor, settings.package_log_path)
    log_scan = log_reader.collect_log_scan(executor, settings.log_root, settings.log_scan_depth)
    unit_statuses = services.collect_unit_statuses(executor, units)

    report = aggregate([
        DiagnosticSection(TITLE_METADATA, metadata, limit),
        DiagnosticSection(TITLE_FAILED_UNITS, failed_units, limit),
        DiagnosticSection(TITLE_JOURNAL, journal, limit),
        DiagnosticSection(TITLE_DMESG, dmesg, limit),
        DiagnosticSection(TITLE_PACKAGE_LOG, package_log, limit),
        DiagnosticSection(TITLE_LOG_SCAN, log_scan, limit),
        DiagnosticSection(TITLE_UNIT_STATUSES, unit_statuses, limit),
    ])
    logger.info(f"报告汇总完成，共 {len(report.titles)} 段，{byte_length(report.text)} 字节")
    return report
