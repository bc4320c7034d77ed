#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
File Name   : log_reader.py
Author      : wzw
Date Created: 2026/10/12
Description : 日志类诊断信息采集（journalctl、dmesg、pacman.log、/var/log 扫描）
"""
import logging
import shlex

from crashreport.collector.executor import PrivilegedExecutor, needs_unprivileged_retry
from crashreport.config import LOG_ROOT, LOG_SCAN_DEPTH, PACKAGE_LOG_PATH

logger = logging.getLogger("crashreport.collector")

JOURNAL_ARGS = ["journalctl", "-b", "-p", "warning", "--no-pager"]
DMESG_ARGS = ["dmesg", "--level=err,warn"]


def _privileged_with_fallback(executor: PrivilegedExecutor, args) -> str:
    """先提权执行；输出里出现 not found / 权限不足时改用普通权限重跑同一命令"""
    result = executor.run_privileged(" ".join(args))
    if needs_unprivileged_retry(result.output):
        logger.info(f"提权执行 {args[0]} 失败，改用普通权限")
        result = executor.run(args)
    return result.text()


def collect_journal_errors(executor: PrivilegedExecutor) -> str:
    """收集本次启动以来 warning 及以上级别的 journal"""
    return _privileged_with_fallback(executor, JOURNAL_ARGS)


def collect_kernel_log(executor: PrivilegedExecutor) -> str:
    """收集内核日志中的 err / warn"""
    return _privileged_with_fallback(executor, DMESG_ARGS)


def collect_package_log(executor: PrivilegedExecutor, path: str = PACKAGE_LOG_PATH) -> str:
    """在 pacman 日志中大小写不敏感地搜索 error"""
    command = f"grep -I -n -i \"error\" {shlex.quote(path)} 2>/dev/null"
    return executor.run_privileged(command).text()


def collect_log_scan(executor: PrivilegedExecutor, root: str = LOG_ROOT, depth: int = LOG_SCAN_DEPTH) -> str:
    """在日志目录下限定深度递归搜索 error，控制耗时与输出量"""
    command = (
        f"find {shlex.quote(root)} -maxdepth {int(depth)} -type f -readable "
        f"-exec grep -I -n -i \"error\" {{}} + 2>/dev/null"
    )
    return executor.run_privileged(command).text()
