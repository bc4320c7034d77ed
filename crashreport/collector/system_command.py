#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
File Name   : system_command.py
Author      : wzw
Date Created: 2026/10/12
Description : 主机元信息采集（主机名、内核、发行版、运行时间）
"""
import logging
import os
import time
from typing import Optional

import psutil

from crashreport.collector.executor import PrivilegedExecutor
from crashreport.config import HOSTNAME_PATH, OS_RELEASE_PATH

logger = logging.getLogger("crashreport.collector")

UNKNOWN_HOST = "unknown"


def _first_line(text: str) -> str:
    return text.splitlines()[0].strip() if text.strip() else ""


def get_hostname(executor: PrivilegedExecutor, path: str = HOSTNAME_PATH) -> str:
    """依次尝试 /bin/hostname、shell 中的 hostname、/etc/hostname，都失败则返回 unknown"""
    if os.access("/bin/hostname", os.X_OK):
        name = _first_line(executor.run(["/bin/hostname"]).output)
        if name:
            return name

    name = _first_line(executor.run("hostname").output)
    if name:
        return name

    try:
        with open(path, "r", encoding="utf-8") as f:
            name = _first_line(f.read())
    except OSError as e:
        logger.debug(f"读取 {path} 失败: {e}")
        name = ""
    return name or UNKNOWN_HOST


def get_kernel_version() -> str:
    try:
        return os.uname().release
    except OSError as e:
        logger.error(f"uname 失败: {e}")
        return "Error getting kernel version"


def get_os_release(path: str = OS_RELEASE_PATH) -> str:
    try:
        with open(path, "r", encoding="utf-8", errors="replace") as f:
            return f.read()
    except OSError as e:
        logger.error(f"读取 {path} 失败: {e}")
        return "Error reading OS release"


def _uptime_from_boot_time() -> str:
    seconds = int(time.time() - psutil.boot_time())
    days, rest = divmod(seconds, 86400)
    hours, rest = divmod(rest, 3600)
    minutes = rest // 60
    if days:
        return f"up {days} days, {hours}:{minutes:02d}"
    return f"up {hours}:{minutes:02d}"


def get_uptime(executor: PrivilegedExecutor) -> str:
    out = executor.run(["uptime"]).output
    if out.strip():
        return out
    # uptime 不可用时用 psutil 的开机时间推算
    try:
        return _uptime_from_boot_time()
    except (OSError, RuntimeError) as e:
        logger.debug(f"psutil 获取开机时间失败: {e}")
        return ""


def collect_metadata(
        executor: PrivilegedExecutor,
        hostname: Optional[str] = None,
        os_release_path: str = OS_RELEASE_PATH,
) -> str:
    hostname = hostname or get_hostname(executor)
    kernel = get_kernel_version()
    os_release = get_os_release(os_release_path)
    uptime = get_uptime(executor).strip()
    return (
        f"Hostname: {hostname or '(unknown)'}\n"
        f"Kernel: {kernel or '(unknown)'}\n"
        f"OS Release: {os_release or '(unknown)'}\n"
        f"Uptime: {uptime or '(unknown)'}\n\n"
    )
