#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
File Name   : config.py
Author      : wzw
Date Created: 2026/10/12
Description : 全局常量与运行配置（配置文件 + 环境变量）
"""
import json
import logging
import os
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ValidationError

logger = logging.getLogger("crashreport.config")

# 每个报告段落的大小上限（字符）
SECTION_LIMIT = 200 * 1024

# GitHub issue 正文上限
GITHUB_BODY_LIMIT = 65536

# 截断标记，段落与提交正文共用
TRUNCATION_MARKER = "\n... (truncated)\n"

# 段落内容为空时的占位符
EMPTY_PLACEHOLDER = "(none)"

# 错误关键字（大小写不敏感）
ERROR_KEYWORDS = ("error", "fail", "warn", "critical")

# 提权工具的候选路径，按顺序检查可执行权限
HELPER_PATHS = ("/usr/bin/pkexec", "/bin/pkexec")

# 提权探测命令输出中的哨兵
PROBE_SENTINEL = "POLKIT_OK"

# 子进程默认截止时间（秒）
COMMAND_TIMEOUT = 120.0

# 日志来源
PACKAGE_LOG_PATH = "/var/log/pacman.log"
LOG_ROOT = "/var/log"
LOG_SCAN_DEPTH = 3
OS_RELEASE_PATH = "/etc/os-release"
HOSTNAME_PATH = "/etc/hostname"

# 外部接口
GITHUB_API_URL = "https://api.github.com"
GEMINI_API_URL = "https://generativelanguage.googleapis.com/v1/models"
USER_AGENT = "AcreetionOS-Crash-Reporter"
HTTP_TIMEOUT = 30.0

# 未配置时的占位 token，视为缺失
PLACEHOLDER_TOKENS = ("your_github_token_here", "your_gemini_api_key_here")


def _default_config_path() -> str:
    xdg = os.environ.get("XDG_CONFIG_HOME")
    if xdg:
        return os.path.join(xdg, "crash-reporter", "config.json")
    return os.path.join(os.path.expanduser("~"), ".config", "crash-reporter", "config.json")


CONFIG_PATH = _default_config_path()

# 环境变量 -> 配置字段
ENV_OVERRIDES = {
    "CRASHREPORT_GITHUB_TOKEN": "github_token",
    "CRASHREPORT_GEMINI_API_KEY": "gemini_api_key",
    "CRASHREPORT_REPO_OWNER": "repo_owner",
    "CRASHREPORT_REPO_NAME": "repo_name",
    "CRASHREPORT_PING_USERS": "ping_users",
}


class Settings(BaseModel):
    github_token: Optional[str] = None
    gemini_api_key: Optional[str] = None
    repo_owner: str = "AcreetionOS-Linux"
    repo_name: str = "crash-reports"
    ping_users: str = "AcreetionOS-Linux"
    gemini_model: str = "gemini-pro"

    section_limit: int = SECTION_LIMIT
    body_limit: int = GITHUB_BODY_LIMIT
    command_timeout: float = COMMAND_TIMEOUT
    http_timeout: float = HTTP_TIMEOUT
    helper_paths: List[str] = list(HELPER_PATHS)

    package_log_path: str = PACKAGE_LOG_PATH
    log_root: str = LOG_ROOT
    log_scan_depth: int = LOG_SCAN_DEPTH


def get_default_config() -> Dict[str, Any]:
    """安全的默认配置（不含任何 token）"""
    return Settings().model_dump()


def is_configured(token: Optional[str]) -> bool:
    return bool(token) and token not in PLACEHOLDER_TOKENS


def load_settings(path: Optional[str] = None, environ: Optional[Dict[str, str]] = None) -> Settings:
    """
    读取配置文件，再用环境变量覆盖。
    文件不存在或内容非法时使用默认值，不会抛出异常。
    """
    path = path or CONFIG_PATH
    environ = os.environ if environ is None else environ

    raw: Dict[str, Any] = {}
    if os.path.isfile(path):
        try:
            with open(path, "r", encoding="utf-8") as f:
                raw = json.load(f)
            if not isinstance(raw, dict):
                logger.warning(f"配置文件格式错误，忽略: {path}")
                raw = {}
        except (OSError, ValueError) as e:
            logger.error(f"配置加载失败: {e}")
            raw = {}

    for env_key, field in ENV_OVERRIDES.items():
        value = environ.get(env_key)
        if value:
            raw[field] = value

    try:
        return Settings(**raw)
    except ValidationError as e:
        logger.error(f"配置校验失败，使用默认配置: {e}")
        return Settings()
