#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
File Name   : executor.py
Author      : wzw
Date Created: 2026/10/12
Description : 执行 shell 命令，必要时通过 pkexec 提权；整个进程生命周期内只认证一次
"""
import logging
import os
import signal
import subprocess
from typing import NamedTuple, Optional, Sequence, Union

from crashreport.config import COMMAND_TIMEOUT, HELPER_PATHS, PROBE_SENTINEL
from crashreport.errors import CollectionError, CommandTimeoutError

logger = logging.getLogger("crashreport.executor")

Command = Union[str, Sequence[str]]

# 提权失败 / 权限不足时 helper 或命令写到输出里的短语
RETRY_PHRASES = ("not found", "operation not permitted", "permission denied", "not authorized")

# 进程组被 kill 之后等待管道关闭的时间
KILL_GRACE = 5.0

TIMEOUT_TEXT = "Error: command timed out"


class CommandResult(NamedTuple):
    output: str
    error: Optional[CollectionError] = None

    @property
    def timed_out(self) -> bool:
        return isinstance(self.error, CommandTimeoutError)

    def text(self) -> str:
        """采集器使用的文本：超时且没有任何输出时返回固定错误串"""
        if self.timed_out and not self.output.strip():
            return TIMEOUT_TEXT
        return self.output


class EscalationState:
    """提权认证状态：最多置为 True 一次，之后不会再复位"""

    def __init__(self, authenticated: bool = False):
        self._authenticated = bool(authenticated)

    @property
    def authenticated(self) -> bool:
        return self._authenticated

    def mark_authenticated(self) -> None:
        self._authenticated = True

    def __repr__(self) -> str:
        return f"EscalationState(authenticated={self._authenticated})"


def quote_single(command: str) -> str:
    """把每个 ' 替换成 '\\''，用于放进一对单引号里"""
    return command.replace("'", "'\\''")


def needs_unprivileged_retry(output: str) -> bool:
    """输出中带有 not found / 权限不足等短语时，调用方应改走非特权路径"""
    lowered = (output or "").lower()
    return any(phrase in lowered for phrase in RETRY_PHRASES)


def _describe(command: Command) -> str:
    if isinstance(command, str):
        return command
    return " ".join(command)


class PrivilegedExecutor:
    """
    运行诊断命令。
    - run: 直接执行，非零退出码不算失败，返回已产生的输出
    - run_privileged: 非 root 时经 pkexec 包一层 /bin/sh -c 执行
    认证状态由注入的 EscalationState 保存，测试中可以传入预先认证过的状态。
    """

    def __init__(
            self,
            state: Optional[EscalationState] = None,
            helper_paths: Sequence[str] = HELPER_PATHS,
            timeout: float = COMMAND_TIMEOUT,
            euid: Optional[int] = None,
    ):
        self.state = state if state is not None else EscalationState()
        self.helper_paths = tuple(helper_paths)
        self.timeout = timeout
        self._euid = euid

    def is_root(self) -> bool:
        euid = self._euid if self._euid is not None else os.geteuid()
        return euid == 0

    def find_helper(self) -> Optional[str]:
        for path in self.helper_paths:
            if os.access(path, os.X_OK):
                return path
        return None

    def run(self, command: Command) -> CommandResult:
        """
        执行命令并返回标准输出。
        字符串走 /bin/sh，参数列表直接 exec，不经过 shell。
        """
        shell = isinstance(command, str)
        desc = _describe(command)
        logger.debug(f"执行命令: {desc}")
        try:
            proc = subprocess.Popen(
                command if shell else list(command),
                shell=shell,
                stdout=subprocess.PIPE,
                stderr=subprocess.DEVNULL,
                start_new_session=True,
            )
        except OSError as e:
            logger.warning(f"命令无法启动: {desc}: {e}")
            return CommandResult("", CollectionError(f"failed to run {desc}: {e}"))

        try:
            out, _ = proc.communicate(timeout=self.timeout)
        except subprocess.TimeoutExpired as e:
            logger.warning(f"命令超时（{self.timeout:g}s），结束整个进程组: {desc}")
            _kill_group(proc)
            try:
                out, _ = proc.communicate(timeout=KILL_GRACE)
            except subprocess.TimeoutExpired:
                # 组内还有杀不掉的进程（例如 root 身份的 pkexec 子进程）仍持有管道，放弃读取
                proc.stdout.close()
                out = e.output
            proc.wait()
            return CommandResult(_decode(out), CommandTimeoutError(desc, self.timeout))

        if proc.returncode:
            logger.debug(f"命令退出码 {proc.returncode}: {desc}")
        return CommandResult(_decode(out))

    def preauthenticate(self) -> bool:
        """提前做一次 pkexec 探测，让认证对话框只在开始时出现一次"""
        if self.is_root():
            return True
        if self.state.authenticated:
            return True
        helper = self.find_helper()
        if helper is None:
            logger.warning("未找到 pkexec，跳过提权")
            return False
        return self._probe(helper)

    def _probe(self, helper: str) -> bool:
        if self.state.authenticated:
            return True
        probe = f"{helper} /bin/sh -c '{quote_single('echo ' + PROBE_SENTINEL)}'"
        result = self.run(probe)
        if PROBE_SENTINEL in result.output:
            self.state.mark_authenticated()
            logger.info("pkexec 认证成功，本次运行不再重复认证")
            return True
        logger.warning("pkexec 认证未通过，特权命令可能只返回错误信息")
        return False

    def run_privileged(self, command: str) -> CommandResult:
        """
        以提权方式执行命令：
        1. 已是 root：等同于 run
        2. 没有 pkexec：退回 run（可能只拿到空输出或权限错误）
        3. 尚未认证：先探测一次
        4. 用 pkexec /bin/sh -c '<cmd>' 2>&1 执行
        认证失败不会抛异常，只体现在输出文本里。
        """
        if self.is_root():
            return self.run(command)

        helper = self.find_helper()
        if helper is None:
            logger.debug(f"无 pkexec，以普通权限执行: {command}")
            return self.run(command)

        self._probe(helper)
        wrapped = f"{helper} /bin/sh -c '{quote_single(command)}' 2>&1"
        return self.run(wrapped)


def _decode(data: Optional[bytes]) -> str:
    if not data:
        return ""
    return data.decode("utf-8", errors="replace")


def _kill_group(proc: subprocess.Popen) -> None:
    """子进程以新会话启动，pid 即进程组 id，shell 启动的子孙进程一并结束"""
    try:
        os.killpg(proc.pid, signal.SIGKILL)
    except ProcessLookupError:
        pass
    except PermissionError:
        logger.warning(f"无权结束进程组 {proc.pid}，只结束直接子进程")
        proc.kill()
