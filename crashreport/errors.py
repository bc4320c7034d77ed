class CrashReportError(Exception):
    """所有 crashreport 异常的基类"""


class CollectionError(CrashReportError):
    """采集失败：命令不存在、文件不存在、权限不足等，由采集器就地降级处理"""


class CommandTimeoutError(CollectionError):
    """子进程超过截止时间被强制终止"""

    def __init__(self, command: str, timeout: float):
        super().__init__(f"command timed out after {timeout:g}s: {command}")
        self.command = command
        self.timeout = timeout


class SubmissionError(CrashReportError):
    """提交失败（网络 / API 错误），报告本身不会丢失"""
