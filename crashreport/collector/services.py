"""systemd 失败单元采集"""
import logging
import shlex
from typing import List, Sequence, Tuple

from crashreport.collector.executor import PrivilegedExecutor

logger = logging.getLogger("crashreport.collector")

FAILED_UNITS_ARGS = ["systemctl", "--failed", "--no-legend", "--no-pager", "--plain"]

# 单元名前可能带的状态符号
_BULLETS = ("●", "*", "×")


def query_failed_units(executor: PrivilegedExecutor) -> Tuple[str, List[str]]:
    """只执行一次 systemctl --failed，返回原始列表和解析出的单元名"""
    result = executor.run(FAILED_UNITS_ARGS)
    if result.error is not None:
        return result.text(), []
    return result.output, parse_unit_names(result.output)


def collect_failed_units(executor: PrivilegedExecutor) -> str:
    return query_failed_units(executor)[0]


def parse_unit_names(listing: str) -> List[str]:
    """取每行第一列作为单元名"""
    units = []
    for line in listing.splitlines():
        fields = line.split()
        while fields and fields[0] in _BULLETS:
            fields = fields[1:]
        if fields and fields[0] not in units:
            units.append(fields[0])
    return units


def list_failed_units(executor: PrivilegedExecutor) -> List[str]:
    return query_failed_units(executor)[1]


def build_status_command(units: Sequence[str]) -> str:
    """所有单元放进同一个 shell 循环，只需要一次提权"""
    quoted = " ".join(shlex.quote(u) for u in units)
    return (
        f"for u in {quoted}; do "
        f"systemctl status --no-pager --full \"$u\" 2>/dev/null || true; "
        f"echo \"---\"; done"
    )


def collect_unit_statuses(executor: PrivilegedExecutor, units: Sequence[str]) -> str:
    """
    对每个失败单元执行 systemctl status，合并成一次特权调用。
    没有失败单元时返回空串。
    """
    if not units:
        return ""
    logger.info(f"收集 {len(units)} 个失败单元的详细状态")
    return executor.run_privileged(build_status_command(units)).text()
