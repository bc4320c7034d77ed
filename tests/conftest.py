from typing import Dict, Optional, Union

import pytest

from crashreport.collector.executor import CommandResult, EscalationState, PrivilegedExecutor


class FakeExecutor(PrivilegedExecutor):
    """run 不启动子进程，按命令文本返回预设输出并记录调用"""

    def __init__(
            self,
            responses: Optional[Dict[str, Union[str, CommandResult]]] = None,
            helper: Optional[str] = None,
            euid: int = 1000,
            state: Optional[EscalationState] = None,
    ):
        super().__init__(state=state, helper_paths=(), euid=euid)
        self.responses = dict(responses or {})
        self.helper = helper
        self.calls = []

    def find_helper(self) -> Optional[str]:
        return self.helper

    def run(self, command) -> CommandResult:
        key = command if isinstance(command, str) else " ".join(command)
        self.calls.append(key)
        value = self.responses.get(key, "")
        if isinstance(value, CommandResult):
            return value
        return CommandResult(value)


@pytest.fixture
def fake_executor():
    return FakeExecutor
