"""
调用树日志提取

将嵌套调用树展开为按访问顺序排列的日志列表。
"""

from typing import List, Optional

from .models import CallTraceNode, SimulationResponse, SimulationResponseLog


def extract_trace_logs(call_trace: Optional[CallTraceNode]) -> List[SimulationResponseLog]:
    """
    深度优先、先序遍历调用树，收集所有日志

    父调用自身的日志先于子调用，子调用按调用顺序访问。
    使用显式栈，EVM 调用深度（最多 1024）不会触发递归上限。
    """
    logs: List[SimulationResponseLog] = []
    if call_trace is None:
        return logs

    stack = [call_trace]
    while stack:
        node = stack.pop()
        logs.extend(node.logs)
        stack.extend(reversed(node.calls))

    return logs


def extract_logs(response: SimulationResponse) -> List[SimulationResponseLog]:
    """按交易顺序收集响应中所有交易的日志"""
    logs: List[SimulationResponseLog] = []
    for transaction in response.transactions:
        logs.extend(extract_trace_logs(transaction.call_trace))
    return logs
