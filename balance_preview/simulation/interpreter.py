"""
Simulation Result Interpreter

将交易模拟结果转换为用户的余额变动报告：

1. 第一次模拟：获取调用树、日志与原生币余额快照
2. 递归提取日志并按 Token 标准解码转账事件
3. 筛选与用户相关的转账，构建余额查询计划
4. 第二次模拟：在原始交易前后查询用户的 Token 余额
5. 计算余额变动；任一步失败时返回分类后的错误
"""

import logging
from typing import List

from .base import BaseSimulator
from .balances import get_native_balance_change, get_token_balance_changes
from .classifier import classify_error, raise_transaction_error
from .decoder import decode_transfer_events
from .errors import SimulationException
from .models import (
    DecodedTransferEvent,
    SimulationApiRequest,
    SimulationData,
    SimulationRequest,
    TokenBalanceChange,
)
from .planner import filter_user_transfers, plan_balance_queries, to_api_transactions
from .trace import extract_logs

logger = logging.getLogger(__name__)


async def get_simulation_data(
    request: SimulationRequest, simulator: BaseSimulator
) -> SimulationData:
    """
    模拟交易并返回用户的余额变动

    Args:
        request: 模拟请求
        simulator: 模拟执行接口

    Returns:
        SimulationData: 余额变动，或错误（二者互斥）
    """
    logger.info(
        f"开始模拟: chain_id={request.chain_id}, from={request.from_address}, "
        f"交易数={len(request.transactions)}"
    )

    try:
        response = await simulator.simulate(
            request.chain_id,
            SimulationApiRequest(
                transactions=to_api_transactions(request),
                overrides=request.overrides,
                with_call_trace=True,
                with_logs=True,
            ),
        )
        raise_transaction_error(response)

        native_balance_change = get_native_balance_change(
            request.from_address, response
        )

        events = decode_transfer_events(extract_logs(response))
        user_events = filter_user_transfers(events, request.from_address)

        token_balance_changes = await _get_token_balance_changes(
            request, user_events, simulator
        )
    except SimulationException as e:
        return SimulationData(error=classify_error(e))

    logger.info(
        f"模拟完成: 原生币变动={'有' if native_balance_change else '无'}, "
        f"Token 变动={len(token_balance_changes)}"
    )

    return SimulationData(
        native_balance_change=native_balance_change,
        token_balance_changes=token_balance_changes,
    )


async def _get_token_balance_changes(
    request: SimulationRequest,
    events: List[DecodedTransferEvent],
    simulator: BaseSimulator,
) -> List[TokenBalanceChange]:
    if not events:
        return []

    plan = plan_balance_queries(request, events)
    response = await simulator.simulate(request.chain_id, plan.request)

    return get_token_balance_changes(plan, response, request.from_address)
