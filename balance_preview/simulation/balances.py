"""
Balance Diff Calculation

计算原生币与 Token 的余额变动。所有余额为十六进制无符号整数，
输入兼容任意前导零，输出为规范格式（hex(int)）。
"""

import logging
from typing import Dict, List, Optional

from .errors import SimulationInvalidResponseError
from .models import (
    AccountState,
    BalanceChange,
    SimulationResponse,
    SimulationTokenStandard,
    TokenBalanceChange,
    normalize_address,
)
from .planner import BalancePhase, BalanceQuery, BalanceQueryPlan

logger = logging.getLogger(__name__)


def parse_quantity(value: Optional[str]) -> int:
    """解析十六进制数值，空值（"0x"）视为 0"""
    if value is None or value in ("", "0x"):
        return 0
    try:
        return int(value, 16)
    except (TypeError, ValueError):
        raise SimulationInvalidResponseError()


def build_balance_change(previous: int, new: int) -> Optional[BalanceChange]:
    """余额未变化时返回 None"""
    if previous == new:
        return None

    return BalanceChange(
        previous_balance=hex(previous),
        new_balance=hex(new),
        difference=hex(abs(new - previous)),
        is_decrease=new < previous,
    )


def _find_balance(states: Dict[str, AccountState], address: str) -> Optional[str]:
    for key, state in states.items():
        if normalize_address(key) == address:
            return state.balance
    return None


def get_native_balance_change(
    user_address: str, response: SimulationResponse
) -> Optional[BalanceChange]:
    """
    从第一次模拟的 stateDiff 读取用户原生币余额变动

    执行前余额取第一笔包含该用户的交易的 pre，
    执行后余额取最后一笔包含该用户的交易的 post。
    """
    user_address = normalize_address(user_address)
    state_diffs = [tx.state_diff for tx in response.transactions if tx.state_diff]

    previous_balance = None
    for diff in state_diffs:
        previous_balance = _find_balance(diff.pre, user_address)
        if previous_balance is not None:
            break

    new_balance = None
    for diff in reversed(state_diffs):
        new_balance = _find_balance(diff.post, user_address)
        if new_balance is not None:
            break

    if previous_balance is None or new_balance is None:
        return None

    return build_balance_change(
        parse_quantity(previous_balance), parse_quantity(new_balance)
    )


def read_balance(query: BalanceQuery, result: str, user_address: str) -> int:
    """ownerOf 返回持有者地址：持有者为用户则余额为 1，否则为 0"""
    amount = parse_quantity(result)
    if query.standard == SimulationTokenStandard.ERC721:
        return 1 if amount == int(user_address, 16) else 0
    return amount


def get_token_balance_changes(
    plan: BalanceQueryPlan, response: SimulationResponse, user_address: str
) -> List[TokenBalanceChange]:
    """按计划标签将第二次模拟的结果映射回各 Token，并计算余额变动"""
    if len(response.transactions) != len(plan.calls):
        logger.warning(
            f"余额查询响应数量不符: 期望 {len(plan.calls)}, "
            f"实际 {len(response.transactions)}"
        )
        raise SimulationInvalidResponseError()

    user_address = normalize_address(user_address)
    previous: Dict[int, int] = {}
    new: Dict[int, int] = {}

    for call, result in zip(plan.calls, response.transactions):
        if call.phase == BalancePhase.TRANSACTION:
            continue

        query = plan.queries[call.query_index]
        if result.error:
            logger.debug(f"余额查询报错 ({query.contract_address}): {result.error}")

        balance = read_balance(query, result.return_value, user_address)
        if call.phase == BalancePhase.PREVIOUS:
            previous[call.query_index] = balance
        else:
            new[call.query_index] = balance

    changes: List[TokenBalanceChange] = []
    for index, query in enumerate(plan.queries):
        change = build_balance_change(previous.get(index, 0), new[index])
        if change is None:
            continue

        changes.append(
            TokenBalanceChange(
                standard=query.standard,
                address=query.contract_address,
                token_id=hex(query.token_id) if query.token_id is not None else None,
                **change.model_dump(),
            )
        )

    return changes
