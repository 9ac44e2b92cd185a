"""
Simulation Error Classifier

将传输错误与交易执行错误映射为报告中的 SimulationError。

优先级：
1. 传输错误：保留原始 code / message；"insufficient funds for gas" 视为回滚
2. 交易错误包含 "execution reverted"：回滚（不透出原始原因）
3. 其他交易错误：原样透出 message，无 code
4. 响应结构异常：InvalidResponse
"""

import logging
from typing import Optional

from .errors import (
    SimulationException,
    SimulationRevertedError,
    SimulationTransactionError,
    SimulationTransportError,
)
from .models import SimulationError, SimulationResponse

logger = logging.getLogger(__name__)


INSUFFICIENT_GAS_ERROR_MATCH = "insufficient funds for gas"
REVERTED_ERROR_MATCH = "execution reverted"


def is_insufficient_gas_error(message: Optional[str]) -> bool:
    """模拟时不感知余额的 gas 估算会误报该错误，按回滚处理"""
    return isinstance(message, str) and INSUFFICIENT_GAS_ERROR_MATCH in message


def is_reverted_error(message: Optional[str]) -> bool:
    return isinstance(message, str) and REVERTED_ERROR_MATCH in message


def get_transaction_error(response: SimulationResponse) -> Optional[SimulationException]:
    """返回响应中第一笔报错交易对应的异常"""
    for transaction in response.transactions:
        if not transaction.error:
            continue
        if is_reverted_error(transaction.error):
            return SimulationRevertedError()
        return SimulationTransactionError(transaction.error)
    return None


def raise_transaction_error(response: SimulationResponse) -> None:
    error = get_transaction_error(response)
    if error is not None:
        raise error


def classify_error(error: SimulationException) -> SimulationError:
    """将模拟异常转换为报告中的错误"""
    if isinstance(error, SimulationTransportError) and is_insufficient_gas_error(
        error.message
    ):
        error = SimulationRevertedError()

    logger.warning(f"模拟失败: code={error.code}, message={error.message}")
    return SimulationError(code=error.code, message=error.message)
