"""
Simulation - 交易模拟结果解释模块

将交易模拟 API 的调用树、日志与状态快照转换为用户的余额变动报告。
"""

from .models import (
    SimulationRequest,
    TransactionCall,
    SimulationData,
    SimulationError,
    SimulationErrorCode,
    SimulationTokenStandard,
    BalanceChange,
    TokenBalanceChange,
    SupportedToken,
)
from .errors import (
    SimulationException,
    SimulationTransportError,
    SimulationChainNotSupportedError,
    SimulationTransactionError,
    SimulationRevertedError,
    SimulationInvalidResponseError,
)
from .base import BaseSimulator
from .api_client import SimulationApiClient
from .interpreter import get_simulation_data

__all__ = [
    # Models
    "SimulationRequest",
    "TransactionCall",
    "SimulationData",
    "SimulationError",
    "SimulationErrorCode",
    "SimulationTokenStandard",
    "BalanceChange",
    "TokenBalanceChange",
    "SupportedToken",
    # Errors
    "SimulationException",
    "SimulationTransportError",
    "SimulationChainNotSupportedError",
    "SimulationTransactionError",
    "SimulationRevertedError",
    "SimulationInvalidResponseError",
    # Simulator
    "BaseSimulator",
    "SimulationApiClient",
    "get_simulation_data",
]
