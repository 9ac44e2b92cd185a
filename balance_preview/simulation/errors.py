"""
Simulation Errors

模拟过程中的异常类型。所有异常均携带 code / message，
由 classifier 统一转换为报告中的 SimulationError。
"""

from typing import Optional, Union

from .models import SimulationErrorCode


ErrorCode = Optional[Union[int, str]]


class SimulationException(Exception):
    """模拟异常基类"""

    default_message: Optional[str] = None
    default_code: ErrorCode = None

    def __init__(self, message: Optional[str] = None, code: ErrorCode = None):
        self.message = message if message is not None else self.default_message
        self.code = code if code is not None else self.default_code
        super().__init__(self.message or "")


class SimulationTransportError(SimulationException):
    """模拟 API 调用失败（网络、HTTP 或 JSON-RPC 错误）"""


class SimulationChainNotSupportedError(SimulationTransportError):
    """链不在支持列表中"""

    default_code = SimulationErrorCode.CHAIN_NOT_SUPPORTED.value

    def __init__(self, chain_id: int):
        super().__init__(f"Chain is not supported: {hex(chain_id)}")
        self.chain_id = chain_id


class SimulationTransactionError(SimulationException):
    """模拟交易执行报错（原始错误信息，无错误码）"""


class SimulationRevertedError(SimulationException):
    """交易被回滚"""

    default_message = "Transaction was reverted"
    default_code = SimulationErrorCode.REVERTED.value


class SimulationInvalidResponseError(SimulationException):
    """模拟 API 响应结构不符合预期"""

    default_message = "Invalid response from simulation API"
    default_code = SimulationErrorCode.INVALID_RESPONSE.value
