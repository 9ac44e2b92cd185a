"""
Base Simulator Interface

模拟执行能力的抽象接口。解释器只依赖此接口，
生产环境使用 SimulationApiClient，测试中可替换为内存实现。
"""

from abc import ABC, abstractmethod

from .models import SimulationApiRequest, SimulationResponse


class BaseSimulator(ABC):
    """模拟器基类"""

    @abstractmethod
    async def simulate(
        self, chain_id: int, request: SimulationApiRequest
    ) -> SimulationResponse:
        """
        模拟执行一组交易

        Args:
            chain_id: 链 ID
            request: 模拟请求（交易列表与可选的状态覆盖）

        Returns:
            SimulationResponse: 每笔交易的返回值、调用树与状态变化

        Raises:
            SimulationException: 传输失败或响应无效
        """
        raise NotImplementedError
