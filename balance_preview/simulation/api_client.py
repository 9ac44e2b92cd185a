"""
Simulation API Client

通过 JSON-RPC 调用交易模拟 API。
"""

import logging
from typing import Any, Dict, Iterable, Optional

import httpx
from pydantic import ValidationError

from .base import BaseSimulator
from .errors import (
    SimulationChainNotSupportedError,
    SimulationInvalidResponseError,
    SimulationTransportError,
)
from .models import SimulationApiRequest, SimulationResponse

logger = logging.getLogger(__name__)


DEFAULT_METHOD = "infura_simulateTransactions"


class SimulationApiClient(BaseSimulator):
    """
    模拟 API 客户端

    同一实例可被多个并发的模拟共享，不持有跨请求状态。
    """

    def __init__(
        self,
        url: str,
        method: str = DEFAULT_METHOD,
        timeout: float = 30.0,
        supported_chain_ids: Optional[Iterable[int]] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        """
        初始化客户端

        Args:
            url: API 地址，可包含 {chain_id} 占位符
            method: JSON-RPC 方法名
            timeout: 请求超时时间（秒）
            supported_chain_ids: 支持的链 ID，空表示不限制
            client: 外部传入的 httpx 客户端（不会被本实例关闭）
        """
        self.url = url
        self.method = method
        self.timeout = timeout
        self.supported_chain_ids = set(supported_chain_ids or [])

        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=timeout)

    @classmethod
    def from_settings(cls, settings) -> "SimulationApiClient":
        return cls(
            url=settings.simulation_api_url,
            method=settings.simulation_api_method,
            timeout=settings.simulation_timeout_seconds,
            supported_chain_ids=settings.supported_chain_ids,
        )

    def get_url(self, chain_id: int) -> str:
        return self.url.format(chain_id=chain_id)

    def is_chain_supported(self, chain_id: int) -> bool:
        return not self.supported_chain_ids or chain_id in self.supported_chain_ids

    async def simulate(
        self, chain_id: int, request: SimulationApiRequest
    ) -> SimulationResponse:
        if not self.is_chain_supported(chain_id):
            raise SimulationChainNotSupportedError(chain_id)

        payload = {
            "jsonrpc": "2.0",
            "method": self.method,
            "params": [request.model_dump(by_alias=True, exclude_none=True)],
            "id": 1,
        }

        logger.info(
            f"调用模拟 API: chain_id={chain_id}, 交易数={len(request.transactions)}"
        )

        try:
            response = await self._client.post(self.get_url(chain_id), json=payload)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise SimulationTransportError(
                message=e.response.text or str(e),
                code=e.response.status_code,
            )
        except httpx.HTTPError as e:
            raise SimulationTransportError(message=str(e) or type(e).__name__)

        try:
            body: Dict[str, Any] = response.json()
        except ValueError:
            raise SimulationInvalidResponseError()

        if not isinstance(body, dict):
            raise SimulationInvalidResponseError()

        error = body.get("error")
        if error:
            if not isinstance(error, dict):
                raise SimulationTransportError(message=str(error))
            message = error.get("message")
            raise SimulationTransportError(
                message=str(message) if message is not None else None,
                code=error.get("code"),
            )

        try:
            result = SimulationResponse.model_validate(body.get("result"))
        except ValidationError as e:
            logger.debug(f"模拟 API 响应解析失败: {e}")
            raise SimulationInvalidResponseError()

        logger.debug(f"模拟 API 返回 {len(result.transactions)} 笔交易结果")
        return result

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.aclose()
