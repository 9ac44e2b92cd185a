"""
Simulation API Client Tests

使用 httpx.MockTransport 替代真实的模拟 API。
"""

import asyncio
import json

import httpx
import pytest

from balance_preview.config import Settings
from balance_preview.simulation.api_client import DEFAULT_METHOD, SimulationApiClient
from balance_preview.simulation.classifier import classify_error
from balance_preview.simulation.errors import (
    SimulationChainNotSupportedError,
    SimulationInvalidResponseError,
    SimulationTransportError,
)
from balance_preview.simulation.models import (
    SimulationApiRequest,
    SimulationError,
    SimulationRequestTransaction,
)

from tests.factories import (
    CONTRACT_ADDRESS,
    OTHER_ADDRESS,
    TARGET_ADDRESS,
    USER_ADDRESS,
    erc20_transfer_log,
    transaction_result,
)


API_URL = "https://simulation.example/v3/{chain_id}"


def make_api_request() -> SimulationApiRequest:
    return SimulationApiRequest(
        transactions=[
            SimulationRequestTransaction(
                from_address=USER_ADDRESS, to=TARGET_ADDRESS, data="0x", value="0x0"
            )
        ],
        with_call_trace=True,
        with_logs=True,
    )


def simulate(handler, chain_id=1, **kwargs):
    """通过 MockTransport 执行一次模拟，返回 (结果或异常, 收到的请求列表)"""
    seen = []

    def record(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return handler(request)

    async def go():
        async with httpx.AsyncClient(transport=httpx.MockTransport(record)) as client:
            api = SimulationApiClient(API_URL, client=client, **kwargs)
            try:
                return await api.simulate(chain_id, make_api_request())
            except Exception as e:
                return e

    return asyncio.run(go()), seen


def rpc_result(result):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"jsonrpc": "2.0", "id": 1, "result": result})

    return handler


class TestSimulate:
    """测试模拟 API 调用"""

    def test_success(self):
        result = {
            "transactions": [
                transaction_result(logs=[erc20_transfer_log(OTHER_ADDRESS, USER_ADDRESS, 4)])
            ]
        }

        response, seen = simulate(rpc_result(result))

        assert len(response.transactions) == 1
        assert response.transactions[0].call_trace.logs[0].address == CONTRACT_ADDRESS
        assert str(seen[0].url) == "https://simulation.example/v3/1"

    def test_payload(self):
        """请求体为 JSON-RPC 2.0，参数使用 camelCase 别名"""
        _, seen = simulate(rpc_result({"transactions": []}), chain_id=5)

        body = json.loads(seen[0].content)
        assert seen[0].method == "POST"
        assert str(seen[0].url) == "https://simulation.example/v3/5"
        assert body["jsonrpc"] == "2.0"
        assert body["method"] == DEFAULT_METHOD
        assert body["params"] == [
            {
                "transactions": [
                    {"from": USER_ADDRESS, "to": TARGET_ADDRESS, "data": "0x", "value": "0x0"}
                ],
                "withCallTrace": True,
                "withLogs": True,
            }
        ]

    def test_custom_method(self):
        _, seen = simulate(rpc_result({"transactions": []}), method="eth_simulateV1")
        assert json.loads(seen[0].content)["method"] == "eth_simulateV1"

    def test_rpc_error(self):
        def handler(request):
            return httpx.Response(
                200,
                json={
                    "jsonrpc": "2.0",
                    "id": 1,
                    "error": {"code": -32000, "message": "insufficient funds for gas"},
                },
            )

        error, _ = simulate(handler)

        assert isinstance(error, SimulationTransportError)
        assert error.code == -32000
        assert error.message == "insufficient funds for gas"

    def test_rpc_error_non_string_message(self):
        """非字符串的错误信息转为字符串，分类时不会抛出 TypeError"""
        def handler(request):
            return httpx.Response(
                200,
                json={"jsonrpc": "2.0", "id": 1, "error": {"code": 5, "message": 7}},
            )

        error, _ = simulate(handler)

        assert isinstance(error, SimulationTransportError)
        assert error.code == 5
        assert error.message == "7"
        assert classify_error(error) == SimulationError(code=5, message="7")

    def test_http_error(self):
        error, _ = simulate(lambda request: httpx.Response(500, text="boom"))

        assert isinstance(error, SimulationTransportError)
        assert error.code == 500
        assert error.message == "boom"

    def test_timeout(self):
        def handler(request):
            raise httpx.ReadTimeout("timed out", request=request)

        error, _ = simulate(handler)

        assert isinstance(error, SimulationTransportError)
        assert error.code is None
        assert error.message == "timed out"

    @pytest.mark.parametrize(
        "response",
        [
            httpx.Response(200, text="not json"),
            httpx.Response(200, json=[1, 2]),
            httpx.Response(200, json={"jsonrpc": "2.0", "id": 1, "result": None}),
            httpx.Response(200, json={"jsonrpc": "2.0", "id": 1, "result": {"foo": 1}}),
        ],
        ids=["not-json", "not-object", "null-result", "missing-transactions"],
    )
    def test_invalid_response(self, response):
        error, _ = simulate(lambda request: response)
        assert isinstance(error, SimulationInvalidResponseError)

    def test_chain_not_supported(self):
        """不支持的链不发出请求"""
        error, seen = simulate(
            rpc_result({"transactions": []}), chain_id=137, supported_chain_ids=[1, 5]
        )

        assert isinstance(error, SimulationChainNotSupportedError)
        assert error.code == "chain-not-supported"
        assert seen == []


class TestClientLifecycle:
    def test_from_settings(self):
        settings = Settings(
            SIMULATION_API_URL=API_URL,
            SIMULATION_API_METHOD="eth_simulateV1",
            SIMULATION_TIMEOUT_SECONDS=5,
            SUPPORTED_CHAIN_IDS=[1],
        )

        async def go():
            async with SimulationApiClient.from_settings(settings) as api:
                return api.get_url(1), api.method, api.timeout, api.is_chain_supported(5)

        assert asyncio.run(go()) == (
            "https://simulation.example/v3/1",
            "eth_simulateV1",
            5.0,
            False,
        )

    def test_external_client_not_closed(self):
        async def go():
            client = httpx.AsyncClient(transport=httpx.MockTransport(rpc_result({})))
            async with SimulationApiClient(API_URL, client=client):
                pass
            closed = client.is_closed
            await client.aclose()
            return closed

        assert asyncio.run(go()) is False

    def test_no_restriction_by_default(self):
        api = SimulationApiClient(API_URL)
        assert api.is_chain_supported(12345)
