"""
HTTP API Tests
"""

import pytest
from fastapi.testclient import TestClient

from balance_preview.config import Settings, get_settings
from balance_preview.main import app, get_simulator
from balance_preview.simulation.models import SimulationResponse

from tests.factories import (
    CONTRACT_ADDRESS,
    OTHER_ADDRESS,
    TARGET_ADDRESS,
    USER_ADDRESS,
    FakeSimulator,
    balance_response,
    erc20_transfer_log,
    event_response,
    transaction_result,
    word,
)


REQUEST_BODY = {
    "chainId": "0x1",
    "from": USER_ADDRESS,
    "transactions": [{"to": TARGET_ADDRESS, "data": "0x", "value": "0x0"}],
}


def make_client(simulator=None, **settings) -> TestClient:
    app.dependency_overrides[get_simulator] = lambda: simulator or FakeSimulator()
    app.dependency_overrides[get_settings] = lambda: Settings(**settings)
    return TestClient(app)


@pytest.fixture(autouse=True)
def clear_overrides():
    yield
    app.dependency_overrides.clear()


class TestHealth:
    def test_health(self):
        response = make_client().get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    def test_root(self):
        response = make_client().get("/")
        assert response.json()["endpoints"]["simulate"] == "/api/v1/simulate"


class TestSimulateEndpoint:
    """测试模拟端点"""

    def test_token_balance_change(self):
        simulator = FakeSimulator(
            event_response([erc20_transfer_log(OTHER_ADDRESS, USER_ADDRESS, 4)]),
            balance_response([word(1)], [word(5)]),
        )

        response = make_client(simulator).post("/api/v1/simulate", json=REQUEST_BODY)

        assert response.status_code == 200
        assert response.json() == {
            "tokenBalanceChanges": [
                {
                    "standard": "erc20",
                    "address": CONTRACT_ADDRESS,
                    "previousBalance": "0x1",
                    "newBalance": "0x5",
                    "difference": "0x4",
                    "isDecrease": False,
                }
            ]
        }
        assert simulator.calls[0][0] == 1

    def test_simulation_error(self):
        simulator = FakeSimulator(
            SimulationResponse.model_validate(
                {"transactions": [transaction_result(error="execution reverted")]}
            )
        )

        response = make_client(simulator).post("/api/v1/simulate", json=REQUEST_BODY)

        assert response.status_code == 200
        assert response.json() == {
            "tokenBalanceChanges": [],
            "error": {"code": "reverted", "message": "Transaction was reverted"},
        }

    def test_disabled(self):
        simulator = FakeSimulator()

        response = make_client(simulator, SIMULATION_ENABLED=False).post(
            "/api/v1/simulate", json=REQUEST_BODY
        )

        assert response.status_code == 200
        assert response.json()["error"] == {
            "code": "disabled",
            "message": "Simulation is disabled",
        }
        assert simulator.calls == []

    def test_invalid_address(self):
        body = dict(REQUEST_BODY, **{"from": "0x1234"})
        response = make_client().post("/api/v1/simulate", json=body)
        assert response.status_code == 422

    def test_empty_transactions(self):
        body = dict(REQUEST_BODY, transactions=[])
        response = make_client().post("/api/v1/simulate", json=body)
        assert response.status_code == 422
