"""
Simulation Error Classifier Tests
"""

import pytest

from balance_preview.simulation.classifier import (
    classify_error,
    get_transaction_error,
    is_insufficient_gas_error,
    is_reverted_error,
    raise_transaction_error,
)
from balance_preview.simulation.errors import (
    SimulationChainNotSupportedError,
    SimulationInvalidResponseError,
    SimulationRevertedError,
    SimulationTransactionError,
    SimulationTransportError,
)
from balance_preview.simulation.models import SimulationResponse

from tests.factories import transaction_result


def response_with_errors(*errors):
    return SimulationResponse.model_validate(
        {"transactions": [transaction_result(error=error) for error in errors]}
    )


class TestPredicates:
    def test_insufficient_gas(self):
        assert is_insufficient_gas_error("err: insufficient funds for gas * price + value")
        assert not is_insufficient_gas_error("insufficient balance")
        assert not is_insufficient_gas_error(None)
        assert not is_insufficient_gas_error(7)

    def test_reverted(self):
        assert is_reverted_error("execution reverted: STF")
        assert not is_reverted_error("out of gas")
        assert not is_reverted_error("")
        assert not is_reverted_error({"message": "execution reverted"})


class TestTransactionError:
    """测试交易执行错误"""

    def test_no_error(self):
        assert get_transaction_error(response_with_errors(None, None)) is None
        raise_transaction_error(response_with_errors(None))

    def test_reverted(self):
        error = get_transaction_error(response_with_errors("execution reverted"))
        assert isinstance(error, SimulationRevertedError)
        assert error.code == "reverted"
        assert error.message == "Transaction was reverted"

    def test_raw_error(self):
        error = get_transaction_error(response_with_errors(None, "out of gas"))
        assert isinstance(error, SimulationTransactionError)
        assert error.code is None
        assert error.message == "out of gas"

    def test_first_error_wins(self):
        error = get_transaction_error(response_with_errors("out of gas", "execution reverted"))
        assert error.message == "out of gas"

    def test_raise(self):
        with pytest.raises(SimulationRevertedError):
            raise_transaction_error(response_with_errors("execution reverted"))


class TestClassifyError:
    """测试异常到报告错误的映射"""

    def test_transport_error_passthrough(self):
        error = classify_error(SimulationTransportError("Internal error", code=-32603))
        assert error.code == -32603
        assert error.message == "Internal error"

    def test_insufficient_gas_is_reverted(self):
        error = classify_error(
            SimulationTransportError("insufficient funds for gas * price + value", code=-32000)
        )
        assert error.code == "reverted"
        assert error.message == "Transaction was reverted"

    def test_invalid_response(self):
        error = classify_error(SimulationInvalidResponseError())
        assert error.code == "invalid-response"
        assert error.message == "Invalid response from simulation API"

    def test_chain_not_supported(self):
        error = classify_error(SimulationChainNotSupportedError(0x89))
        assert error.code == "chain-not-supported"
        assert error.message == "Chain is not supported: 0x89"

    def test_transaction_error_has_no_code(self):
        error = classify_error(SimulationTransactionError("out of gas"))
        assert error.code is None
        assert error.message == "out of gas"
