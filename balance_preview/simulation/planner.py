"""
Balance Query Planner

筛选与用户相关的转账事件，并构建第二次模拟请求：
[执行前余额查询..., 原始交易..., 执行后余额查询...]

同时生成与请求等长的调用标签，响应按位置与标签一一对应。
"""

import logging
from enum import Enum
from typing import Dict, Iterable, List, Optional, Tuple

from eth_abi import encode
from pydantic import BaseModel, ConfigDict

from .abis import BALANCE_FUNCTIONS, function_selector
from .models import (
    DecodedTransferEvent,
    SimulationApiRequest,
    SimulationRequest,
    SimulationRequestTransaction,
    SimulationTokenStandard,
    SupportedToken,
    TOKEN_STANDARDS,
    normalize_address,
)

logger = logging.getLogger(__name__)


class BalancePhase(str, Enum):
    """第二次模拟中每个调用的阶段"""
    PREVIOUS = "previous"
    TRANSACTION = "transaction"
    NEW = "new"


class BalanceQuery(BaseModel):
    """单个 (合约, Token ID) 的余额查询"""
    model_config = ConfigDict(frozen=True)

    token: SupportedToken
    contract_address: str
    token_id: Optional[int] = None
    skip_previous: bool = False

    @property
    def standard(self) -> SimulationTokenStandard:
        return TOKEN_STANDARDS[self.token]


class PlannedCall(BaseModel):
    """第二次模拟请求中单个调用的标签"""
    model_config = ConfigDict(frozen=True)

    phase: BalancePhase
    query_index: Optional[int] = None


class BalanceQueryPlan(BaseModel):
    """余额查询计划"""
    queries: List[BalanceQuery]
    calls: List[PlannedCall]
    request: SimulationApiRequest


def filter_user_transfers(
    events: Iterable[DecodedTransferEvent], user_address: str
) -> List[DecodedTransferEvent]:
    """
    保留发送方或接收方为用户的事件，并按 (合约, Token ID) 去重

    同一合约上的多笔 ERC-20 转账只查询一次净变动；保留首次出现的顺序。
    """
    unique: Dict[Tuple[str, Optional[int]], DecodedTransferEvent] = {}
    for event in events:
        if not event.involves(user_address):
            continue
        unique.setdefault((event.contract_address, event.token_id), event)

    logger.debug(f"用户相关的 Token: {len(unique)}")
    return list(unique.values())


def build_balance_query(event: DecodedTransferEvent) -> BalanceQuery:
    """铸造事件（from 为零地址）不查询执行前余额"""
    return BalanceQuery(
        token=event.token,
        contract_address=event.contract_address,
        token_id=event.token_id,
        skip_previous=event.is_mint,
    )


def encode_balance_call(query: BalanceQuery, user_address: str) -> str:
    """
    编码余额查询 calldata

    ERC-20 / 包装 ERC-20: balanceOf(user)
    ERC-721 / 早期 ERC-721: ownerOf(tokenId)
    ERC-1155: balanceOf(user, id)
    """
    function_abi = BALANCE_FUNCTIONS[query.token]
    types = [arg["type"] for arg in function_abi["inputs"]]

    if query.standard == SimulationTokenStandard.ERC721:
        args = [query.token_id]
    elif query.standard == SimulationTokenStandard.ERC1155:
        args = [user_address, query.token_id]
    else:
        args = [user_address]

    selector = function_selector(function_abi)
    return "0x" + (selector + encode(types, args)).hex()


def build_balance_transaction(
    query: BalanceQuery, user_address: str
) -> SimulationRequestTransaction:
    return SimulationRequestTransaction(
        from_address=user_address,
        to=query.contract_address,
        data=encode_balance_call(query, user_address),
    )


def to_api_transactions(request: SimulationRequest) -> List[SimulationRequestTransaction]:
    """将原始请求转换为模拟 API 的交易列表"""
    return [
        SimulationRequestTransaction(
            from_address=request.from_address,
            to=transaction.to,
            data=transaction.data,
            value=transaction.value,
        )
        for transaction in request.transactions
    ]


def plan_balance_queries(
    request: SimulationRequest, events: Iterable[DecodedTransferEvent]
) -> BalanceQueryPlan:
    """构建余额查询计划（events 应已经过 filter_user_transfers）"""
    user_address = normalize_address(request.from_address)
    queries = [build_balance_query(event) for event in events]
    balance_transactions = [
        build_balance_transaction(query, user_address) for query in queries
    ]

    transactions: List[SimulationRequestTransaction] = []
    calls: List[PlannedCall] = []

    for index, query in enumerate(queries):
        if query.skip_previous:
            continue
        transactions.append(balance_transactions[index])
        calls.append(PlannedCall(phase=BalancePhase.PREVIOUS, query_index=index))

    for transaction in to_api_transactions(request):
        transactions.append(transaction)
        calls.append(PlannedCall(phase=BalancePhase.TRANSACTION))

    for index, transaction in enumerate(balance_transactions):
        transactions.append(transaction)
        calls.append(PlannedCall(phase=BalancePhase.NEW, query_index=index))

    logger.debug(
        f"余额查询计划: {len(queries)} 个 Token, "
        f"{len(calls)} 个调用"
    )

    return BalanceQueryPlan(
        queries=queries,
        calls=calls,
        request=SimulationApiRequest(
            transactions=transactions,
            overrides=request.overrides,
        ),
    )
