"""
Transfer Event Decoder

按固定优先级尝试用各 Token 标准的事件 ABI 解码原始日志：
ERC-20 Transfer → ERC-721 Transfer → ERC-1155 TransferSingle / TransferBatch
→ 包装 ERC-20 Deposit / Withdrawal → 早期 ERC-721 Transfer。
第一个成功的 ABI 即为结果，全部失败的日志直接忽略。
"""

import logging
from typing import Any, Dict, Iterable, List, Optional

from eth_abi import decode
from eth_abi.exceptions import DecodingError
from eth_utils import to_bytes

from .abis import TRANSFER_EVENT_SCHEMAS, event_topic
from .models import (
    DecodedTransferEvent,
    SimulationResponseLog,
    SupportedToken,
    normalize_address,
)

logger = logging.getLogger(__name__)


def _to_word(value: str) -> bytes:
    """将 topic 转为 32 字节"""
    return to_bytes(hexstr=value).rjust(32, b"\x00")


def decode_event_args(
    event_abi: Dict[str, Any], log: SimulationResponseLog
) -> Optional[Dict[str, Any]]:
    """
    用单个事件 ABI 解码日志

    要求 topic0 与事件签名一致、topic 数量与 indexed 参数数量一致，
    且 indexed 参数与 data 均能被 eth_abi 解码；否则返回 None。
    """
    if not log.topics:
        return None

    inputs = event_abi["inputs"]
    indexed = [arg for arg in inputs if arg["indexed"]]
    non_indexed = [arg for arg in inputs if not arg["indexed"]]

    try:
        if _to_word(log.topics[0]) != event_topic(event_abi):
            return None
        if len(log.topics) != len(indexed) + 1:
            return None

        args: Dict[str, Any] = {}
        for arg, topic in zip(indexed, log.topics[1:]):
            (args[arg["name"]],) = decode([arg["type"]], _to_word(topic))

        values = decode(
            [arg["type"] for arg in non_indexed],
            to_bytes(hexstr=log.data or "0x"),
        )
        args.update(zip((arg["name"] for arg in non_indexed), values))
    except (DecodingError, ValueError, TypeError) as e:
        logger.debug(f"{event_abi['name']} 解码失败 ({log.address}): {e}")
        return None

    return args


def _optional_address(value: Optional[str]) -> Optional[str]:
    return normalize_address(value) if value is not None else None


def build_transfer_events(
    token: SupportedToken,
    event_name: str,
    contract_address: str,
    args: Dict[str, Any],
) -> Optional[List[DecodedTransferEvent]]:
    """将解码参数转为转账事件，TransferBatch 按 (id, value) 展开"""
    common = {
        "token": token,
        "event_name": event_name,
        "contract_address": normalize_address(contract_address),
        "from_address": _optional_address(args.get("from")),
        "to_address": _optional_address(args.get("to")),
    }

    if event_name == "TransferBatch":
        ids, values = args["ids"], args["values"]
        if len(ids) != len(values):
            return None
        return [
            DecodedTransferEvent(token_id=token_id, amount=amount, **common)
            for token_id, amount in zip(ids, values)
        ]

    token_id = args.get("tokenId", args.get("id"))
    return [DecodedTransferEvent(token_id=token_id, amount=args.get("value"), **common)]


def decode_transfer_log(log: SimulationResponseLog) -> List[DecodedTransferEvent]:
    """按优先级解码单条日志，无法识别时返回空列表"""
    for token, event_abi in TRANSFER_EVENT_SCHEMAS:
        args = decode_event_args(event_abi, log)
        if args is None:
            continue

        events = build_transfer_events(token, event_abi["name"], log.address, args)
        if events is not None:
            return events

    return []


def decode_transfer_events(
    logs: Iterable[SimulationResponseLog],
) -> List[DecodedTransferEvent]:
    """解码所有日志，单条日志失败不影响其他日志"""
    events: List[DecodedTransferEvent] = []
    for log in logs:
        events.extend(decode_transfer_log(log))

    logger.debug(f"解码得到 {len(events)} 个转账事件")
    return events
