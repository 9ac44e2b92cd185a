"""
Token ABI 定义

仅包含余额模拟需要的事件与只读函数。
"""

from typing import Any, Dict, List, Tuple

from web3 import Web3

from .models import SupportedToken


def _event(name: str, inputs: List[Tuple[str, str, bool]]) -> Dict[str, Any]:
    return {
        "anonymous": False,
        "inputs": [
            {"indexed": indexed, "name": arg_name, "type": arg_type}
            for arg_name, arg_type, indexed in inputs
        ],
        "name": name,
        "type": "event",
    }


# ERC-20: Transfer(address indexed from, address indexed to, uint256 value)
ERC20_TRANSFER_EVENT = _event(
    "Transfer",
    [("from", "address", True), ("to", "address", True), ("value", "uint256", False)],
)

# ERC-721: tokenId 为 indexed
ERC721_TRANSFER_EVENT = _event(
    "Transfer",
    [("from", "address", True), ("to", "address", True), ("tokenId", "uint256", True)],
)

ERC1155_TRANSFER_SINGLE_EVENT = _event(
    "TransferSingle",
    [
        ("operator", "address", True),
        ("from", "address", True),
        ("to", "address", True),
        ("id", "uint256", False),
        ("value", "uint256", False),
    ],
)

ERC1155_TRANSFER_BATCH_EVENT = _event(
    "TransferBatch",
    [
        ("operator", "address", True),
        ("from", "address", True),
        ("to", "address", True),
        ("ids", "uint256[]", False),
        ("values", "uint256[]", False),
    ],
)

# WETH 类包装 Token：Deposit(dst, wad) / Withdrawal(src, wad)
ERC20_WRAPPED_DEPOSIT_EVENT = _event(
    "Deposit",
    [("to", "address", True), ("value", "uint256", False)],
)

ERC20_WRAPPED_WITHDRAWAL_EVENT = _event(
    "Withdrawal",
    [("from", "address", True), ("value", "uint256", False)],
)

# 早期 ERC-721（如 CryptoKitties）：参数均不 indexed
ERC721_LEGACY_TRANSFER_EVENT = _event(
    "Transfer",
    [("from", "address", False), ("to", "address", False), ("tokenId", "uint256", False)],
)


# 解码优先级，顺序不可调整
TRANSFER_EVENT_SCHEMAS: List[Tuple[SupportedToken, Dict[str, Any]]] = [
    (SupportedToken.ERC20, ERC20_TRANSFER_EVENT),
    (SupportedToken.ERC721, ERC721_TRANSFER_EVENT),
    (SupportedToken.ERC1155, ERC1155_TRANSFER_SINGLE_EVENT),
    (SupportedToken.ERC1155, ERC1155_TRANSFER_BATCH_EVENT),
    (SupportedToken.ERC20_WRAPPED, ERC20_WRAPPED_DEPOSIT_EVENT),
    (SupportedToken.ERC20_WRAPPED, ERC20_WRAPPED_WITHDRAWAL_EVENT),
    (SupportedToken.ERC721_LEGACY, ERC721_LEGACY_TRANSFER_EVENT),
]


BALANCE_OF_FUNCTION = {
    "constant": True,
    "inputs": [{"name": "_owner", "type": "address"}],
    "name": "balanceOf",
    "outputs": [{"name": "balance", "type": "uint256"}],
    "type": "function",
}

OWNER_OF_FUNCTION = {
    "constant": True,
    "inputs": [{"name": "_tokenId", "type": "uint256"}],
    "name": "ownerOf",
    "outputs": [{"name": "owner", "type": "address"}],
    "type": "function",
}

ERC1155_BALANCE_OF_FUNCTION = {
    "constant": True,
    "inputs": [
        {"name": "_owner", "type": "address"},
        {"name": "_id", "type": "uint256"},
    ],
    "name": "balanceOf",
    "outputs": [{"name": "balance", "type": "uint256"}],
    "type": "function",
}

BALANCE_FUNCTIONS: Dict[SupportedToken, Dict[str, Any]] = {
    SupportedToken.ERC20: BALANCE_OF_FUNCTION,
    SupportedToken.ERC20_WRAPPED: BALANCE_OF_FUNCTION,
    SupportedToken.ERC721: OWNER_OF_FUNCTION,
    SupportedToken.ERC721_LEGACY: OWNER_OF_FUNCTION,
    SupportedToken.ERC1155: ERC1155_BALANCE_OF_FUNCTION,
}


def abi_signature(abi: Dict[str, Any]) -> str:
    """如 Transfer(address,address,uint256)"""
    types = ",".join(arg["type"] for arg in abi["inputs"])
    return f"{abi['name']}({types})"


def event_topic(event_abi: Dict[str, Any]) -> bytes:
    return bytes(Web3.keccak(text=abi_signature(event_abi)))


def function_selector(function_abi: Dict[str, Any]) -> bytes:
    return bytes(Web3.keccak(text=abi_signature(function_abi))[:4])
