"""
Simulation Data Models

定义模拟请求、模拟 API 响应以及余额变动报告的数据结构。
"""

from enum import Enum
from typing import Any, Dict, List, Optional, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationInfo,
    field_validator,
    model_validator,
)
from pydantic.alias_generators import to_camel


ZERO_ADDRESS = "0x" + "0" * 40


def normalize_address(address: str) -> str:
    """统一地址格式（小写）"""
    return address.lower()


def validate_address(value: str) -> str:
    """验证以太坊地址格式并转为小写"""
    if not value.startswith("0x") or len(value) != 42:
        raise ValueError(f"无效的以太坊地址: {value}")
    try:
        int(value, 16)
    except ValueError:
        raise ValueError(f"无效的以太坊地址: {value}")
    return normalize_address(value)


class SupportedToken(str, Enum):
    """可识别的 Token 事件 ABI（按解码优先级排列）"""
    ERC20 = "erc20"
    ERC721 = "erc721"
    ERC1155 = "erc1155"
    ERC20_WRAPPED = "erc20Wrapped"
    ERC721_LEGACY = "erc721Legacy"


class SimulationTokenStandard(str, Enum):
    """报告中使用的 Token 标准"""
    ERC20 = "erc20"
    ERC721 = "erc721"
    ERC1155 = "erc1155"


TOKEN_STANDARDS: Dict[SupportedToken, SimulationTokenStandard] = {
    SupportedToken.ERC20: SimulationTokenStandard.ERC20,
    SupportedToken.ERC721: SimulationTokenStandard.ERC721,
    SupportedToken.ERC1155: SimulationTokenStandard.ERC1155,
    SupportedToken.ERC20_WRAPPED: SimulationTokenStandard.ERC20,
    SupportedToken.ERC721_LEGACY: SimulationTokenStandard.ERC721,
}


class SimulationErrorCode(str, Enum):
    """模拟错误码"""
    CHAIN_NOT_SUPPORTED = "chain-not-supported"
    DISABLED = "disabled"
    INVALID_RESPONSE = "invalid-response"
    REVERTED = "reverted"


class WireModel(BaseModel):
    """模拟 API 报文的基类（camelCase 别名，兼容字段名）"""
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


# =============================================================================
# 请求
# =============================================================================


class TransactionCall(WireModel):
    """待模拟的单笔交易调用"""
    model_config = ConfigDict(populate_by_name=True, extra="ignore", frozen=True)

    to: str = Field(..., description="目标地址")
    data: str = Field(default="0x", description="交易 calldata")
    value: str = Field(default="0x0", description="交易 value（wei，十六进制或十进制）")

    @field_validator("to")
    @classmethod
    def validate_to(cls, v: str) -> str:
        return validate_address(v)

    @field_validator("value")
    @classmethod
    def validate_value(cls, v: str) -> str:
        """验证 value 并统一为十六进制"""
        try:
            amount = int(v, 16) if v.startswith("0x") else int(v)
        except ValueError:
            raise ValueError(f"无效的 value: {v}")
        if amount < 0:
            raise ValueError(f"value 不能为负数: {v}")
        return hex(amount)


class SimulationRequest(WireModel):
    """余额变动模拟请求"""
    model_config = ConfigDict(populate_by_name=True, extra="ignore", frozen=True)

    chain_id: int = Field(default=1, alias="chainId", description="链 ID")
    from_address: str = Field(..., alias="from", description="交易发起者地址")
    transactions: List[TransactionCall] = Field(
        ...,
        min_length=1,
        description="按顺序执行的交易",
    )
    overrides: Optional[Dict[str, Any]] = Field(
        None,
        description="账户状态覆盖（透传给模拟 API）",
    )

    @field_validator("chain_id", mode="before")
    @classmethod
    def validate_chain_id(cls, v: Any) -> Any:
        """支持 0x 开头的十六进制链 ID"""
        if isinstance(v, str) and v.startswith("0x"):
            return int(v, 16)
        return v

    @field_validator("from_address")
    @classmethod
    def validate_from(cls, v: str) -> str:
        return validate_address(v)


class SimulationRequestTransaction(WireModel):
    """模拟 API 请求中的单笔交易"""
    from_address: str = Field(..., alias="from")
    to: str
    data: Optional[str] = None
    value: Optional[str] = None


class SimulationApiRequest(WireModel):
    """模拟 API 请求体"""
    transactions: List[SimulationRequestTransaction]
    overrides: Optional[Dict[str, Any]] = None
    with_call_trace: Optional[bool] = Field(None, alias="withCallTrace")
    with_logs: Optional[bool] = Field(None, alias="withLogs")


# =============================================================================
# 响应
# =============================================================================


class SimulationResponseLog(WireModel):
    """交易触发的原始事件日志"""
    address: str = Field(default="", description="合约地址")
    topics: List[str] = Field(default_factory=list, description="事件主题")
    data: str = Field(default="0x", description="事件数据")

    @field_validator("address", "topics", "data", mode="before")
    @classmethod
    def default_fields(cls, v: Any, info: ValidationInfo) -> Any:
        """null 字段按缺省值处理，单条日志异常留给解码阶段丢弃"""
        if v is not None:
            return v
        return {"address": "", "topics": [], "data": "0x"}[info.field_name]


class CallTraceNode(WireModel):
    """调用树节点"""
    calls: List["CallTraceNode"] = Field(default_factory=list, description="子调用")
    logs: List[SimulationResponseLog] = Field(
        default_factory=list,
        description="本次调用直接触发的事件",
    )

    @field_validator("calls", "logs", mode="before")
    @classmethod
    def default_list(cls, v: Any) -> Any:
        return [] if v is None else v


class AccountState(WireModel):
    """账户状态快照"""
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    balance: Optional[str] = None
    nonce: Optional[str] = None


class StateDiff(WireModel):
    """执行前后的账户状态"""
    pre: Dict[str, AccountState] = Field(default_factory=dict)
    post: Dict[str, AccountState] = Field(default_factory=dict)


class SimulationResponseTransaction(WireModel):
    """模拟 API 返回的单笔交易结果"""
    return_value: str = Field(default="0x", alias="return", description="返回数据")
    error: Optional[str] = Field(None, description="执行错误（如有）")
    call_trace: Optional[CallTraceNode] = Field(None, alias="callTrace")
    state_diff: Optional[StateDiff] = Field(None, alias="stateDiff")

    @field_validator("return_value", mode="before")
    @classmethod
    def default_return(cls, v: Any) -> Any:
        return "0x" if v is None else v


class SimulationResponse(WireModel):
    """模拟 API 响应"""
    transactions: List[SimulationResponseTransaction]


# =============================================================================
# 解码结果
# =============================================================================


class DecodedTransferEvent(BaseModel):
    """解码后的 Token 转账事件"""
    model_config = ConfigDict(frozen=True)

    token: SupportedToken
    event_name: str
    contract_address: str
    from_address: Optional[str] = None
    to_address: Optional[str] = None
    token_id: Optional[int] = None
    amount: Optional[int] = None

    @property
    def standard(self) -> SimulationTokenStandard:
        return TOKEN_STANDARDS[self.token]

    @property
    def is_mint(self) -> bool:
        return self.from_address == ZERO_ADDRESS

    def involves(self, address: str) -> bool:
        """发送方或接收方是否为指定地址"""
        address = normalize_address(address)
        return address in (self.from_address, self.to_address)


# =============================================================================
# 余额变动报告
# =============================================================================


class ReportModel(BaseModel):
    """对外输出的报告模型（camelCase 别名）"""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )


class BalanceChange(ReportModel):
    """余额变动（十六进制无符号整数）"""
    previous_balance: str = Field(..., description="执行前余额")
    new_balance: str = Field(..., description="执行后余额")
    difference: str = Field(..., description="变动绝对值")
    is_decrease: bool = Field(..., description="余额是否减少")


class TokenBalanceChange(BalanceChange):
    """Token 余额变动"""
    standard: SimulationTokenStandard
    address: str = Field(..., description="Token 合约地址")
    token_id: Optional[str] = Field(None, alias="id", description="Token ID（NFT）")


class SimulationError(ReportModel):
    """模拟错误"""
    code: Optional[Union[int, str]] = None
    message: Optional[str] = None


class SimulationData(ReportModel):
    """模拟结果：余额变动或错误，二者互斥"""
    native_balance_change: Optional[BalanceChange] = None
    token_balance_changes: List[TokenBalanceChange] = Field(default_factory=list)
    error: Optional[SimulationError] = None

    @model_validator(mode="after")
    def check_exclusive(self) -> "SimulationData":
        if self.error is not None and (
            self.native_balance_change is not None or self.token_balance_changes
        ):
            raise ValueError("错误结果不能包含余额变动")
        return self

    @property
    def is_error(self) -> bool:
        return self.error is not None
