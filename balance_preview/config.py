"""
Balance Preview Configuration Management

从环境变量和配置文件中读取配置，支持 .env 文件。
"""

from typing import List, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Balance Preview 配置"""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="",
        extra="ignore",
        populate_by_name=True,
    )

    # API Server
    api_host: str = Field(default="0.0.0.0", alias="API_HOST")
    api_port: int = Field(default=8000, alias="API_PORT")
    api_reload: bool = Field(default=True, alias="API_RELOAD")

    # Simulation API
    simulation_enabled: bool = Field(default=True, alias="SIMULATION_ENABLED")
    simulation_api_url: str = Field(
        default="http://127.0.0.1:8546",
        alias="SIMULATION_API_URL",
    )
    simulation_api_method: str = Field(
        default="infura_simulateTransactions",
        alias="SIMULATION_API_METHOD",
    )
    simulation_timeout_seconds: float = Field(
        default=30.0,
        alias="SIMULATION_TIMEOUT_SECONDS",
    )
    supported_chain_ids: List[int] = Field(
        default_factory=list,
        alias="SUPPORTED_CHAIN_IDS",
    )

    # Logging
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    @property
    def is_production(self) -> bool:
        """是否为生产环境"""
        return not self.api_reload


# 全局配置实例
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """获取全局配置实例"""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings
