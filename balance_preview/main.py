"""
Balance Preview - FastAPI Main Entry

交易签名前的余额变动预览服务
"""

import logging
import sys
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
import uvicorn

from .config import Settings, get_settings
from .simulation import (
    BaseSimulator,
    SimulationApiClient,
    SimulationData,
    SimulationError,
    SimulationErrorCode,
    SimulationRequest,
    get_simulation_data,
)


# =============================================================================
# Logging Configuration
# =============================================================================

def setup_logging(level: str = "INFO"):
    """配置日志"""
    logging.basicConfig(
        level=getattr(logging, level.upper()),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stdout,
    )


# =============================================================================
# Lifespan Management
# =============================================================================

@asynccontextmanager
async def lifespan(app: FastAPI):
    """应用生命周期管理"""
    settings = get_settings()
    setup_logging(settings.log_level)

    logger = logging.getLogger(__name__)
    logger.info("=" * 60)
    logger.info("Balance Preview 启动中...")
    logger.info(f"环境: {'生产' if settings.is_production else '开发'}")
    logger.info(f"模拟 API: {settings.simulation_api_url}")
    logger.info("=" * 60)

    app.state.simulator = SimulationApiClient.from_settings(settings)

    yield

    # 清理资源
    logger.info("Balance Preview 关闭中...")
    await app.state.simulator.aclose()


# =============================================================================
# FastAPI Application
# =============================================================================

app = FastAPI(
    title="Balance Preview",
    description="交易签名前的余额变动预览",
    version="0.1.0",
    lifespan=lifespan,
)

# CORS 配置
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def get_simulator(request: Request) -> BaseSimulator:
    """获取模拟器（测试中可通过 dependency_overrides 替换）"""
    return request.app.state.simulator


# =============================================================================
# Health Check
# =============================================================================


@app.get("/health")
async def health_check():
    """健康检查端点"""
    return {
        "status": "healthy",
        "service": "balance-preview",
        "version": "0.1.0",
    }


@app.get("/")
async def root():
    """根路径"""
    return {
        "name": "Balance Preview",
        "description": "Transaction balance change preview",
        "version": "0.1.0",
        "endpoints": {
            "health": "/health",
            "simulate": "/api/v1/simulate",
        },
    }


# =============================================================================
# Simulation Endpoints
# =============================================================================


@app.post(
    "/api/v1/simulate",
    response_model=SimulationData,
    response_model_exclude_none=True,
)
async def simulate_transaction(
    request: SimulationRequest,
    simulator: BaseSimulator = Depends(get_simulator),
    settings: Settings = Depends(get_settings),
):
    """
    模拟交易并返回余额变动

    ## 请求示例
    ```json
    {
      "chainId": "0x1",
      "from": "0x...",
      "transactions": [{"to": "0x...", "data": "0x...", "value": "0x0"}]
    }
    ```
    """
    if not settings.simulation_enabled:
        return SimulationData(
            error=SimulationError(
                code=SimulationErrorCode.DISABLED.value,
                message="Simulation is disabled",
            )
        )

    return await get_simulation_data(request, simulator)


# =============================================================================
# Main
# =============================================================================

def main():
    """主入口"""
    settings = get_settings()

    uvicorn.run(
        "balance_preview.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.api_reload,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
