"""
FastAPI应用主入口（支付回调接入）
"""
from contextlib import asynccontextmanager

from fastapi import FastAPI

from api.dependencies import get_gateway
from api.routes import payments as payments_routes
from core.config import settings
from core.logging_config import get_logger, configure_logging


# 初始化日志：在入口处显式配置，避免模块导入时的副作用
configure_logging()
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """应用生命周期管理"""
    logger.info("application_startup", project=settings.PROJECT_NAME)
    yield
    # 关闭网关持有的 HTTP 连接池
    if get_gateway.cache_info().currsize:
        await get_gateway().aclose()
    logger.info("application_shutdown", message="Application shutdown")


app = FastAPI(
    title=settings.PROJECT_NAME,
    version=settings.VERSION,
    debug=settings.DEBUG,
    lifespan=lifespan,
    description="微信支付统一下单、退款与回调解析",
)

app.include_router(payments_routes.router, prefix="/api/v1")


@app.get("/", tags=["Root"])
async def root():
    return {"name": settings.PROJECT_NAME, "version": settings.VERSION}
