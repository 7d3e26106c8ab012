"""
Handpicked Collections API

主应用入口
"""

import os
from contextlib import asynccontextmanager

from fastapi import FastAPI

from handpicked import PLUGIN_AUTHOR, PLUGIN_DESCRIPTION, PLUGIN_NAME, __version__
from handpicked.container import AppConfig, AppContext
from handpicked.core import get_logger, setup_exception_handlers, setup_logging, setup_middlewares
from handpicked.models import PluginInfo
from handpicked.routes import router

logger = get_logger(__name__)


# =============================================================================
# 应用创建
# =============================================================================


def create_app(config: AppConfig | None = None) -> FastAPI:
    """
    创建 FastAPI 应用

    Args:
        config: 应用配置，None 时在启动阶段从环境变量读取
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """
        应用生命周期管理

        启动时：加载配置并装配服务
        关闭时：释放服务（配置已在每次变更时落盘）
        """
        app_config = config or AppConfig.from_env()
        if app_config.configure_logging:
            log_file_path = setup_logging(file=app_config.log_to_file)
            if log_file_path:
                logger.info(f"Log file: {log_file_path}")

        ctx = AppContext.create(app_config)
        logger.info(f"{PLUGIN_NAME} plugin loaded successfully (v{__version__})")
        logger.info(
            f"{PLUGIN_NAME} plugin configuration loaded - "
            f"store={ctx.store.store_type}, data_dir={ctx.config.data_dir}"
        )

        yield

        ctx.shutdown()
        logger.info(f"{PLUGIN_NAME} plugin unloaded")

    app = FastAPI(
        title="Handpicked Collections API",
        description=PLUGIN_DESCRIPTION,
        version=__version__,
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
    )

    setup_middlewares(app)
    setup_exception_handlers(app)

    app.include_router(router, prefix="/api/v1")

    @app.get("/", response_model=PluginInfo, tags=["Root"])
    def root():
        """插件信息"""
        return PluginInfo(
            name=PLUGIN_NAME,
            description=PLUGIN_DESCRIPTION,
            version=__version__,
            author=PLUGIN_AUTHOR,
        )

    return app


# =============================================================================
# 导出 ASGI 应用
# =============================================================================

app = create_app()


# =============================================================================
# 启动入口
# =============================================================================

if __name__ == "__main__":
    import uvicorn

    debug = os.getenv("DEBUG", "false").lower() == "true"
    host = os.getenv("HOST", "0.0.0.0")
    port = int(os.getenv("PORT", "8000"))

    # reload 模式必须用字符串形式的应用路径
    reload_enabled = os.getenv("RELOAD", str(debug)).lower() == "true"

    logger.info(f"Starting server - host: {host}, port: {port}, debug: {debug}, reload: {reload_enabled}")

    uvicorn.run(
        "handpicked.main:app",
        host=host,
        port=port,
        reload=reload_enabled,
        reload_dirs=["handpicked"] if reload_enabled else None,
        log_level="debug" if debug else "info",
    )
