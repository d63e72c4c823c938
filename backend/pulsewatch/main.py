"""Main FastAPI application - heartbeat ingress plus the monitoring engine."""
import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI

from .config import Settings
from .context import AppContext, build_context
from .routers import push_router

logger = logging.getLogger(__name__)


def configure_logging(level: str = "INFO"):
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


def create_app(settings: Optional[Settings] = None, context: Optional[AppContext] = None) -> FastAPI:
    """Create and configure the FastAPI application.

    A prebuilt ``context`` is used as-is; otherwise one is wired from
    ``settings`` when the application starts.
    """
    settings = settings or (context.settings if context else Settings())

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan - startup and shutdown."""
        ctx = app.state.context
        if ctx is None:
            ctx = build_context(settings)
            app.state.context = ctx

        logger.info("Starting PulseWatch")
        await ctx.database.init()
        logger.info("Database initialized")

        ctx.scheduler.start()

        yield

        # Drain in-flight checks before the database goes away
        await ctx.scheduler.stop()
        await ctx.database.close()
        logger.info("Shutdown complete")

    app = FastAPI(
        title="PulseWatch",
        description="Uptime monitoring engine - HTTP, TCP, ping, DNS, WebSocket, game server, container and push checks",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.context = context

    app.include_router(push_router)

    @app.get("/health")
    async def health_check():
        ctx = app.state.context
        scheduler = ctx.scheduler if ctx else None
        return {
            "status": "healthy",
            "scheduler_running": bool(scheduler and scheduler.running),
            "checks_in_flight": scheduler.in_flight if scheduler else 0,
        }

    return app


def run():
    """Console entry point."""
    import uvicorn

    settings = Settings()
    configure_logging(settings.log_level)
    uvicorn.run(create_app(settings), host="0.0.0.0", port=settings.web_port)


if __name__ == "__main__":
    run()
