"""Main application entry point for the PARP chat gateway."""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from datetime import datetime
from typing import Any, Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from parp_gateway import __version__
from parp_gateway.core.config import Settings, get_settings
from parp_gateway.core.errors import GatewayError
from parp_gateway.interfaces.http.chat import router as chat_router
from parp_gateway.interfaces.http.security import SessionAuthenticator
from parp_gateway.interfaces.http.user_store import UserStore
from parp_gateway.streaming.gateway import StreamGateway
from parp_gateway.upstream.provider_factory import UpstreamProviderFactory

logger = logging.getLogger(__name__)


def configure_logging(settings: Settings) -> None:
    """Configure root logging once for the process."""
    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager with startup logging."""
    settings: Settings = app.state.settings

    logger.info("🚀 ===== PARP CHAT GATEWAY STARTUP =====")
    logger.info(f"⚙️  Environment: {settings.environment}")
    logger.info(f"📊 Log level: {settings.log_level}")
    logger.info(f"🔀 Default provider: {settings.llm_provider}")
    logger.info(f"   • Local: {settings.ollama_base_url} ({settings.ollama_model})")
    logger.info(
        f"   • Hosted: {settings.openai_model} "
        f"({'configured' if settings.hosted_configured else 'no API key'})"
    )
    if not settings.supabase_configured:
        logger.warning("⚠️  Supabase is not configured; every chat request will fail with 500")
    logger.info("=" * 50)

    yield

    logger.info("🛑 Shutting down PARP chat gateway")


def create_app(
    settings: Optional[Settings] = None,
    user_store: Optional[UserStore] = None,
) -> FastAPI:
    """Build the FastAPI application.

    Args:
        settings: Application settings; defaults to the process-wide instance
        user_store: Identity service client; defaults to Supabase

    Returns:
        Configured application with collaborators on ``app.state``
    """
    settings = settings or get_settings()

    app = FastAPI(
        title="PARP Chat Gateway",
        description="Authenticated streaming chat over local and hosted LLM backends",
        version=__version__,
        debug=settings.debug,
        lifespan=lifespan,
    )

    app.state.settings = settings
    app.state.authenticator = SessionAuthenticator(settings, user_store=user_store)
    app.state.gateway = StreamGateway(UpstreamProviderFactory.create_all(settings))

    if settings.is_development():
        app.add_middleware(
            CORSMiddleware,
            allow_origins=["*"],
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    @app.exception_handler(GatewayError)
    async def gateway_error_handler(request: Request, exc: GatewayError) -> JSONResponse:
        return JSONResponse(status_code=exc.status_code, content={"error": exc.message})

    @app.get("/")
    async def root() -> dict[str, str]:
        """Root endpoint for health checks."""
        return {
            "message": "PARP Chat Gateway",
            "status": "operational",
            "version": __version__,
            "environment": settings.environment,
        }

    @app.get("/health")
    async def health_check() -> dict[str, Any]:
        """Health check endpoint reporting which collaborators are configured."""
        return {
            "status": "healthy",
            "timestamp": datetime.utcnow().isoformat(),
            "environment": settings.environment,
            "version": __version__,
            "auth": "configured" if settings.supabase_configured else "missing",
            "providers": {
                "default": settings.llm_provider,
                "local": settings.ollama_base_url,
                "hosted": "configured" if settings.hosted_configured else "missing",
            },
        }

    @app.get("/config")
    async def config_info() -> dict[str, Any]:
        """Configuration info endpoint (development only)."""
        if not settings.is_development():
            return {"message": "Configuration info not available in production"}

        return {
            "llm_provider": settings.llm_provider,
            "ollama_base_url": settings.ollama_base_url,
            "ollama_model": settings.ollama_model,
            "openai_model": settings.openai_model,
            "max_history_turns": settings.max_history_turns,
            "upstream_timeout_seconds": settings.upstream_timeout_seconds,
            "log_level": settings.log_level,
        }

    app.include_router(chat_router)
    return app


configure_logging(get_settings())
app = create_app()


def run() -> None:
    """Console entry point: serve the app with uvicorn."""
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "parp_gateway.main:app",
        host=settings.fastapi_host,
        port=settings.fastapi_port,
        reload=settings.fastapi_reload and settings.is_development(),
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    run()
