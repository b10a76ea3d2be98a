"""FastAPI application entry point."""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from b2b_manager.api import applications, auto_tagging, pricing_rules, webhooks
from b2b_manager.config import get_settings
from b2b_manager.db.base import init_db
from b2b_manager.state.manager import get_state_manager
from b2b_manager.utils.errors import register_error_handlers
from b2b_manager.utils.logging import get_logger, setup_logging

# Setup logging first
setup_logging()
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager."""
    logger.info("application_starting")

    init_db()
    state_manager = await get_state_manager()
    logger.info("state_manager_initialized")

    yield

    logger.info("application_shutting_down")
    await state_manager.disconnect()


app = FastAPI(
    title="B2B Wholesale Manager",
    description="Wholesale pricing, customer auto-tagging and application review for Shopify",
    version="0.1.0",
    lifespan=lifespan,
)

settings = get_settings()
app.add_middleware(
    CORSMiddleware,
    allow_origins=["https://admin.shopify.com"],
    allow_origin_regex=r"https://[a-zA-Z0-9-]+\.myshopify\.com",
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_error_handlers(app)


@app.get("/health")
async def health_check() -> dict[str, str]:
    """Health check endpoint."""
    return {"status": "healthy", "service": "b2b-wholesale-manager"}


app.include_router(auto_tagging.router, prefix="/api/v1", tags=["auto-tagging"])
app.include_router(pricing_rules.router, prefix="/api/v1", tags=["pricing"])
app.include_router(applications.router, prefix="/api/v1", tags=["applications"])
app.include_router(applications.form_router, prefix="/api/v1", tags=["storefront"])
app.include_router(webhooks.router, tags=["webhooks"])


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "b2b_manager.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.environment == "development",
    )
