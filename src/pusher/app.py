"""
Webhook Pusher Application

FastAPI application for the SendKey push-notification service.
"""
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .config import Config
from .errors import register_error_handlers
from .services.engine_service import get_engine_service, init_engine_service
from .routes import (
    health_router,
    push_router,
    webhook_router,
    messages_router,
    user_router,
    channels_router,
)

# Configure logging
logging.basicConfig(
    level=logging.DEBUG if Config.DEBUG else logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger("pusher.app")

# Suppress noisy loggers
logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("asyncpg").setLevel(logging.WARNING)

# Create FastAPI application
app = FastAPI(
    title="Webhook Pusher API",
    description="SendKey-authenticated push notifications fanned out to WeChat, DingTalk and Feishu",
    version="0.1.0"
)

register_error_handlers(app)

app.add_middleware(
    CORSMiddleware,
    allow_origins=Config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["X-RateLimit-Limit", "X-RateLimit-Remaining", "X-RateLimit-Reset"],
)


@app.on_event("startup")
async def startup_event():
    """Initialize services on startup"""
    logger.info("Starting Webhook Pusher...")

    try:
        await init_engine_service()
        logger.info("Webhook Pusher started successfully")
    except Exception as e:
        logger.error(f"Failed to start Webhook Pusher: {e}")
        raise


@app.on_event("shutdown")
async def shutdown_event():
    """Cleanup on shutdown"""
    logger.info("Shutting down Webhook Pusher...")

    try:
        engine = get_engine_service()
        await engine.close()
        logger.info("Webhook Pusher shutdown complete")
    except Exception as e:
        logger.error(f"Error during shutdown: {e}")


# Include routers
app.include_router(health_router, prefix="/api/v1")
app.include_router(push_router, prefix="/api/v1")
app.include_router(messages_router, prefix="/api/v1")
app.include_router(user_router, prefix="/api/v1")
app.include_router(channels_router, prefix="/api/v1")
app.include_router(webhook_router)


@app.get("/")
async def root():
    """Root endpoint"""
    return {
        "service": "Webhook Pusher",
        "version": "0.1.0",
        "status": "running"
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        app,
        host=Config.API_HOST,
        port=Config.API_PORT
    )
