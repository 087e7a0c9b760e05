"""
Webhook Pusher Runner

Entry point for running the push service.
"""
import logging

import uvicorn

from .config import Config

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger("pusher")


def run():
    """Run the push service"""
    logger.info(f"Starting Webhook Pusher on {Config.API_HOST}:{Config.API_PORT} (kv={Config.KV_BACKEND})")

    uvicorn.run(
        "src.pusher.app:app",
        host=Config.API_HOST,
        port=Config.API_PORT,
        reload=Config.DEBUG
    )


if __name__ == "__main__":
    run()
