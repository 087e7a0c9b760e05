"""
Webhook Pusher API Routes

FastAPI route handlers.
"""
from .health import router as health_router
from .push import router as push_router
from .push import webhook_router
from .messages import router as messages_router
from .user import router as user_router
from .channels import router as channels_router

__all__ = [
    'health_router',
    'push_router',
    'webhook_router',
    'messages_router',
    'user_router',
    'channels_router',
]
