"""
Webhook Pusher Configuration

Configuration class for the webhook pusher service.
"""
import os
from pathlib import Path
from urllib.parse import quote_plus
from dotenv import load_dotenv

# Load .env file from project root
_env_path = Path(__file__).parent.parent.parent / ".env"
load_dotenv(_env_path)


class Config:
    """Configuration class for Webhook Pusher API"""

    # Base paths
    BASE_DIR = Path(__file__).parent.parent.parent

    # API settings
    API_HOST = os.getenv("API_HOST", "127.0.0.1")
    API_PORT = int(os.getenv("API_PORT", "8200"))
    DEBUG = os.getenv("DEBUG", "false").lower() == "true"
    CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]

    # Key-value backend: 'memory' or 'postgres'
    KV_BACKEND = os.getenv("KV_BACKEND", "memory").lower()

    # Database settings (KV_BACKEND=postgres)
    DB_HOST = os.getenv("DB_HOST", "localhost")
    DB_PORT = os.getenv("DB_PORT", "5432")
    DB_NAME = os.getenv("DB_NAME", "pusher")
    DB_USER = os.getenv("DB_USER", "postgres")
    DB_PASSWORD = os.getenv("DB_PASSWORD", "")
    POSTGRES_DSN = os.getenv("POSTGRES_DSN", "")

    # Rate limiting (per account)
    RATE_LIMIT = int(os.getenv("RATE_LIMIT", "60"))
    RATE_LIMIT_WINDOW_SECONDS = int(os.getenv("RATE_LIMIT_WINDOW_SECONDS", "60"))

    # History pagination
    HISTORY_DEFAULT_LIMIT = int(os.getenv("HISTORY_DEFAULT_LIMIT", "20"))
    HISTORY_MAX_LIMIT = int(os.getenv("HISTORY_MAX_LIMIT", "100"))

    # Outbound HTTP to channel providers
    HTTP_TIMEOUT_SECONDS = float(os.getenv("HTTP_TIMEOUT_SECONDS", "10"))
    WECHAT_API_BASE = os.getenv("WECHAT_API_BASE", "https://api.weixin.qq.com/cgi-bin")
    WORK_WECHAT_API_BASE = os.getenv("WORK_WECHAT_API_BASE", "https://qyapi.weixin.qq.com/cgi-bin")

    # Account provisioning (POST /user/register). Empty disables registration.
    ADMIN_TOKEN = os.getenv("ADMIN_TOKEN", "")

    @staticmethod
    def get_postgres_dsn() -> str:
        """Get PostgreSQL DSN with password handling"""
        if Config.POSTGRES_DSN:
            return Config.POSTGRES_DSN
        if Config.DB_PASSWORD:
            password = quote_plus(Config.DB_PASSWORD)
            return f"postgresql://{Config.DB_USER}:{password}@{Config.DB_HOST}:{Config.DB_PORT}/{Config.DB_NAME}"
        return f"postgresql://{Config.DB_USER}@{Config.DB_HOST}:{Config.DB_PORT}/{Config.DB_NAME}"
