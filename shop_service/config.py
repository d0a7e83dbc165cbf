# shop_service/config.py
import os
from dotenv import load_dotenv

load_dotenv()


def _as_bool(value: str) -> bool:
    return value.strip().lower() in ("1", "true", "yes", "on")


def _database_url() -> str:
    url = os.getenv("DATABASE_URL")
    if url:
        return url
    return (
        f"postgresql+asyncpg://{os.getenv('SHOP_DB_USER', 'postgres')}:{os.getenv('SHOP_DB_PASSWORD', 'postgres')}"
        f"@{os.getenv('SHOP_DB_HOST', 'localhost')}:{os.getenv('SHOP_DB_PORT', '5432')}/{os.getenv('SHOP_DB_NAME', 'shop')}"
    )


class Settings:
    """Runtime settings read from the environment (and an optional .env file)."""

    def __init__(self):
        self.database_url = _database_url()
        self.db_echo = _as_bool(os.getenv("DB_ECHO", "false"))
        self.port = int(os.getenv("PORT", "8000"))
        self.api_prefix = os.getenv("API_URL", "/api/v1").rstrip("/")

        self.secret_key = os.getenv("SECRET_KEY")
        if not self.secret_key:
            raise RuntimeError("SECRET_KEY must be set in the environment")
        self.algorithm = "HS256"
        self.access_token_expire_minutes = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", str(24 * 60)))

        self.auth_enforced = _as_bool(os.getenv("AUTH_ENFORCED", "true"))
        self.order_status_policy = os.getenv("ORDER_STATUS_POLICY", "strict").lower()
        if self.order_status_policy not in ("strict", "lax"):
            raise RuntimeError("ORDER_STATUS_POLICY must be 'strict' or 'lax'")

        self.allowed_origins = [o.strip() for o in os.getenv("ALLOWED_ORIGINS", "*").split(",") if o.strip()]
        self.log_level = os.getenv("LOG_LEVEL", "INFO").upper()


settings = Settings()
