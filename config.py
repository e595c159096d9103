import logging
import os

from dotenv import load_dotenv
from pydantic import BaseModel

load_dotenv()

logger = logging.getLogger(__name__)

DEV_SECRET = "dev-only-secret-change-me"


class Settings(BaseModel):
    jwt_secret: str = DEV_SECRET
    jwt_algorithm: str = "HS256"
    token_expire_hours: int = 24
    bcrypt_rounds: int = 10
    check_stock_at_checkout: bool = False
    host: str = "0.0.0.0"
    port: int = 3000
    log_level: str = "INFO"


def _env_flag(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def get_settings() -> Settings:
    secret = os.getenv("JWT_SECRET")
    if not secret:
        logger.warning("JWT_SECRET is not set, falling back to the development secret")
        secret = DEV_SECRET

    return Settings(
        jwt_secret=secret,
        jwt_algorithm=os.getenv("JWT_ALGORITHM", "HS256"),
        token_expire_hours=int(os.getenv("TOKEN_EXPIRE_HOURS", "24")),
        bcrypt_rounds=int(os.getenv("BCRYPT_ROUNDS", "10")),
        check_stock_at_checkout=_env_flag("CHECK_STOCK_AT_CHECKOUT"),
        host=os.getenv("HOST", "0.0.0.0"),
        port=int(os.getenv("PORT", "3000")),
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
    )
