# shop_service/auth_utils.py
import hashlib
import hmac
import secrets
from datetime import datetime, timedelta, timezone

import jwt

from shop_service.config import settings

PBKDF2_ITERATIONS = 260_000
SALT_BYTES = 16


def hash_password(password: str, salt: str = None) -> str:
    """Хэширует пароль (PBKDF2-SHA256 с солью). Формат: pbkdf2_sha256$iterations$salt$hash."""
    if salt is None:
        salt = secrets.token_hex(SALT_BYTES)
    digest = hashlib.pbkdf2_hmac("sha256", password.encode(), salt.encode(), PBKDF2_ITERATIONS)
    return f"pbkdf2_sha256${PBKDF2_ITERATIONS}${salt}${digest.hex()}"


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Проверяет пароль, сравнивая с хэшем."""
    try:
        algorithm, iterations, salt, expected = hashed_password.split("$")
    except ValueError:
        return False
    if algorithm != "pbkdf2_sha256":
        return False
    digest = hashlib.pbkdf2_hmac("sha256", plain_password.encode(), salt.encode(), int(iterations))
    return hmac.compare_digest(digest.hex(), expected)


def create_access_token(data: dict, expires_delta: timedelta = None) -> str:
    """Создает JWT токен с указанным временем истечения."""
    to_encode = data.copy()
    if expires_delta is None:
        expires_delta = timedelta(minutes=settings.access_token_expire_minutes)
    expire = datetime.now(timezone.utc) + expires_delta
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, settings.secret_key, algorithm=settings.algorithm)


def decode_access_token(token: str) -> dict:
    """Raises jwt.ExpiredSignatureError / jwt.InvalidTokenError on a bad token."""
    return jwt.decode(token, settings.secret_key, algorithms=[settings.algorithm])


def token_for_user(user) -> str:
    return create_access_token({
        "userId": user.id,
        "role": user.role.value if hasattr(user.role, "value") else user.role,
        "isVerified": bool(user.is_verified),
    })
