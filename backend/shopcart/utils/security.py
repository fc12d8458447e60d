from datetime import datetime, timedelta, timezone
from typing import Optional

import bcrypt
import jwt

from shopcart.config import settings

ALGORITHM = "HS256"


def hash_password(password: str) -> str:
    salt = bcrypt.gensalt(rounds=settings.BCRYPT_ROUNDS)
    return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")


def verify_password(password: str, password_hash: Optional[str]) -> bool:
    if not password_hash:
        return False
    return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))


def create_access_token(user_id: int, ttl_seconds: Optional[int] = None) -> str:
    if ttl_seconds is None:
        ttl_seconds = settings.TOKEN_TTL_SECONDS
    now = datetime.now(timezone.utc)
    payload = {
        "sub": str(user_id),
        "iat": now,
        "exp": now + timedelta(seconds=ttl_seconds),
    }
    return jwt.encode(payload, settings.SECRET_KEY, algorithm=ALGORITHM)


def decode_access_token(token: str) -> int:
    """
    Return the user id carried by `token`.
    Raises jwt.InvalidTokenError (or a subclass such as ExpiredSignatureError).
    """
    payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[ALGORITHM])
    return int(payload["sub"])
