import logging
import secrets
from datetime import datetime, timedelta, timezone
from typing import Optional, Tuple

import jwt
from sqlalchemy.orm import Session

from shopcart.adapters.mock_mailer import MockMailerAdapter, mailer as default_mailer
from shopcart.config import settings
from shopcart.models.user import USER_SIGNED_IN, USER_SIGNED_OUT, User
from shopcart.repositories.user_repo import UserRepository
from shopcart.services.exceptions import InvalidCredentials, InvalidRequest, NotFound
from shopcart.utils.security import (
    create_access_token,
    decode_access_token,
    hash_password,
    verify_password,
)

log = logging.getLogger("shopcart.auth")


def generate_otp() -> str:
    """4-digit numeric code in 1000..9999."""
    return str(1000 + secrets.randbelow(9000))


class AuthService:
    def __init__(self, db: Session, mailer: Optional[MockMailerAdapter] = None):
        self.db = db
        self.user_repo = UserRepository(db)
        self.mailer = mailer or default_mailer

    def _now(self) -> datetime:
        return datetime.now(timezone.utc)

    def _issue_otp(self, user: User) -> str:
        otp = generate_otp()
        user.otp = otp
        # stored naive UTC, like every DateTime column read back from the store
        user.otp_expires_at = (
            self._now() + timedelta(seconds=settings.OTP_TTL_SECONDS)
        ).replace(tzinfo=None)
        user.is_otp_verified = False
        return otp

    def _check_otp(self, user: User, otp: str):
        if not user.otp or user.otp != str(otp):
            raise InvalidRequest("Invalid OTP.")
        if user.otp_expires_at and self._now().replace(tzinfo=None) > user.otp_expires_at:
            raise InvalidRequest("OTP expired. Please request a new one.")

    def request_signup_otp(self, email: str) -> str:
        user = self.user_repo.get_or_create(email)
        otp = self._issue_otp(user)
        self.db.commit()
        self.mailer.send_signup_otp(email, otp)
        return otp

    def signup(self, email: str, otp: str, username: str, password: str) -> Tuple[User, str]:
        user = self.user_repo.get_by_email(email)
        if not user:
            raise NotFound("No such user found. Please initiate signup first.")
        self._check_otp(user, otp)

        user.password_hash = hash_password(password)
        user.username = username
        user.clear_otp()
        user.status = USER_SIGNED_IN
        self.db.commit()
        self.db.refresh(user)
        log.info("user %s registered", user.id)
        return user, create_access_token(user.id)

    def signin(self, email: str, password: str) -> Tuple[User, str]:
        user = self.user_repo.get_by_email(email)
        if not user:
            raise NotFound("User not found.")
        if not user.password_hash:
            raise InvalidCredentials("Password is not set for this user.")
        if not verify_password(password, user.password_hash):
            raise InvalidCredentials("Invalid password.")

        user.status = USER_SIGNED_IN
        self.db.commit()
        self.db.refresh(user)
        return user, create_access_token(user.id)

    def logout(self, user_id: int) -> User:
        user = self.user_repo.get(user_id)
        if not user:
            raise NotFound("User not found.")
        user.status = USER_SIGNED_OUT
        self.db.commit()
        return user

    def authenticate(self, token: str) -> User:
        """Resolve a bearer token to a signed-in user."""
        try:
            user_id = decode_access_token(token)
        except jwt.InvalidTokenError:
            raise InvalidCredentials("Invalid or expired token.")
        user = self.user_repo.get(user_id)
        if not user:
            raise NotFound("User not found.")
        if user.status != USER_SIGNED_IN:
            raise InvalidCredentials("User is signed out.")
        return user

    def request_password_otp(self, email: str) -> str:
        user = self.user_repo.get_by_email(email)
        if not user:
            raise NotFound("User not found.")
        otp = self._issue_otp(user)
        self.db.commit()
        self.mailer.send_password_reset_otp(email, otp)
        return otp

    def verify_otp(self, email: str, otp: str) -> User:
        user = self.user_repo.get_by_email(email)
        if not user:
            raise NotFound("User not found.")
        self._check_otp(user, otp)

        user.is_otp_verified = True
        user.clear_otp()
        self.db.commit()
        return user

    def update_password(self, email: str, password: str) -> User:
        user = self.user_repo.get_by_email(email)
        if not user:
            raise NotFound("User not found.")
        if not user.is_otp_verified:
            raise InvalidRequest("OTP verification required before updating password.")

        user.password_hash = hash_password(password)
        user.is_otp_verified = False
        user.clear_otp()
        self.db.commit()
        log.info("password updated for user %s", user.id)
        return user
