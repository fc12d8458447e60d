from datetime import datetime, timezone

from sqlalchemy import Boolean, Column, DateTime, Integer, String

from shopcart.db import Base

USER_SIGNED_OUT = 0
USER_SIGNED_IN = 1


class User(Base):
    __tablename__ = "users"
    id = Column(Integer, primary_key=True, autoincrement=True)
    email = Column(String(320), unique=True, nullable=False, index=True)
    username = Column(String(128), nullable=True)
    password_hash = Column(String(128), nullable=True)

    # one-time password state, cleared once verified or consumed
    otp = Column(String(8), nullable=True)
    otp_expires_at = Column(DateTime, nullable=True)
    is_otp_verified = Column(Boolean, nullable=False, default=False)

    status = Column(Integer, nullable=False, default=USER_SIGNED_OUT)
    inserted_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))

    def clear_otp(self):
        self.otp = None
        self.otp_expires_at = None

    def __repr__(self):
        return f"<User id={self.id} email={self.email}>"
