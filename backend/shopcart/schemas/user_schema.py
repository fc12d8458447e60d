from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict


class UserOut(BaseModel):
    """Public view of a user; credentials and OTP state are never exposed."""

    model_config = ConfigDict(from_attributes=True)
    id: int
    email: str
    username: Optional[str] = None
    status: int
    is_otp_verified: bool
    inserted_at: Optional[datetime] = None


class UserBrief(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: int
    username: Optional[str] = None
    email: str
