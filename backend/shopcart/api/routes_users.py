from typing import Optional

from fastapi import APIRouter, Depends, Header
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from shopcart.adapters.mock_mailer import MockMailerAdapter, get_mailer
from shopcart.api.responses import failure, success
from shopcart.db import get_db
from shopcart.schemas.user_schema import UserOut
from shopcart.services.auth_service import AuthService
from shopcart.services.exceptions import InvalidCredentials

router = APIRouter(prefix="/api/users", tags=["users"])


class EmailIn(BaseModel):
    email: str = Field(..., min_length=3)


class SignupIn(BaseModel):
    email: str = Field(..., min_length=3)
    otp: str
    username: str = Field(..., min_length=1)
    password: str = Field(..., min_length=6)


class SigninIn(BaseModel):
    email: str
    password: str


class LogoutIn(BaseModel):
    user_id: int


class VerifyOtpIn(BaseModel):
    email: str
    otp: str


class PasswordIn(BaseModel):
    email: str
    password: str = Field(..., min_length=6)


def _service(db: Session, mailer: MockMailerAdapter) -> AuthService:
    return AuthService(db, mailer=mailer)


@router.post("/otp", summary="Send a signup OTP")
def request_signup_otp(
    payload: EmailIn,
    db: Session = Depends(get_db),
    mailer: MockMailerAdapter = Depends(get_mailer),
):
    try:
        _service(db, mailer).request_signup_otp(payload.email)
    except Exception as e:
        raise failure(e, "An error occurred while generating the OTP.")
    return success(
        "OTP sent to your email. Please verify to complete registration.",
        {"email": payload.email},
    )


@router.post("/signup", summary="Complete signup with the OTP")
def signup(
    payload: SignupIn,
    db: Session = Depends(get_db),
    mailer: MockMailerAdapter = Depends(get_mailer),
):
    try:
        user, token = _service(db, mailer).signup(
            payload.email, payload.otp, payload.username, payload.password
        )
    except Exception as e:
        raise failure(e, "An error occurred during OTP verification.")
    return success(
        "User registered successfully",
        {"user": UserOut.model_validate(user).model_dump(mode="json"), "token": token},
    )


@router.post("/signin", summary="Sign in")
def signin(
    payload: SigninIn,
    db: Session = Depends(get_db),
    mailer: MockMailerAdapter = Depends(get_mailer),
):
    try:
        user, token = _service(db, mailer).signin(payload.email, payload.password)
    except Exception as e:
        raise failure(e, "An error occurred while logging in.")
    return success(
        "User logged in successfully",
        {"user": UserOut.model_validate(user).model_dump(mode="json"), "token": token},
    )


@router.post("/logout", summary="Sign out")
def logout(
    payload: LogoutIn,
    db: Session = Depends(get_db),
    mailer: MockMailerAdapter = Depends(get_mailer),
):
    try:
        _service(db, mailer).logout(payload.user_id)
    except Exception as e:
        raise failure(e, "An error occurred while logging out.")
    return success("User logged out successfully.", {"user_id": payload.user_id})


@router.post("/password/otp", summary="Send a password reset OTP")
def request_password_otp(
    payload: EmailIn,
    db: Session = Depends(get_db),
    mailer: MockMailerAdapter = Depends(get_mailer),
):
    try:
        _service(db, mailer).request_password_otp(payload.email)
    except Exception as e:
        raise failure(e, "An error occurred while generating the OTP.")
    return success(
        "OTP sent to your email. Please verify to complete password reset.",
        {"email": payload.email},
    )


@router.post("/password/verify", summary="Verify a password reset OTP")
def verify_otp(
    payload: VerifyOtpIn,
    db: Session = Depends(get_db),
    mailer: MockMailerAdapter = Depends(get_mailer),
):
    try:
        _service(db, mailer).verify_otp(payload.email, payload.otp)
    except Exception as e:
        raise failure(e, "An error occurred while verifying the OTP.")
    return success("OTP verified successfully.", {"email": payload.email})


@router.put("/password", summary="Set a new password after OTP verification")
def update_password(
    payload: PasswordIn,
    db: Session = Depends(get_db),
    mailer: MockMailerAdapter = Depends(get_mailer),
):
    try:
        _service(db, mailer).update_password(payload.email, payload.password)
    except Exception as e:
        raise failure(e, "An error occurred while updating the password.")
    return success("Password updated successfully.", {"email": payload.email})


@router.get("/me", summary="Current user from the bearer token")
def me(
    authorization: Optional[str] = Header(None),
    db: Session = Depends(get_db),
    mailer: MockMailerAdapter = Depends(get_mailer),
):
    scheme, _, token = (authorization or "").partition(" ")
    try:
        if scheme.lower() != "bearer" or not token:
            raise InvalidCredentials("Missing bearer token.")
        user = _service(db, mailer).authenticate(token)
    except Exception as e:
        raise failure(e, "An error occurred while authenticating.")
    return success("User found successfully.", {"user": UserOut.model_validate(user).model_dump(mode="json")})
