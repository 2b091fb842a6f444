"""Account request/response schemas."""

import uuid
from datetime import datetime
from typing import Optional

from pydantic import EmailStr, Field, field_validator
from services.ledger_service.schemas.common import CamelModel


class RegisterRequest(CamelModel):
    username: str = Field(..., min_length=3, max_length=30)
    wallet_address: str = Field(..., min_length=1, max_length=64)
    password: str = Field(..., min_length=6)
    email: Optional[EmailStr] = None
    referral_code: Optional[str] = None

    @field_validator("username", "wallet_address", "referral_code")
    @classmethod
    def strip_whitespace(cls, v: Optional[str]) -> Optional[str]:
        return v.strip() if isinstance(v, str) else v


class SigninRequest(CamelModel):
    wallet_address: str
    password: str


class UserProfile(CamelModel):
    id: uuid.UUID
    username: str
    wallet_address: str
    email: Optional[str] = None
    referral_code: Optional[str] = None
    wallet_balance: float
    last_login: Optional[datetime] = None
    created_at: datetime


class RegisterResponse(CamelModel):
    success: bool = True
    message: str
    user: UserProfile
    # Outcome of the optional referral code supplied at signup
    referral_message: Optional[str] = None


class SigninResponse(CamelModel):
    success: bool = True
    token: str
    user: UserProfile


class MeResponse(CamelModel):
    success: bool = True
    user: UserProfile
