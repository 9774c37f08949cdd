"""Pydantic request/response schemas for the Identity API."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field

# --- Request Schemas ---


class RegisterRequest(BaseModel):
    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "user_type": "farmer",
                    "first_name": "Ravi",
                    "last_name": "Kumar",
                    "email": "ravi@greenfields.in",
                    "phone": "9876543210",
                    "password": "harvest123",
                    "city": "Nashik",
                    "state": "Maharashtra",
                    "pincode": "422001",
                    "farm_name": "Green Fields",
                    "farm_size": 4.5,
                    "crops": ["Tomatoes", "Onions"],
                    "terms": True,
                }
            ]
        }
    }

    user_type: str = Field(..., pattern="^(farmer|consumer|producer)$")
    first_name: str = Field(..., max_length=50)
    last_name: str = Field(..., max_length=50)
    email: str = Field(..., max_length=254)
    phone: str = Field(..., max_length=20)
    password: str
    city: str = Field(..., max_length=100)
    state: str = Field(..., max_length=100)
    pincode: str = Field(..., max_length=20)
    farm_name: str | None = Field(None, max_length=100)
    farm_size: float | None = None
    crops: list[str] | None = None
    newsletter: bool = False
    terms: bool = False


class LoginRequest(BaseModel):
    email: str
    password: str
    user_type: str | None = Field(None, pattern="^(farmer|consumer|producer)$")


class UpdateProfileRequest(BaseModel):
    first_name: str | None = Field(None, max_length=50)
    last_name: str | None = Field(None, max_length=50)
    phone: str | None = Field(None, max_length=20)
    city: str | None = Field(None, max_length=100)
    state: str | None = Field(None, max_length=100)
    pincode: str | None = Field(None, max_length=20)
    newsletter: bool | None = None
    farm_name: str | None = Field(None, max_length=100)
    farm_size: float | None = None
    crops: list[str] | None = None


class ChangePasswordRequest(BaseModel):
    current_password: str
    new_password: str


# --- Response Schemas ---


class AccountResponse(BaseModel):
    id: str
    user_type: str
    first_name: str
    last_name: str
    email: str
    phone: str
    city: str
    state: str
    pincode: str
    newsletter: bool
    is_active: bool
    farm_name: str | None = None
    farm_size: float | None = None
    crops: list[str] | None = None
    last_login: datetime | None = None
    created_at: datetime

    @classmethod
    def from_account(cls, account) -> AccountResponse:
        return cls(
            id=account.id,
            user_type=public_role(account.role),
            first_name=account.first_name,
            last_name=account.last_name,
            email=account.email,
            phone=account.phone,
            city=account.city,
            state=account.state,
            pincode=account.postal_code,
            newsletter=account.newsletter,
            is_active=account.is_active,
            farm_name=getattr(account, "farm_name", None),
            farm_size=getattr(account, "farm_size", None),
            crops=getattr(account, "crops", None),
            last_login=account.last_login_at,
            created_at=account.created_at,
        )


class ProducerProfileResponse(BaseModel):
    """Public view of a farmer; no contact email or login details."""

    id: str
    first_name: str
    last_name: str
    farm_name: str | None
    farm_size: float | None
    crops: list[str] | None
    city: str
    state: str

    @classmethod
    def from_account(cls, account) -> ProducerProfileResponse:
        return cls(
            id=account.id,
            first_name=account.first_name,
            last_name=account.last_name,
            farm_name=account.farm_name,
            farm_size=account.farm_size,
            crops=account.crops,
            city=account.city,
            state=account.state,
        )


class AuthResponse(BaseModel):
    message: str
    token: str
    user: AccountResponse


class StatusResponse(BaseModel):
    status: str = "ok"
    message: str | None = None


# The HTTP surface keeps the marketplace's own vocabulary for roles.
_PUBLIC_ROLES = {"producer": "farmer", "consumer": "consumer"}


def public_role(role: str) -> str:
    return _PUBLIC_ROLES.get(role, role)


def internal_role(user_type: str) -> str:
    return "producer" if user_type in ("farmer", "producer") else "consumer"
