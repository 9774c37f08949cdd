"""Shipping address value object, snapshotted onto each order."""

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class ShippingAddress(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    first_name: str = Field(..., min_length=1, max_length=50, alias="firstName")
    last_name: str = Field(..., min_length=1, max_length=50, alias="lastName")
    address: str = Field(..., min_length=1, max_length=255)
    city: str = Field(..., min_length=1, max_length=100)
    state: str = Field(..., min_length=1, max_length=100)
    postal_code: str = Field(..., min_length=1, max_length=20, alias="pincode")
    email: str | None = Field(None, max_length=254)
    phone: str | None = Field(None, max_length=20)

    @field_validator("first_name", "last_name", "address", "city", "state", "postal_code")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must not be blank")
        return value

    @model_validator(mode="after")
    def _reachable(self):
        if not (self.email or self.phone):
            raise ValueError("either email or phone is required")
        return self
