"""
market_auth.api.schemas

Request bodies. Fields are loosely typed on purpose: rule checking
happens in the service layer so that every violation is reported at once.
"""

from __future__ import annotations

from typing import Any, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class _Body(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class RegisterRequest(_Body):
    role: Optional[str] = None
    name: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None
    phone: Optional[str] = Field(default=None, validation_alias=AliasChoices("phone", "phone_no"))
    address: Optional[str] = None
    shop_name: Optional[str] = Field(default=None, validation_alias=AliasChoices("shopName", "shop_name"))
    vehicle_no: Optional[str] = Field(default=None, validation_alias=AliasChoices("vehicleNo", "vehicle_no"))
    vehicle_type: Optional[str] = Field(default=None, validation_alias=AliasChoices("vehicleType", "vehicle_type"))

    def registration_fields(self) -> dict[str, Any]:
        return self.model_dump(exclude={"role"}, exclude_none=True)


class LoginRequest(_Body):
    email: Optional[str] = None
    password: Optional[str] = None
    role: Optional[str] = None


class RejectRequest(_Body):
    rejection_reason: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("rejectionReason", "rejection_reason", "reason")
    )


class ProductRequest(_Body):
    name: str = Field(min_length=1, max_length=200)
    description: str = ""
    price: float = Field(ge=0)
    discount: float = Field(default=0, ge=0, le=100)
    instock: bool = True
    category: list[str] = Field(default_factory=list)


class ProductUpdate(_Body):
    name: Optional[str] = Field(default=None, min_length=1, max_length=200)
    description: Optional[str] = None
    price: Optional[float] = Field(default=None, ge=0)
    discount: Optional[float] = Field(default=None, ge=0, le=100)
    instock: Optional[bool] = None
    category: Optional[list[str]] = None
