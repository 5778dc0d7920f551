"""
NotaryPro Backend — POS Location Schemas
==========================================
"""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field


class PosLocationCreateRequest(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    address: str = Field(min_length=1)
    commission_rate: Decimal = Field(
        default=Decimal("40.00"), ge=0, le=100, max_digits=5, decimal_places=2
    )


class PosLocationUpdateRequest(BaseModel):
    is_active: bool


class PosLocationResponse(BaseModel):
    id: int
    name: str
    address: str
    owner_id: str
    is_active: bool
    commission_rate: Decimal
    created_at: datetime

    model_config = {"from_attributes": True}
