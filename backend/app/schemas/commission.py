"""
NotaryPro Backend — Commission Schemas
========================================
"""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field


class CommissionResponse(BaseModel):
    id: int
    document_id: int
    vecino_id: str
    certificador_id: str
    vecino_amount: Decimal
    certificador_amount: Decimal
    admin_amount: Decimal
    total_amount: Decimal
    is_paid: bool
    created_at: datetime

    model_config = {"from_attributes": True}


class CommissionStatsResponse(BaseModel):
    """Aggregates for GET /api/analytics/commissions. Amounts are sums of total_amount."""
    total_amount: Decimal = Field(description="Sum over all commissions")
    total_count: int
    paid_amount: Decimal
    paid_count: int
    unpaid_amount: Decimal
    unpaid_count: int
