"""
NotaryPro Backend — Analytics Schemas
=======================================
"""

from typing import Dict

from pydantic import BaseModel, Field


class DocumentStatsResponse(BaseModel):
    total: int
    certified: int
    pending: int = Field(description="Documents in pending_certification")
    by_status: Dict[str, int] = Field(description="Count per lifecycle status (all statuses present)")
