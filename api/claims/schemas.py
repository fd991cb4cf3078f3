"""
Claim request schemas.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Literal

from pydantic import BaseModel, Field

ClaimStatus = Literal["open", "under_review", "approved", "denied", "closed"]


class ClaimBase(BaseModel):
    status: ClaimStatus | None = None
    reported_date: date | None = None
    claim_amount: Decimal | None = Field(default=None, ge=0, max_digits=15, decimal_places=2)
    description: str | None = None
    assigned_adjuster: int | None = Field(default=None, ge=1)


class ClaimCreate(ClaimBase):
    policy_id: int = Field(..., ge=1)
    claim_number: str = Field(..., min_length=1, max_length=50)
    incident_date: date


class ClaimUpdate(ClaimBase):
    incident_date: date | None = None
