"""
Policy and policy-account request schemas.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Literal

from pydantic import BaseModel, Field, model_validator

PolicyStatus = Literal["active", "pending", "expired", "cancelled"]
AccountStatus = Literal["active", "inactive", "pending", "closed"]


class PolicyAccountCreate(BaseModel):
    company_id: int = Field(..., ge=1)
    account_name: str = Field(..., min_length=1, max_length=255)
    status: AccountStatus | None = None
    total_premium: Decimal | None = Field(default=None, ge=0, max_digits=15, decimal_places=2)


class PolicyBase(BaseModel):
    policy_type: str | None = Field(default=None, max_length=100)
    carrier: str | None = Field(default=None, max_length=255)
    status: PolicyStatus | None = None
    effective_date: date | None = None
    expiration_date: date | None = None
    premium_amount: Decimal | None = Field(default=None, ge=0, max_digits=15, decimal_places=2)

    @model_validator(mode="after")
    def _check_term(self) -> "PolicyBase":
        if self.effective_date and self.expiration_date and self.expiration_date < self.effective_date:
            raise ValueError("expiration_date must not be before effective_date")
        return self


class PolicyCreate(PolicyBase):
    account_id: int = Field(..., ge=1)
    policy_number: str = Field(..., min_length=1, max_length=50)


class PolicyUpdate(PolicyBase):
    account_id: int | None = Field(default=None, ge=1)
    policy_number: str | None = Field(default=None, min_length=1, max_length=50)
