"""
Company request schemas: the field rules for company, business profile and
risk factor payloads.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Any, Literal

from pydantic import BaseModel, Field

CompanySize = Literal["startup", "small", "medium", "large", "enterprise"]
CompanyStatus = Literal["active", "inactive", "pending", "suspended"]
SeverityLevel = Literal["low", "medium", "high", "critical"]


class CompanyBase(BaseModel):
    legal_name: str | None = Field(default=None, max_length=255)
    tax_id: str | None = Field(default=None, max_length=50)
    primary_industry: str | None = Field(default=None, max_length=100)
    naics_code: str | None = Field(default=None, max_length=10)
    established_date: date | None = None
    company_size: CompanySize | None = None
    status: CompanyStatus | None = None


class CompanyCreate(CompanyBase):
    company_name: str = Field(..., min_length=1, max_length=255)


class CompanyUpdate(CompanyBase):
    company_name: str | None = Field(default=None, min_length=1, max_length=255)


class BusinessProfileUpdate(BaseModel):
    employee_count: int | None = Field(default=None, ge=0)
    annual_revenue: Decimal | None = Field(default=None, ge=0, max_digits=15, decimal_places=2)
    business_description: str | None = None
    locations: dict[str, Any] | None = None
    assets: dict[str, Any] | None = None
    operations: dict[str, Any] | None = None


class RiskFactorCreate(BaseModel):
    risk_category: str = Field(..., min_length=1, max_length=100)
    risk_description: str | None = None
    severity_level: SeverityLevel | None = None
    impact_score: Decimal | None = Field(default=None, max_digits=5, decimal_places=2)
