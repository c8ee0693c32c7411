# ppa_audit/services/billing/billing_models.py
from __future__ import annotations

from decimal import Decimal
from typing import List

from pydantic import BaseModel, ConfigDict, Field


class BillingLineItem(BaseModel):
    model_config = ConfigDict(frozen=True)

    service: str = Field(..., examples=["AWS Lambda"])
    cost: Decimal = Field(..., ge=0, examples=["850.00"])


class MockBillingSet(BaseModel):
    key: str
    name: str
    description: str
    items: List[BillingLineItem] = Field(default_factory=list)
