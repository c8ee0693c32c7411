# ppa_audit/services/compliance/compliance_models.py
from __future__ import annotations

from decimal import Decimal
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


class ServiceClassification(BaseModel):
    model_config = ConfigDict(frozen=True)

    is_eligible: bool
    is_excluded: bool

    @property
    def category(self) -> str:
        if self.is_excluded:
            return "EXCLUDED"
        if self.is_eligible:
            return "ELIGIBLE"
        return "UNKNOWN"


class ComplianceRecord(BaseModel):
    """
    Per-service reconciliation for one billing line item.

    status=ERROR means the amounts could not be derived (see error);
    every derived amount is then None and compliant is False.
    """

    model_config = ConfigDict(frozen=True)

    service: str
    actual_cost: Decimal
    is_eligible: bool
    is_excluded: bool

    expected_cost_without_discount: Optional[Decimal] = None
    expected_cost_with_discount: Optional[Decimal] = None
    expected_discount: Optional[Decimal] = None
    actual_discount_applied: Optional[Decimal] = None
    discrepancy: Optional[Decimal] = None
    compliant: bool = False

    status: Literal["OK", "ERROR"] = "OK"
    error: Optional[str] = None


class ComplianceReport(BaseModel):
    model_config = ConfigDict(frozen=True)

    year: int
    discount_rate: Decimal
    committed_spend: Decimal

    records: List[ComplianceRecord] = Field(default_factory=list)

    total_actual_cost: Decimal
    total_expected_discount: Decimal
    total_actual_discount: Decimal
    total_discrepancy: Decimal

    is_commitment_met: bool
    shortfall: Decimal
    status_label: Literal["Compliant", "Non-Compliant"]

    compliant_services: List[ComplianceRecord] = Field(default_factory=list)
    non_compliant_services: List[ComplianceRecord] = Field(default_factory=list)
    errors: List[str] = Field(default_factory=list)
