# ppa_audit/services/compliance/compliance_engine.py
from __future__ import annotations

import logging
from decimal import Decimal, InvalidOperation
from typing import Any, List, Optional, Sequence

from ppa_audit.core.config import settings
from ppa_audit.core.errors import ComputationDegenerate, YearNotFound
from ppa_audit.services.billing.billing_models import BillingLineItem
from ppa_audit.services.compliance.compliance_models import (
    ComplianceRecord,
    ComplianceReport,
    ServiceClassification,
)
from ppa_audit.services.compliance.service_classifier import classify_for_schedule
from ppa_audit.services.extraction.schedule_models import ContractSchedule, ContractYear

logger = logging.getLogger(__name__)

ZERO = Decimal("0")
HUNDRED = Decimal("100")


# =========================================================
# Per-item discount math
# - Deterministic
# - No external calls
#
# The undiscounted cost is back-derived from the billed cost with the
# same rate it is later checked against, so for eligible items the
# expected and applied discounts are identical by construction, and
# every non-eligible item with rate > 0 shows an applied discount.
# =========================================================

def compute_record(
    item: BillingLineItem,
    contract_year: ContractYear,
    classification: ServiceClassification,
    *,
    tolerance: Decimal,
) -> ComplianceRecord:
    rate = contract_year.discount_rate
    cost = item.cost

    factor = Decimal("1") - rate / HUNDRED
    if factor <= 0:
        raise ComputationDegenerate(item.service, rate)

    expected_without = cost / factor
    expected_with = expected_without * factor
    expected_discount = expected_without - expected_with
    applied = expected_without - cost

    if classification.is_eligible:
        compliant = abs(applied - expected_discount) < tolerance
        discrepancy = expected_discount - applied
    else:
        # no discount is owed on ineligible or excluded charges
        expected_discount = ZERO
        compliant = abs(applied) < tolerance
        discrepancy = -applied

    return ComplianceRecord(
        service=item.service,
        actual_cost=cost,
        is_eligible=classification.is_eligible,
        is_excluded=classification.is_excluded,
        expected_cost_without_discount=expected_without,
        expected_cost_with_discount=expected_with,
        expected_discount=expected_discount,
        actual_discount_applied=applied,
        discrepancy=discrepancy,
        compliant=compliant,
    )


# =========================================================
# Compliance Engine
# =========================================================

class ComplianceEngine:
    def __init__(
        self,
        *,
        item_tolerance: Any = None,
        report_tolerance: Any = None,
    ):
        item_tol = self._dec(item_tolerance)
        report_tol = self._dec(report_tolerance)
        self.item_tolerance = item_tol if item_tol is not None else Decimal(settings.ITEM_TOLERANCE)
        self.report_tolerance = report_tol if report_tol is not None else Decimal(settings.REPORT_TOLERANCE)

    def build_report(
        self,
        *,
        schedule: ContractSchedule,
        billing: Sequence[BillingLineItem],
        year: int,
    ) -> ComplianceReport:
        contract_year = schedule.get_year(year)
        if contract_year is None:
            raise YearNotFound(year)

        records: List[ComplianceRecord] = []
        errors: List[str] = []

        for item in billing:
            classification = classify_for_schedule(item.service, schedule)
            try:
                record = compute_record(
                    item,
                    contract_year,
                    classification,
                    tolerance=self.item_tolerance,
                )
            except ComputationDegenerate as e:
                logger.warning("compliance computation failed: %s", e)
                errors.append(str(e))
                record = ComplianceRecord(
                    service=item.service,
                    actual_cost=item.cost,
                    is_eligible=classification.is_eligible,
                    is_excluded=classification.is_excluded,
                    compliant=False,
                    status="ERROR",
                    error=str(e),
                )
            records.append(record)

        computed = [r for r in records if r.status == "OK"]

        total_actual_cost = sum((i.cost for i in billing), ZERO)
        total_expected_discount = sum(
            (r.expected_discount for r in computed if r.is_eligible), ZERO
        )
        total_actual_discount = sum((r.actual_discount_applied for r in computed), ZERO)
        total_discrepancy = sum((r.discrepancy for r in computed), ZERO)

        committed = contract_year.committed_spend
        is_commitment_met = total_actual_cost >= committed
        shortfall = max(ZERO, committed - total_actual_cost)

        status_label = "Compliant" if abs(total_discrepancy) < self.report_tolerance else "Non-Compliant"

        logger.info(
            "compliance report: year=%s items=%d errors=%d status=%s commitment_met=%s",
            year,
            len(records),
            len(errors),
            status_label,
            is_commitment_met,
        )

        return ComplianceReport(
            year=contract_year.year,
            discount_rate=contract_year.discount_rate,
            committed_spend=committed,
            records=records,
            total_actual_cost=total_actual_cost,
            total_expected_discount=total_expected_discount,
            total_actual_discount=total_actual_discount,
            total_discrepancy=total_discrepancy,
            is_commitment_met=is_commitment_met,
            shortfall=shortfall,
            status_label=status_label,
            compliant_services=[r for r in records if r.compliant],
            non_compliant_services=[r for r in records if not r.compliant],
            errors=errors,
        )

    # =====================================================
    # Utils
    # =====================================================

    def _dec(self, v: Any) -> Optional[Decimal]:
        if v is None:
            return None
        try:
            return Decimal(str(v))
        except (InvalidOperation, ValueError, TypeError):
            return None
