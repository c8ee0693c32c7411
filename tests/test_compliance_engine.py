"""
Tests for the compliance engine.

Covers:
- Per-item discount math for eligible and excluded services
- Commitment and shortfall
- Missing contract year
- Degenerate discount rates
- Report aggregation
"""

from decimal import Decimal

import pytest

from ppa_audit.core.errors import ComputationDegenerate, YearNotFound
from ppa_audit.services.billing.billing_models import BillingLineItem
from ppa_audit.services.billing.mock_billing import get_mock_billing
from ppa_audit.services.compliance.compliance_engine import ComplianceEngine, compute_record
from ppa_audit.services.compliance.compliance_models import ServiceClassification
from ppa_audit.services.extraction.schedule_models import ContractSchedule, ContractYear

CENT = Decimal("0.01")
ELIGIBLE = ServiceClassification(is_eligible=True, is_excluded=False)
EXCLUDED = ServiceClassification(is_eligible=False, is_excluded=True)


def _item(service, cost):
    return BillingLineItem(service=service, cost=Decimal(str(cost)))


def _year(rate, committed="100000", year=1):
    return ContractYear(year=year, committed_spend=Decimal(committed), discount_rate=Decimal(str(rate)))


class TestComputeRecord:

    def test_eligible_lambda(self):
        record = compute_record(_item("AWS Lambda", 850), _year(15), ELIGIBLE, tolerance=CENT)

        assert record.expected_cost_without_discount == Decimal("1000")
        assert record.expected_cost_with_discount == Decimal("850")
        assert record.expected_discount == Decimal("150")
        assert record.actual_discount_applied == Decimal("150")
        assert record.discrepancy == 0
        assert record.compliant
        assert record.status == "OK"

    def test_excluded_support_is_flagged(self):
        record = compute_record(_item("AWS Support (Enterprise)", 1200), _year(15), EXCLUDED, tolerance=CENT)

        assert record.is_excluded
        assert record.expected_discount == 0
        assert record.actual_discount_applied.quantize(CENT) == Decimal("211.76")
        assert record.discrepancy.quantize(CENT) == Decimal("-211.76")
        assert not record.compliant

    @pytest.mark.parametrize("rate", ["0", "1", "12.5", "15", "33.3", "99", "99.99"])
    @pytest.mark.parametrize("cost", ["0", "0.01", "850", "123456.78"])
    def test_discounted_cost_round_trips(self, rate, cost):
        record = compute_record(_item("Amazon DynamoDB", cost), _year(rate), ELIGIBLE, tolerance=CENT)

        assert abs(record.expected_cost_with_discount - Decimal(cost)) < Decimal("1e-12")
        assert abs(record.discrepancy) < Decimal("1e-12")
        assert record.compliant

    def test_zero_rate_excluded_is_compliant(self):
        record = compute_record(_item("AWS Support", 500), _year(0), EXCLUDED, tolerance=CENT)

        assert record.actual_discount_applied == 0
        assert record.compliant

    @pytest.mark.parametrize("rate", ["100", "120"])
    def test_rate_at_or_above_hundred_raises(self, rate):
        with pytest.raises(ComputationDegenerate):
            compute_record(_item("AWS Lambda", 10), _year(rate), ELIGIBLE, tolerance=CENT)


class TestComplianceEngine:

    def setup_method(self):
        self.engine = ComplianceEngine(item_tolerance="0.01", report_tolerance="1.0")

    def test_scenarios_one_and_two(self, schedule):
        report = self.engine.build_report(
            schedule=schedule,
            billing=[_item("AWS Lambda", 850), _item("AWS Support (Enterprise)", 1200)],
            year=1,
        )

        lam, sup = report.records
        assert lam.compliant and lam.discrepancy == 0
        assert sup.is_excluded and not sup.compliant
        assert [r.service for r in report.compliant_services] == ["AWS Lambda"]
        assert [r.service for r in report.non_compliant_services] == ["AWS Support (Enterprise)"]

        assert report.total_actual_cost == Decimal("2050")
        assert report.total_expected_discount == Decimal("150")
        assert report.total_actual_discount.quantize(CENT) == Decimal("361.76")
        assert report.total_discrepancy.quantize(CENT) == Decimal("-211.76")
        assert report.status_label == "Non-Compliant"

    def test_commitment_shortfall(self, schedule):
        report = self.engine.build_report(
            schedule=schedule,
            billing=[_item("AWS Lambda", 60000), _item("Amazon Simple Storage Service", 35000)],
            year=1,
        )

        assert report.total_actual_cost == Decimal("95000")
        assert not report.is_commitment_met
        assert report.shortfall == Decimal("5000")
        assert report.status_label == "Compliant"

    def test_commitment_met(self, schedule):
        report = self.engine.build_report(
            schedule=schedule,
            billing=[_item("AWS Lambda", 150000)],
            year=2,
        )

        assert report.is_commitment_met
        assert report.shortfall == 0
        assert report.discount_rate == Decimal("18")

    def test_missing_year(self, schedule):
        with pytest.raises(YearNotFound, match="No contract data found for year 7"):
            self.engine.build_report(schedule=schedule, billing=[_item("AWS Lambda", 1)], year=7)

    def test_unknown_service_counts_as_ineligible(self, schedule):
        report = self.engine.build_report(
            schedule=schedule,
            billing=[_item("Amazon Bedrock", 85)],
            year=1,
        )

        rec = report.records[0]
        assert not rec.is_eligible and not rec.is_excluded
        assert rec.expected_discount == 0
        assert not rec.compliant
        assert report.total_expected_discount == 0

    def test_degenerate_rate_reported_per_item(self):
        schedule = ContractSchedule(
            years=[_year("100")],
            eligible_services=["Lambda"],
        )
        report = self.engine.build_report(
            schedule=schedule,
            billing=[_item("AWS Lambda", 10), _item("Amazon DynamoDB", 5)],
            year=1,
        )

        assert [r.status for r in report.records] == ["ERROR", "ERROR"]
        assert all(r.expected_cost_without_discount is None for r in report.records)
        assert len(report.errors) == 2
        assert report.total_actual_cost == Decimal("15")
        assert report.total_discrepancy == 0
        assert report.non_compliant_services == report.records

    def test_duplicate_year_uses_first_entry(self):
        schedule = ContractSchedule(
            years=[_year("10", committed="1000"), _year("20", committed="2000")],
            eligible_services=["Lambda"],
        )
        report = self.engine.build_report(schedule=schedule, billing=[_item("AWS Lambda", 90)], year=1)

        assert report.discount_rate == Decimal("10")
        assert report.committed_spend == Decimal("1000")

    def test_standard_mock_set(self, schedule):
        report = self.engine.build_report(
            schedule=schedule,
            billing=get_mock_billing("standard"),
            year=1,
        )

        excluded = [r for r in report.records if r.is_excluded]
        assert {r.service for r in excluded} == {
            "AWS Support (Enterprise)",
            "AWS Marketplace - Third Party Software",
            "AWS Professional Services",
        }
        assert all(not r.compliant for r in excluded)
        assert all(r.compliant for r in report.records if r.is_eligible)
        assert report.status_label == "Non-Compliant"
        assert not report.is_commitment_met

    def test_report_is_rebuilt_per_year(self, schedule):
        billing = [_item("AWS Support", 100)]
        y1 = self.engine.build_report(schedule=schedule, billing=billing, year=1)
        y2 = self.engine.build_report(schedule=schedule, billing=billing, year=2)

        assert y1.records[0].actual_discount_applied != y2.records[0].actual_discount_applied
