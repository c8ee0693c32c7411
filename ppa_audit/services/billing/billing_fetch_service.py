# ppa_audit/services/billing/billing_fetch_service.py
from __future__ import annotations

import logging
from datetime import date, timedelta
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, List, Optional, Tuple

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from ppa_audit.core.config import settings
from ppa_audit.core.errors import BillingFetchError
from ppa_audit.services.billing.billing_models import BillingLineItem

logger = logging.getLogger(__name__)


NO_DATA_MESSAGE = (
    "No billing data found for the selected period. This might happen if:\n"
    "• Your AWS account has no usage during this period\n"
    "• Cost Explorer needs more historical data\n"
    "• The account is new with insufficient billing history"
)

NO_COST_MESSAGE = (
    "No billing data with costs found for the selected period. This might happen if:\n"
    "• Your AWS account has no billable usage during this period\n"
    "• All services used were within free tier limits\n"
    "• The account is new with insufficient billing history\n\n"
    "Tip: Try using mock data for demonstration purposes."
)

# (marker in error code/message, user-facing message)
ERROR_HINTS: List[Tuple[Tuple[str, ...], str]] = [
    (
        ("DataUnavailableException",),
        "Cost Explorer data is not available for this date range. Please try:\n"
        "• Using a date range from at least 2-3 days ago\n"
        "• Enabling Cost Explorer in your AWS account\n"
        "• Waiting 24-48 hours after enabling Cost Explorer",
    ),
    (
        ("AccessDenied",),
        "Access denied. Please ensure your AWS credentials have Cost Explorer "
        "permissions (ce:GetCostAndUsage).",
    ),
    (
        ("InvalidCredentials", "UnrecognizedClientException"),
        "Invalid AWS credentials. The security token or credentials are incorrect. Please check:\n"
        "• Your Access Key ID and Secret Access Key\n"
        "• That the credentials are active and not expired\n"
        "• The correct AWS region is selected",
    ),
    (
        ("SignatureDoesNotMatch",),
        "AWS signature mismatch. Please verify your Secret Access Key is correct.",
    ),
]


def previous_month_range(today: Optional[date] = None) -> Tuple[date, date]:
    """First and last day of the calendar month before `today`."""
    today = today or date.today()
    end = today.replace(day=1) - timedelta(days=1)
    start = end.replace(day=1)
    return start, end


def explain_client_error(err: Exception) -> str:
    code = ""
    if isinstance(err, ClientError):
        code = str(err.response.get("Error", {}).get("Code") or "")
    text = f"{code} {err}"
    for markers, message in ERROR_HINTS:
        if any(m in text for m in markers):
            return message
    return str(err)


class BillingFetchService:
    """
    Per-service billed amounts from AWS Cost Explorer.

    Credentials are resolved by boto3's default chain; this service never
    handles secrets.
    """

    def __init__(self, client: Any = None):
        self.client = client or boto3.client("ce", region_name=settings.AWS_REGION)

    def fetch(self, *, start_date: date, end_date: date) -> List[BillingLineItem]:
        # Cost Explorer treats End as exclusive
        if end_date <= start_date:
            raise ValueError("end_date must be after start_date")

        try:
            result = self.client.get_cost_and_usage(
                TimePeriod={"Start": start_date.isoformat(), "End": end_date.isoformat()},
                Granularity="MONTHLY",
                Metrics=["UnblendedCost"],
                GroupBy=[{"Type": "DIMENSION", "Key": "SERVICE"}],
            )
        except (ClientError, BotoCoreError) as e:
            logger.error("cost explorer request failed: %s", e)
            raise BillingFetchError(explain_client_error(e)) from e

        periods = result.get("ResultsByTime") or []
        groups = periods[0].get("Groups") if periods else None
        if not groups:
            raise BillingFetchError(NO_DATA_MESSAGE)

        items = [self._to_item(g) for g in groups]
        billed = [i for i in items if i.cost > 0]

        logger.info(
            "fetched billing %s..%s: services=%d billed=%d",
            start_date,
            end_date,
            len(items),
            len(billed),
        )

        if not billed:
            raise BillingFetchError(NO_COST_MESSAGE)
        return billed

    def _to_item(self, group: Dict[str, Any]) -> BillingLineItem:
        keys = group.get("Keys") or []
        service = keys[0] if keys else "Unknown"
        amount = ((group.get("Metrics") or {}).get("UnblendedCost") or {}).get("Amount") or "0"
        try:
            cost = Decimal(str(amount))
        except InvalidOperation:
            cost = Decimal("0")
        # credits and refunds show up as negative amounts
        if cost < 0:
            cost = Decimal("0")
        return BillingLineItem(service=service or "Unknown", cost=cost)
