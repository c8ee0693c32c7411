from decimal import Decimal

import pytest

from ppa_audit.core.config import settings
from ppa_audit.services.catalog.loader import load_catalog_from_file
from ppa_audit.services.catalog.registry import CatalogRegistry
from ppa_audit.services.extraction.schedule_models import ContractSchedule, ContractYear


CONTRACT_TEXT = """AWS PRIVATE PRICING AGREEMENT
Contract Number: PPA-2024-STD-001
3. COMMITMENTS AND PRICING
3.1 Committed Spend & Commitment Schedule
Customer's total commitment over the entire Term is $450,000. The committed amounts and corresponding discount rates are as follows:
Contract Year 1: January 1, 2024 - December 31, 2024 - Annual Committed Spend = $100,000 with 15% Discount Rate on Eligible Services
Contract Year 2: January 1, 2025 - December 31, 2025 - Annual Committed Spend = $150,000 with 18% Discount Rate on Eligible Services
Contract Year 3: January 1, 2026 - December 31, 2026 - Annual Committed Spend = $200,000 with 20% Discount Rate on Eligible Services
3.2 Discounted Pricing & Eligible Services
AWS will apply the specified Discount Rate to Customer's charges for Eligible Services during the Term.
Eligible Services include the majority of generally available AWS cloud services across all AWS regions, including but not limited to:
Amazon Elastic Compute Cloud (EC2)
Amazon Simple Storage Service (S3)
Amazon Relational Database Service (RDS)
AWS Lambda
Amazon CloudFront
Amazon DynamoDB
Amazon Elastic Container Service (ECS)
Amazon CloudWatch
Amazon Virtual Private Cloud (VPC)
Amazon Elastic Load Balancing
Amazon Route 53
Amazon Simple Notification Service (SNS)
Amazon Simple Queue Service (SQS)
SCHEDULE 1 - EXCLUDED SERVICES
The following services are excluded from discount eligibility and do not count toward the Annual Committed Spend:
AWS Marketplace purchases (except up to 25% of annual commitment as negotiated)
AWS Support fees (including Enterprise Support)
AWS Professional Services
Third-party software licenses
Reserved Instance purchases made outside this agreement
Savings Plans purchases made outside this agreement
AWS Training and Certification fees
SCHEDULE 2 - ELIGIBLE ACCOUNTS
Linked Accounts: All current and future accounts under the Master Payer Account
KEY TERMS SUMMARY
Discount Rate: 15% (Year 1), 18% (Year 2), 20% (Year 3).
Enterprise Support Required: Customer must maintain AWS Enterprise Support throughout the Term.
"""


@pytest.fixture(scope="session")
def catalog():
    return load_catalog_from_file(settings.CATALOG_PATH)


@pytest.fixture(autouse=True)
def loaded_catalog(catalog):
    CatalogRegistry.load(catalog)
    yield catalog
    CatalogRegistry.reset()


@pytest.fixture
def contract_text():
    return CONTRACT_TEXT


@pytest.fixture
def schedule():
    return ContractSchedule(
        years=[
            ContractYear(year=1, committed_spend=Decimal("100000"), discount_rate=Decimal("15")),
            ContractYear(year=2, committed_spend=Decimal("150000"), discount_rate=Decimal("18")),
        ],
        eligible_services=["Lambda", "Elastic Compute Cloud", "Simple Storage Service"],
        excluded_services=["Support", "Marketplace", "Professional Services"],
    )
