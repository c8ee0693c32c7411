from typing import List

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, Field

from ppa_audit.core.errors import YearNotFound
from ppa_audit.services.billing.billing_models import BillingLineItem
from ppa_audit.services.compliance.compliance_engine import ComplianceEngine
from ppa_audit.services.compliance.compliance_models import ComplianceReport
from ppa_audit.services.extraction.schedule_models import ContractSchedule

router = APIRouter()


class ComplianceReportIn(BaseModel):
    schedule: ContractSchedule
    billing: List[BillingLineItem] = Field(default_factory=list)
    year: int


@router.post("/report", response_model=ComplianceReport)
def build_compliance_report(body: ComplianceReportIn):
    engine = ComplianceEngine()
    try:
        return engine.build_report(
            schedule=body.schedule,
            billing=body.billing,
            year=body.year,
        )
    except YearNotFound as e:
        raise HTTPException(status_code=404, detail=str(e))
