from datetime import date
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, File, HTTPException, Query, UploadFile
from pydantic import BaseModel, Field

from ppa_audit.core.errors import (
    BillingFetchError,
    ConfigError,
    DocumentReadError,
    ExtractionFailure,
    SessionIncomplete,
    SessionNotFound,
    YearNotFound,
)
from ppa_audit.repositories.session_repo import AuditSession
from ppa_audit.routers.deps import get_session_service
from ppa_audit.services.billing.billing_fetch_service import previous_month_range
from ppa_audit.services.billing.billing_models import BillingLineItem
from ppa_audit.services.compliance.compliance_models import ComplianceReport
from ppa_audit.services.parsing.page_reader import read_pdf_text
from ppa_audit.services.session.audit_session_service import (
    AuditSessionService,
    schedule_summary,
)

router = APIRouter()


class ContractTextIn(BaseModel):
    text: str = Field(..., min_length=1)
    filename: Optional[str] = None


class BillingIn(BaseModel):
    items: List[BillingLineItem] = Field(default_factory=list)


class BillingFetchIn(BaseModel):
    start_date: Optional[date] = None
    end_date: Optional[date] = None


def _session_view(session: AuditSession) -> Dict[str, Any]:
    return {
        "session_id": session.session_id,
        "created_at": session.created_at,
        "contract_filename": session.contract_filename,
        "schedule": schedule_summary(session.schedule),
        "billing_items": len(session.billing),
        "billing_source": session.billing_source,
        "selected_year": session.selected_year,
    }


def _not_found(e: SessionNotFound) -> HTTPException:
    return HTTPException(status_code=404, detail=str(e))


@router.post("")
def create_session(svc: AuditSessionService = Depends(get_session_service)):
    return _session_view(svc.repo.create())


@router.get("/{session_id}")
def get_session(session_id: str, svc: AuditSessionService = Depends(get_session_service)):
    try:
        return _session_view(svc.repo.get(session_id))
    except SessionNotFound as e:
        raise _not_found(e)


@router.delete("/{session_id}")
def delete_session(session_id: str, svc: AuditSessionService = Depends(get_session_service)):
    try:
        svc.repo.delete(session_id)
    except SessionNotFound as e:
        raise _not_found(e)
    return {"session_id": session_id, "status": "DELETED"}


# -------------------------------------------------
# Contract
# -------------------------------------------------

@router.post("/{session_id}/contract")
async def upload_contract(
    session_id: str,
    file: UploadFile = File(...),
    svc: AuditSessionService = Depends(get_session_service),
):
    if file.content_type != "application/pdf":
        raise HTTPException(status_code=400, detail="Please upload a PDF file")

    data = await file.read()
    try:
        svc.repo.get(session_id)
        text = await read_pdf_text(data, file.filename or "contract.pdf")
        session = svc.attach_contract_text(session_id, text, filename=file.filename)
    except SessionNotFound as e:
        raise _not_found(e)
    except DocumentReadError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except ExtractionFailure as e:
        raise HTTPException(status_code=422, detail=str(e))
    except ConfigError as e:
        raise HTTPException(status_code=500, detail=str(e))

    return {**_session_view(session), "contract": session.schedule}


@router.post("/{session_id}/contract/text")
def upload_contract_text(
    session_id: str,
    body: ContractTextIn,
    svc: AuditSessionService = Depends(get_session_service),
):
    try:
        session = svc.attach_contract_text(session_id, body.text, filename=body.filename)
    except SessionNotFound as e:
        raise _not_found(e)
    except ExtractionFailure as e:
        raise HTTPException(status_code=422, detail=str(e))

    return {**_session_view(session), "contract": session.schedule}


# -------------------------------------------------
# Billing
# -------------------------------------------------

@router.post("/{session_id}/billing")
def upload_billing(
    session_id: str,
    body: BillingIn,
    svc: AuditSessionService = Depends(get_session_service),
):
    # zero-cost lines are dropped here the same way the Cost Explorer path drops them
    items = [i for i in body.items if i.cost > 0]
    try:
        session = svc.attach_billing(session_id, items, source="manual")
    except SessionNotFound as e:
        raise _not_found(e)
    return {**_session_view(session), "billing": session.billing}


@router.post("/{session_id}/billing/mock/{key}")
def use_mock_billing(
    session_id: str,
    key: str,
    svc: AuditSessionService = Depends(get_session_service),
):
    try:
        session = svc.attach_mock_billing(session_id, key)
    except SessionNotFound as e:
        raise _not_found(e)
    except KeyError:
        raise HTTPException(status_code=404, detail=f"Unknown mock billing set: {key}")
    return {**_session_view(session), "billing": session.billing}


@router.post("/{session_id}/billing/fetch")
def fetch_billing(
    session_id: str,
    body: BillingFetchIn,
    svc: AuditSessionService = Depends(get_session_service),
):
    start, end = previous_month_range()
    start = body.start_date or start
    end = body.end_date or end

    try:
        session = svc.fetch_billing(session_id, start_date=start, end_date=end)
    except SessionNotFound as e:
        raise _not_found(e)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except BillingFetchError as e:
        raise HTTPException(status_code=502, detail=str(e))

    return {**_session_view(session), "billing": session.billing}


# -------------------------------------------------
# Report
# -------------------------------------------------

@router.get("/{session_id}/report", response_model=ComplianceReport)
def get_report(
    session_id: str,
    year: Optional[int] = Query(None, description="Contract year; defaults to the session's selection"),
    svc: AuditSessionService = Depends(get_session_service),
):
    try:
        return svc.build_report(session_id, year)
    except SessionNotFound as e:
        raise _not_found(e)
    except YearNotFound as e:
        raise HTTPException(status_code=404, detail=str(e))
    except SessionIncomplete as e:
        raise HTTPException(status_code=409, detail=str(e))
