# ppa_audit/services/session/audit_session_service.py
from __future__ import annotations

import logging
from datetime import date
from typing import List, Optional

from ppa_audit.core.errors import SessionIncomplete
from ppa_audit.repositories.session_repo import AuditSession, AuditSessionRepository
from ppa_audit.services.billing.billing_fetch_service import BillingFetchService
from ppa_audit.services.billing.billing_models import BillingLineItem
from ppa_audit.services.billing.mock_billing import get_mock_billing
from ppa_audit.services.catalog.registry import CatalogRegistry
from ppa_audit.services.compliance.compliance_engine import ComplianceEngine
from ppa_audit.services.compliance.compliance_models import ComplianceReport
from ppa_audit.services.extraction.schedule_models import ContractSchedule
from ppa_audit.services.extraction.term_extractor import ContractTermExtractor

logger = logging.getLogger(__name__)


class AuditSessionService:
    """
    Upload -> billing -> analysis workflow for one audit session.

    The schedule is extracted once per upload and reused; the report is
    rebuilt on every request.
    """

    def __init__(
        self,
        repo: AuditSessionRepository,
        *,
        engine: Optional[ComplianceEngine] = None,
        fetcher: Optional[BillingFetchService] = None,
    ):
        self.repo = repo
        self.engine = engine or ComplianceEngine()
        self._fetcher = fetcher

    # ---------- CONTRACT ----------

    def attach_contract_text(
        self,
        session_id: str,
        text: str,
        *,
        filename: Optional[str] = None,
    ) -> AuditSession:
        self.repo.get(session_id)

        extractor = ContractTermExtractor(CatalogRegistry.get_bundle())
        schedule = extractor.extract(text)

        logger.info(
            "session=%s contract parsed: years=%s",
            session_id,
            schedule.available_years(),
        )
        return self.repo.update(
            session_id,
            schedule=schedule,
            contract_filename=filename,
            selected_year=schedule.years[0].year,
        )

    # ---------- BILLING ----------

    def attach_billing(
        self,
        session_id: str,
        items: List[BillingLineItem],
        *,
        source: str = "manual",
    ) -> AuditSession:
        self.repo.get(session_id)
        return self.repo.update(session_id, billing=list(items), billing_source=source)

    def attach_mock_billing(self, session_id: str, key: str) -> AuditSession:
        items = get_mock_billing(key)
        return self.attach_billing(session_id, items, source=f"mock:{key}")

    def fetch_billing(self, session_id: str, *, start_date: date, end_date: date) -> AuditSession:
        self.repo.get(session_id)
        fetcher = self._fetcher or BillingFetchService()
        items = fetcher.fetch(start_date=start_date, end_date=end_date)
        return self.attach_billing(
            session_id,
            items,
            source=f"cost_explorer:{start_date.isoformat()}..{end_date.isoformat()}",
        )

    # ---------- REPORT ----------

    def build_report(self, session_id: str, year: Optional[int] = None) -> ComplianceReport:
        session = self.repo.get(session_id)

        if session.schedule is None:
            raise SessionIncomplete("Upload a contract before requesting a report")
        if not session.billing:
            raise SessionIncomplete("Load billing data before requesting a report")

        selected = year if year is not None else session.selected_year
        report = self.engine.build_report(
            schedule=session.schedule,
            billing=session.billing,
            year=selected,
        )

        if selected != session.selected_year:
            self.repo.update(session_id, selected_year=selected)
        return report


def schedule_summary(schedule: Optional[ContractSchedule]) -> Optional[dict]:
    if schedule is None:
        return None
    return {
        "years": schedule.available_years(),
        "eligible_services": len(schedule.eligible_services),
        "excluded_services": len(schedule.excluded_services),
        "warnings": list(schedule.warnings),
    }
