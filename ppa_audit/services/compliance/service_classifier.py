from __future__ import annotations

from typing import Iterable

from ppa_audit.services.compliance.compliance_models import ServiceClassification
from ppa_audit.services.extraction.schedule_models import ContractSchedule


def _matches_any(service_name: str, entries: Iterable[str]) -> bool:
    # bidirectional: "AWS Lambda" ~ "Lambda" and "Support" ~ "AWS Support (Enterprise)"
    for entry in entries:
        e = entry.lower()
        if e in service_name or service_name in e:
            return True
    return False


def classify_service(
    service: str,
    eligible_services: Iterable[str],
    excluded_services: Iterable[str],
) -> ServiceClassification:
    """
    Exclusion wins over eligibility. An empty eligible list means every
    non-excluded service is eligible.
    """
    name = (service or "").lower()
    eligible_services = list(eligible_services)

    is_excluded = _matches_any(name, excluded_services)
    is_eligible = not is_excluded and (
        len(eligible_services) == 0 or _matches_any(name, eligible_services)
    )
    return ServiceClassification(is_eligible=is_eligible, is_excluded=is_excluded)


def classify_for_schedule(service: str, schedule: ContractSchedule) -> ServiceClassification:
    return classify_service(service, schedule.eligible_services, schedule.excluded_services)
