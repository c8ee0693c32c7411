# ppa_audit/core/errors.py
from __future__ import annotations


class AuditError(Exception):
    """Base class for every error the audit core reports to a caller."""


class ConfigError(AuditError):
    pass


class ExtractionFailure(AuditError):
    """Contract text yielded no year clauses or no eligible services.

    Not retried: the caller has to upload a different document.
    """


class YearNotFound(AuditError):
    def __init__(self, year: int):
        self.year = year
        super().__init__(f"No contract data found for year {year}")


class ComputationDegenerate(AuditError):
    """Discount rate leaves no undiscounted price to back-derive (r >= 100)."""

    def __init__(self, service: str, discount_rate):
        self.service = service
        self.discount_rate = discount_rate
        super().__init__(
            f"Cannot derive undiscounted cost for '{service}': "
            f"discount rate {discount_rate}% leaves no list price"
        )


class DocumentReadError(AuditError):
    pass


class BillingFetchError(AuditError):
    pass


class SessionNotFound(AuditError):
    def __init__(self, session_id: str):
        self.session_id = session_id
        super().__init__(f"Audit session not found: {session_id}")


class SessionIncomplete(AuditError):
    pass
