from ppa_audit.repositories.session_repo import get_session_repo
from ppa_audit.services.session.audit_session_service import AuditSessionService


def get_session_service() -> AuditSessionService:
    return AuditSessionService(get_session_repo())
