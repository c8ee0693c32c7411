from fastapi import APIRouter

from ppa_audit.services.billing.mock_billing import get_mock_billing_sets

router = APIRouter()


@router.get("/mock")
def list_mock_billing_sets():
    return [
        {
            "key": s.key,
            "name": s.name,
            "description": s.description,
            "items": len(s.items),
        }
        for s in get_mock_billing_sets().values()
    ]
