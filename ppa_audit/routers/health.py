from fastapi import APIRouter

from ppa_audit.services.catalog.registry import CatalogRegistry

router = APIRouter()


@router.get("")
def health():
    catalog = None
    if CatalogRegistry.is_loaded():
        meta = CatalogRegistry.get_bundle().meta
        catalog = f"{meta.catalog_id}@{meta.version}"
    return {"status": "ok", "catalog": catalog}
