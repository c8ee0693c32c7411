from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, Field

from ppa_audit.core.errors import ExtractionFailure
from ppa_audit.services.catalog.registry import CatalogRegistry
from ppa_audit.services.extraction.schedule_models import ContractSchedule
from ppa_audit.services.extraction.term_extractor import ContractTermExtractor

router = APIRouter()


class ContractTextIn(BaseModel):
    text: str = Field(..., min_length=1)


@router.post("/extract", response_model=ContractSchedule)
def extract_contract_terms(body: ContractTextIn):
    """Stateless: contract text in, commitment schedule out."""
    extractor = ContractTermExtractor(CatalogRegistry.get_bundle())
    try:
        return extractor.extract(body.text)
    except ExtractionFailure as e:
        raise HTTPException(status_code=422, detail=str(e))
