from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator


# =========================================================
# META
# =========================================================

class CatalogMeta(BaseModel):
    catalog_id: str
    version: str
    description: Optional[str] = None


# =========================================================
# ENTRY
# =========================================================

class CatalogEntry(BaseModel):
    """One canonical name plus the literal spellings that identify it."""

    model_config = ConfigDict(frozen=True)

    canonical: str
    aliases: List[str] = Field(default_factory=list)

    @field_validator("canonical")
    @classmethod
    def _canonical_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("canonical name must not be blank")
        return v

    # a blank alias is contained in every service name
    @field_validator("aliases")
    @classmethod
    def _aliases_not_blank(cls, v: List[str]) -> List[str]:
        if any(not a.strip() for a in v):
            raise ValueError("aliases must not be blank")
        return v

    def patterns(self) -> List[str]:
        return self.aliases or [self.canonical]


# =========================================================
# ROOT
# =========================================================

class CatalogBundle(BaseModel):
    meta: CatalogMeta
    eligible_services: List[CatalogEntry] = Field(default_factory=list)
    excluded_categories: List[CatalogEntry] = Field(default_factory=list)
