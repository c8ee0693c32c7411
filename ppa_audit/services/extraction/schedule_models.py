# ppa_audit/services/extraction/schedule_models.py
from __future__ import annotations

from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class ContractYear(BaseModel):
    model_config = ConfigDict(frozen=True)

    year: int = Field(..., gt=0, examples=[1])
    committed_spend: Decimal = Field(..., ge=0, examples=["100000"])
    discount_rate: Decimal = Field(..., ge=0, examples=["15"])


class ContractSchedule(BaseModel):
    """
    Commitment schedule of one uploaded contract.

    Lists keep document order and duplicates; every catalog hit and every
    year clause is preserved as found.
    """

    model_config = ConfigDict(frozen=True)

    years: List[ContractYear] = Field(default_factory=list)
    eligible_services: List[str] = Field(default_factory=list)
    excluded_services: List[str] = Field(default_factory=list)
    warnings: List[str] = Field(default_factory=list)

    def available_years(self) -> List[int]:
        return [y.year for y in self.years]

    def get_year(self, year: int) -> Optional[ContractYear]:
        for y in self.years:
            if y.year == year:
                return y
        return None
