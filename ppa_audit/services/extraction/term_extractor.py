from __future__ import annotations

import logging
import re
from collections import Counter
from decimal import Decimal, InvalidOperation
from typing import List, Optional

from ppa_audit.core.errors import ExtractionFailure
from ppa_audit.services.catalog.schema import CatalogBundle, CatalogEntry
from ppa_audit.services.extraction.schedule_models import ContractSchedule, ContractYear

logger = logging.getLogger(__name__)


YEAR_CLAUSE_PATTERN = re.compile(
    r"Contract Year (\d+):.*?"
    r"Annual Committed Spend\s*=\s*\$?([\d,]+)"
    r".*?with\s+([\d.]+)%\s*Discount Rate",
    re.IGNORECASE,
)

ELIGIBLE_SECTION_PATTERN = re.compile(
    r"Eligible Services.*?include.*?(?:but not limited to:)?\s*(.*?)"
    r"(?=SCHEDULE 1|EXCLUDED SERVICES|The following services are excluded|\Z)",
    re.IGNORECASE | re.DOTALL,
)

ELIGIBLE_FALLBACK_PATTERN = re.compile(r"Eligible Services.*\Z", re.IGNORECASE | re.DOTALL)

EXCLUDED_SECTION_PATTERN = re.compile(
    r"(?:SCHEDULE 1.*?EXCLUDED SERVICES|EXCLUDED SERVICES)"
    r".*?(?:excluded from.*?eligibility)?\s*(.*?)"
    r"(?=SCHEDULE 2|KEY TERMS|SIGNATURE|\Z)",
    re.IGNORECASE | re.DOTALL,
)

LINE_SPLIT = re.compile(r"[\n\r]+")
RATE_PREFIX = re.compile(r"\d+(?:\.\d+)?|\.\d+")

MIN_LINE_LENGTH = 5


def _parse_spend(raw: str) -> Optional[Decimal]:
    digits = raw.replace(",", "")
    if not digits:
        return None
    return Decimal(digits)


def _parse_rate(raw: str) -> Optional[Decimal]:
    """
    '15'    -> Decimal('15')
    '12.5'  -> Decimal('12.5')
    '1.2.3' -> Decimal('1.2')   (leading numeric prefix only)
    """
    m = RATE_PREFIX.match(raw)
    if not m:
        return None
    try:
        return Decimal(m.group(0))
    except InvalidOperation:
        return None


class ContractTermExtractor:
    """
    Deterministic commitment-schedule extraction from contract text.

    Covers:
    - Contract year clauses (committed spend + discount rate)
    - Eligible service list (section scan, then fallback scan)
    - Excluded service categories

    Every service hit is traceable to a catalog alias; nothing outside the
    catalog is ever reported.
    """

    def __init__(self, catalog: CatalogBundle):
        self.catalog = catalog

    # ============================================================
    # PUBLIC
    # ============================================================

    def extract(self, text: str) -> ContractSchedule:
        text = text or ""

        years, warnings = self._extract_years(text)
        eligible = self._extract_eligible_services(text)
        excluded = self._extract_excluded_services(text)

        warnings.extend(self._validate_years(years))
        for w in warnings:
            logger.warning("contract schedule warning: %s", w)

        logger.info(
            "parsed contract: years=%d eligible_services=%d excluded_services=%d",
            len(years),
            len(eligible),
            len(excluded),
        )

        if not years:
            raise ExtractionFailure("No contract years found in the document")
        if not eligible:
            raise ExtractionFailure("No eligible services found in the document")

        return ContractSchedule(
            years=years,
            eligible_services=eligible,
            excluded_services=excluded,
            warnings=warnings,
        )

    # ============================================================
    # EXTRACTION METHODS
    # ============================================================

    def _extract_years(self, text: str):
        years: List[ContractYear] = []
        warnings: List[str] = []

        for m in YEAR_CLAUSE_PATTERN.finditer(text):
            year_no = int(m.group(1))
            spend = _parse_spend(m.group(2))
            rate = _parse_rate(m.group(3))
            if year_no <= 0 or spend is None or rate is None:
                warnings.append(f"Unreadable contract year clause skipped: {m.group(0)[:120]}")
                continue

            years.append(
                ContractYear(
                    year=year_no,
                    committed_spend=spend,
                    discount_rate=rate,
                )
            )

        return years, warnings

    def _extract_eligible_services(self, text: str) -> List[str]:
        found: List[str] = []

        m = ELIGIBLE_SECTION_PATTERN.search(text)
        if m:
            logger.debug("eligible services section: %s", m.group(1)[:500])
            found = self._scan_lines(m.group(1), self.catalog.eligible_services)

        if found:
            return found

        # fallback: heading to end of text, each service at most once
        logger.info("no eligible services in section, scanning rest of document")
        m = ELIGIBLE_FALLBACK_PATTERN.search(text)
        if not m:
            return []

        remaining = m.group(0)
        for entry in self.catalog.eligible_services:
            if self._matches_anywhere(entry, remaining) and entry.canonical not in found:
                found.append(entry.canonical)
        return found

    def _extract_excluded_services(self, text: str) -> List[str]:
        m = EXCLUDED_SECTION_PATTERN.search(text)
        if not m:
            return []

        logger.debug("excluded services section: %s", m.group(1)[:300])
        return self._scan_lines(m.group(1), self.catalog.excluded_categories)

    # ============================================================
    # MATCHING
    # ============================================================

    def _scan_lines(self, section: str, entries: List[CatalogEntry]) -> List[str]:
        hits: List[str] = []
        for line in LINE_SPLIT.split(section):
            clean = line.strip()
            if len(clean) < MIN_LINE_LENGTH:
                continue
            for entry in entries:
                if any(alias in clean for alias in entry.patterns()):
                    hits.append(entry.canonical)
        return hits

    def _matches_anywhere(self, entry: CatalogEntry, text: str) -> bool:
        pattern = "|".join(re.escape(a) for a in entry.patterns())
        return re.search(pattern, text, re.IGNORECASE) is not None

    # ============================================================
    # VALIDATION
    # ============================================================

    def _validate_years(self, years: List[ContractYear]) -> List[str]:
        warnings: List[str] = []

        counts = Counter(y.year for y in years)
        for year_no, n in counts.items():
            if n > 1:
                warnings.append(
                    f"Contract year {year_no} appears {n} times; all entries are kept "
                    f"and the first is used for analysis"
                )

        for y in years:
            if y.discount_rate > 100:
                warnings.append(
                    f"Contract year {y.year} discount rate {y.discount_rate}% is outside 0-100"
                )
            elif y.discount_rate == 100:
                warnings.append(
                    f"Contract year {y.year} discount rate is 100%; expected costs cannot be derived"
                )

        return warnings
