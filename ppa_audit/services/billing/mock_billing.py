from __future__ import annotations

from pathlib import Path
from typing import Dict, List

import yaml

from ppa_audit.core.config import settings
from ppa_audit.services.billing.billing_models import BillingLineItem, MockBillingSet

_cache: Dict[str, MockBillingSet] | None = None


def load_mock_billing_sets(path: str | None = None) -> Dict[str, MockBillingSet]:
    p = Path(path or settings.MOCK_BILLING_PATH)
    if not p.exists():
        raise RuntimeError(f"Mock billing file not found: {p}")

    with open(p, "r", encoding="utf-8") as f:
        raw = yaml.safe_load(f) or {}

    return {
        key: MockBillingSet(key=key, **body)
        for key, body in raw.items()
    }


def get_mock_billing_sets() -> Dict[str, MockBillingSet]:
    global _cache
    if _cache is None:
        _cache = load_mock_billing_sets()
    return _cache


def get_mock_billing(key: str) -> List[BillingLineItem]:
    sets = get_mock_billing_sets()
    if key not in sets:
        raise KeyError(f"Unknown mock billing set: {key}")
    return list(sets[key].items)
