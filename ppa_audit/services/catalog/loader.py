import logging
from pathlib import Path

import yaml
from pydantic import ValidationError

from ppa_audit.services.catalog.schema import CatalogBundle

logger = logging.getLogger(__name__)


def load_catalog_from_file(path: str) -> CatalogBundle:
    """
    Read a catalog YAML into a validated CatalogBundle.

    Raises RuntimeError for a missing file, an empty or non-mapping document,
    or entries the schema rejects (blank canonical names or aliases).
    """
    p = Path(path)
    if not p.exists():
        raise RuntimeError(f"Catalog file not found: {path}")

    raw = yaml.safe_load(p.read_text(encoding="utf-8"))
    if not isinstance(raw, dict):
        raise RuntimeError(f"Catalog file is empty or not a mapping: {path}")

    try:
        bundle = CatalogBundle.model_validate(raw)
    except ValidationError as e:
        raise RuntimeError(f"Invalid catalog {path}: {e}") from e

    logger.debug(
        "catalog %s: eligible=%d excluded=%d",
        bundle.meta.catalog_id,
        len(bundle.eligible_services),
        len(bundle.excluded_categories),
    )
    return bundle
