from typing import Optional
from ppa_audit.services.catalog.schema import CatalogBundle


class CatalogRegistry:
    """
    Lean in-memory catalog registry
    - load() called once at startup
    - get_bundle() returns the loaded CatalogBundle
    """

    _bundle: Optional[CatalogBundle] = None

    @classmethod
    def load(cls, bundle: CatalogBundle) -> None:
        cls._bundle = bundle

    @classmethod
    def is_loaded(cls) -> bool:
        return cls._bundle is not None

    @classmethod
    def get_bundle(cls) -> CatalogBundle:
        if cls._bundle is None:
            raise RuntimeError("Catalog not loaded")
        return cls._bundle

    @classmethod
    def reset(cls) -> None:
        cls._bundle = None
