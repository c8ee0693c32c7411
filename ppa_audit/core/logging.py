from __future__ import annotations

import logging
import sys
from typing import Optional

from ppa_audit.core.config import settings

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"
LOG_DATEFMT = "%Y-%m-%dT%H:%M:%S%z"

# SDK and HTTP client loggers log every request at DEBUG/INFO
NOISY_LOGGERS = ("botocore", "boto3", "urllib3", "httpx", "llama_parse")


def _resolve_level(name: Optional[str]) -> int:
    level = logging.getLevelName((name or "INFO").strip().upper())
    return level if isinstance(level, int) else logging.INFO


def setup_logging(level: Optional[str] = None, root: Optional[logging.Logger] = None) -> None:
    """Stdout handler on the root logger; level from LOG_LEVEL unless given."""
    root = root or logging.getLogger()
    if root.handlers:
        return  # reload or an embedding server already configured it

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(fmt=LOG_FORMAT, datefmt=LOG_DATEFMT))

    root.setLevel(_resolve_level(level or settings.LOG_LEVEL))
    root.addHandler(handler)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(root.level, logging.WARNING))
