from pathlib import Path

from pydantic import BaseModel
from dotenv import load_dotenv
import os

load_dotenv()

_PACKAGE_DIR = Path(__file__).resolve().parent.parent


class Settings(BaseModel):
    # Catalogs
    CATALOG_PATH: str = os.getenv(
        "CATALOG_PATH", str(_PACKAGE_DIR / "catalogs" / "aws_ppa_catalog_v1.yaml")
    )
    MOCK_BILLING_PATH: str = os.getenv(
        "MOCK_BILLING_PATH", str(_PACKAGE_DIR / "catalogs" / "mock_billing_v1.yaml")
    )

    # Document text
    PDF_TEXT_BACKEND: str = os.getenv("PDF_TEXT_BACKEND", "pypdf2")
    LLAMA_CLOUD_API_KEY: str = os.getenv("LLAMA_CLOUD_API_KEY", "")

    # AWS Cost Explorer (credentials come from the boto3 default chain)
    AWS_REGION: str = os.getenv("AWS_REGION", "us-east-1")

    # Compliance tolerances
    ITEM_TOLERANCE: str = os.getenv("ITEM_TOLERANCE", "0.01")
    REPORT_TOLERANCE: str = os.getenv("REPORT_TOLERANCE", "1.0")

    # HTTP
    CORS_ORIGINS: str = os.getenv(
        "CORS_ORIGINS", "http://localhost:5173,http://localhost:5174"
    )
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    def cors_origins(self) -> list[str]:
        return [o.strip() for o in self.CORS_ORIGINS.split(",") if o.strip()]


settings = Settings()
