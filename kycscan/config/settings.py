"""
Application Settings.

All configuration comes from .env / environment variables.
"""

from functools import lru_cache
from pydantic_settings import BaseSettings

from kycscan.core.entities.document import DocType


class Settings(BaseSettings):
    """Settings loaded from environment variables."""

    # --- App ---
    env: str = "development"
    debug: bool = True
    api_host: str = "0.0.0.0"
    api_port: int = 8000
    log_level: str = "INFO"

    # --- Database ---
    database_url: str = "sqlite:///kyc_documents.db"
    db_pool_size: int = 10
    db_max_overflow: int = 20
    db_echo: bool = False

    # --- OCR ---
    ocr_lang: str = "en"
    ocr_use_gpu: bool = False
    ocr_min_confidence: float = 0.5

    # --- Images ---
    upload_dir: str = "uploads"

    # --- KYC ---
    required_documents: list[DocType] = [
        DocType.AADHAAR,
        DocType.PAN,
        DocType.ELECTRICITY_BILL,
    ]
    dob_year_min: int = 1900
    dob_year_max: int = 2099
    registration_year_min: int = 2000
    address_min_length: int = 15
    back_side_address_min_length: int = 20

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "extra": "ignore"}


@lru_cache
def get_settings() -> Settings:
    """Cached settings singleton."""
    return Settings()
