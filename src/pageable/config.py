from __future__ import annotations

from dotenv import load_dotenv
from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Logging
    log_level: str = "INFO"

    # Listing endpoint
    api_base_url: str = Field(default="https://pokeapi.co", validation_alias="PAGEABLE_BASE_URL")
    request_timeout: float = Field(default=10.0, validation_alias="PAGEABLE_TIMEOUT")

    # Paging
    page_size: int = Field(default=30, gt=0, validation_alias="PAGEABLE_PAGE_SIZE")
    loading_grace: float = Field(default=0.01, ge=0.0, validation_alias="PAGEABLE_LOADING_GRACE")

    model_config = {
        "env_file": ".env",
        "extra": "ignore",
    }

    @classmethod
    def load(cls) -> "Settings":
        load_dotenv(override=False)
        return cls()
