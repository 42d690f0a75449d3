"""Client configuration with environment variable loading.

Pydantic-based configuration for the orchestration core.
Holds the two switchable backend base URLs and the upload accept hint.
"""

import os

from dotenv import load_dotenv
from pydantic import BaseModel, Field, field_validator

from docbridge.models.schemas import Endpoint

# Load environment variables from .env file
load_dotenv()


def _split_extensions(raw: str) -> list[str]:
    return [ext.strip().lower() for ext in raw.split(",") if ext.strip()]


class ClientConfig(BaseModel):
    """Configuration for the docbridge client.

    Attributes:
        local_base_url: Base URL of the local development backend.
        hosted_base_url: Base URL of the hosted production backend.
        default_endpoint: Which base URL is active at startup.
        accepted_extensions: Upload filter hint; the server is the authority.
    """

    local_base_url: str = Field(
        default_factory=lambda: os.getenv("LOCAL_API_BASE_URL", "http://localhost:5000"),
        description="Local development backend",
    )
    hosted_base_url: str = Field(
        default_factory=lambda: os.getenv(
            "HOSTED_API_BASE_URL", "https://docbridge-api.onrender.com"
        ),
        description="Hosted production backend",
    )
    default_endpoint: Endpoint = Field(
        default_factory=lambda: Endpoint(os.getenv("DEFAULT_ENDPOINT", "local").lower()),
        description="Endpoint active at startup",
    )
    accepted_extensions: list[str] = Field(
        default_factory=lambda: _split_extensions(
            os.getenv("ACCEPTED_EXTENSIONS", ".pdf,.docx,.xlsx")
        ),
        description="File extensions offered by the upload picker",
    )

    @field_validator("local_base_url", "hosted_base_url")
    @classmethod
    def validate_base_url(cls, v: str) -> str:
        """Require an http(s) URL and drop trailing slashes."""
        v = v.strip()
        if not v.startswith(("http://", "https://")):
            raise ValueError(f"Base URL must start with http:// or https://, got {v!r}")
        return v.rstrip("/")

    @field_validator("accepted_extensions")
    @classmethod
    def normalize_extensions(cls, v: list[str]) -> list[str]:
        return [ext if ext.startswith(".") else f".{ext}" for ext in (e.lower() for e in v)]

    def base_urls(self) -> dict[Endpoint, str]:
        return {Endpoint.LOCAL: self.local_base_url, Endpoint.HOSTED: self.hosted_base_url}


def get_client_config() -> ClientConfig:
    """Create client configuration from environment.

    Returns:
        Configured ClientConfig instance.

    Raises:
        ValueError: If a base URL or the default endpoint is invalid.
    """
    return ClientConfig()
