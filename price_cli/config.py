import os
from dataclasses import dataclass
from typing import Optional


API_BASE_ENV = "PRICE_API_BASE_URL"


@dataclass
class APISettings:
    base_url: str


class MissingConfigurationError(RuntimeError):
    """Raised when required configuration is missing."""


def get_settings(base_url: Optional[str] = None) -> APISettings:
    """Load CLI settings from arguments or environment variables.

    Args:
        base_url: Optional base URL override.

    Returns:
        APISettings with the explicit override taking priority over the
        environment variable.

    Raises:
        MissingConfigurationError: when the base URL is not provided.
    """

    resolved_base = base_url or os.getenv(API_BASE_ENV)

    if not resolved_base:
        raise MissingConfigurationError(
            f"API base URL is required. Set {API_BASE_ENV} or pass --base-url."
        )

    return APISettings(base_url=resolved_base.rstrip("/"))
