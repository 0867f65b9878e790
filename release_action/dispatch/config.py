"""Configuration for sending repository dispatches."""

from pydantic import BaseModel, Field, SecretStr


class DispatchConfig(BaseModel):
    """Configuration for the GitHub repository dispatch API."""

    token: SecretStr
    api_base_url: str = "https://api.github.com"
    api_version: str = "2022-11-28"
    timeout: float = Field(default=30, gt=0)
    # Log what would be sent instead of querying or sending anything
    skip: bool = False
    max_concurrency: int = Field(default=10, ge=1)
