"""Base model configuration for all data structures."""

from pydantic import BaseModel, ConfigDict


class Model(BaseModel):
    """Base model with standard configuration.

    Fields may be populated by name or by their wire alias.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)
