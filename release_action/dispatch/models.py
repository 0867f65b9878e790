"""Pydantic models for GitHub API responses."""

from pydantic import BaseModel, TypeAdapter


class Repository(BaseModel):
    """A repository from the list organization repositories API."""

    name: str


RepositoryList = TypeAdapter(list[Repository])
