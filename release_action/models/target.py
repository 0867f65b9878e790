"""Targets of a repository dispatch."""

from dataclasses import dataclass


@dataclass(frozen=True, kw_only=True)
class RepositoryTarget:
    """A single repository receiving the dispatch."""

    owner: str
    repo: str

    def __str__(self) -> str:
        return f"{self.owner}/{self.repo}"


@dataclass(frozen=True, kw_only=True)
class OrganizationTarget:
    """Every repository owned by an organization, listed at send time."""

    organization: str

    def __str__(self) -> str:
        return f"{self.organization}/*"


type DispatchTarget = RepositoryTarget | OrganizationTarget
