from dataclasses import dataclass, field
from enum import StrEnum
from typing import Protocol, Sequence

from mashumaro.mixins.orjson import DataClassORJSONMixin


class RepoType(StrEnum):
    ALL = "all"
    PUBLIC = "public"
    PRIVATE = "private"
    FORKS = "forks"
    SOURCES = "sources"
    MEMBER = "member"


class RepoSort(StrEnum):
    CREATED = "created"
    UPDATED = "updated"
    PUSHED = "pushed"
    FULL_NAME = "full_name"


class SortDirection(StrEnum):
    ASC = "asc"
    DESC = "desc"


@dataclass
class RepoSummary(DataClassORJSONMixin):
    name: str
    full_name: str = ""

    def __str__(self) -> str:
        return self.full_name or self.name


@dataclass
class RepoPage:
    repositories: Sequence[RepoSummary] = field(default_factory=list)
    # 0 when this is the last page
    next_page: int = 0


class RepoLister(Protocol):
    async def list_by_org(self, org: str, page: int, per_page: int) -> RepoPage: ...
