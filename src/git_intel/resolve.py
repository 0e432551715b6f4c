"""Turn repository and organization references into owner/repo pairs."""

import asyncio
from typing import List, Optional, Sequence

from ._listing import GitHubRepoLister, RepoLister
from .config import ListingConfig
from .errors import ListingError, ParseError, ResolutionError, ValidationError
from .parser import RepoPair, parse_reference, validate

FIRST_PAGE = 1
PER_PAGE = 100


class Resolver:
    def __init__(self, lister: RepoLister):
        self.lister = lister

    async def resolve(self, references: Sequence[str]) -> List[List[RepoPair]]:
        """Resolve every reference, keeping the input order.

        All references are validated before the first request is made, and
        a ValidationError names every invalid one. Any failure afterwards
        aborts the whole batch: nothing resolved so far is returned.
        """
        positions = validate(references)
        if positions:
            raise ValidationError([references[i] for i in positions], positions)

        resolved = []
        for reference in references:
            try:
                resolved.append(await self.resolve_one(reference))
            except ParseError as e:
                raise ResolutionError(reference, e) from e
        return resolved

    async def resolve_one(self, reference: str) -> List[RepoPair]:
        owner, repo = parse_reference(reference)
        if repo is not None:
            return [RepoPair(owner, repo)]
        return await self._list_org(reference, owner)

    async def _list_org(self, reference: str, org: str) -> List[RepoPair]:
        pairs = []
        page = FIRST_PAGE
        while True:
            try:
                result = await self.lister.list_by_org(org, page=page, per_page=PER_PAGE)
            except ListingError as e:
                raise ResolutionError(reference, e) from e

            pairs.extend(RepoPair(org, repo.name) for repo in result.repositories)
            if not result.next_page:
                break
            page = result.next_page
        return pairs


def resolve_references(
    references: Sequence[str],
    token: Optional[str] = None,
    listing: Optional[ListingConfig] = None,
) -> List[List[RepoPair]]:
    return asyncio.run(_resolve_references(references, token, listing or ListingConfig()))


async def _resolve_references(
    references: Sequence[str],
    token: Optional[str],
    listing: ListingConfig,
) -> List[List[RepoPair]]:
    async with GitHubRepoLister(
        token,
        repo_type=listing.repo_type,
        sort=listing.sort,
        direction=listing.direction,
    ) as lister:
        return await Resolver(lister).resolve(references)
