"""Shared test fixtures."""

import pytest

from git_intel._listing import RepoPage, RepoSummary
from git_intel.errors import ListingError


def make_page(names, next_page=0):
    return RepoPage(
        repositories=[RepoSummary(name=name) for name in names],
        next_page=next_page,
    )


class FakeLister:
    """In-memory listing service: pages[org][page] -> RepoPage."""

    def __init__(self, pages=None, fail_on=()):
        self.pages = pages or {}
        self.fail_on = set(fail_on)
        self.calls = []

    async def list_by_org(self, org, page, per_page):
        self.calls.append((org, page, per_page))
        if (org, page) in self.fail_on:
            raise ListingError(f"listing repos of {org} failed: 502 Bad Gateway")
        try:
            return self.pages[org][page]
        except KeyError:
            raise ListingError(f"listing repos of {org} failed: 404 Not Found")


@pytest.fixture
def fake_lister():
    return FakeLister()


@pytest.fixture
def target_dir(tmp_path):
    """A writeable directory to clone into."""
    target = tmp_path / "repos"
    target.mkdir()
    return target
