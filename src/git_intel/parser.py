import re
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple
from urllib.parse import urlsplit

from .errors import ParseError

GITHUB_HOST = "github.com"

SSH_PATTERN = re.compile(r"git@github\.com:([a-zA-Z0-9_.-]+)/([a-zA-Z0-9_.-]+)\.git")


@dataclass(frozen=True)
class RepoPair:
    owner: str
    repo: str

    def __str__(self) -> str:
        return f"{self.owner}/{self.repo}"

    @property
    def ssh_url(self) -> str:
        return f"git@{GITHUB_HOST}:{self}.git"

    @property
    def https_url(self) -> str:
        return f"https://{GITHUB_HOST}/{self}.git"


def is_github_url(reference: str) -> bool:
    """absolute URL whose host is exactly github.com, credentials allowed, no port"""
    try:
        parts = urlsplit(reference)
    except ValueError:
        return False
    host = parts.netloc.rpartition("@")[2]
    return bool(parts.scheme) and host == GITHUB_HOST


def is_ssh_reference(reference: str) -> bool:
    return SSH_PATTERN.fullmatch(reference) is not None


def validate(references: Sequence[str]) -> List[int]:
    """Return the positions of the invalid references.

    Purely syntactic: nothing here checks that a repository or an
    organization exists.
    """
    return [
        i
        for i, reference in enumerate(references)
        if not (is_github_url(reference) or is_ssh_reference(reference))
    ]


def parse_reference(reference: str) -> Tuple[str, Optional[str]]:
    """Split a reference into (owner, repo).

    repo is None for an organization reference. Path segments after the
    repository are ignored.
    """
    match = SSH_PATTERN.fullmatch(reference)
    if match:
        return match.group(1), match.group(2)

    try:
        path = urlsplit(reference).path
    except ValueError as e:
        raise ParseError(reference, str(e)) from e

    # "/org/" names the organization, not a repo called ""
    parts = path.rstrip("/").split("/")
    if len(parts) < 2 or not parts[1]:
        raise ParseError(reference, "no owner in path")

    owner = parts[1]
    if len(parts) == 2:
        return owner, None

    repo = parts[2].removesuffix(".git")
    if not repo:
        raise ParseError(reference, "empty repository name")
    return owner, repo
