from .github import GitHubRepoLister
from .rest import RepoLister, RepoPage, RepoSort, RepoSummary, RepoType, SortDirection

__all__ = [
    "GitHubRepoLister",
    "RepoLister",
    "RepoPage",
    "RepoSort",
    "RepoSummary",
    "RepoType",
    "SortDirection",
]
