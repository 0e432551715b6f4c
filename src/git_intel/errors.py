"""Exception hierarchy for git-intel."""

from typing import Sequence


class GitIntelError(Exception):
    """Base exception for git-intel errors."""


class ConfigError(GitIntelError):
    """Configuration error."""


class TargetPathError(ConfigError):
    """Target directory can't host the cloned repos."""


class InvalidReferenceError(GitIntelError):
    """A repository reference has bad syntax."""


class ValidationError(InvalidReferenceError):
    """One or more references failed validation."""

    def __init__(self, references: Sequence[str], positions: Sequence[int]):
        self.references = list(references)
        self.positions = list(positions)
        super().__init__(f"invalid URLs: {', '.join(self.references)}")


class ParseError(InvalidReferenceError):
    """A reference passed validation but can't be parsed."""

    def __init__(self, reference: str, reason: str):
        self.reference = reference
        self.reason = reason
        super().__init__(f"invalid GitHub URL {reference}: {reason}")


class ListingError(GitIntelError):
    """Listing an organization's repositories failed."""


class ResolutionError(GitIntelError):
    """A reference could not be resolved into repositories."""

    def __init__(self, reference: str, cause: Exception):
        self.reference = reference
        self.cause = cause
        super().__init__(f"resolving {reference} failed: {cause}")


class CloneError(GitIntelError):
    """Cloning a repository failed."""
