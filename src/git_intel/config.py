import logging
import re
from dataclasses import dataclass, field
from enum import StrEnum
from pathlib import Path
from typing import Any, Optional, Sequence

import tomli_w
from mashumaro.exceptions import MissingField
from mashumaro.mixins.toml import DataClassTOMLMixin

from ._listing import RepoSort, RepoType, SortDirection
from .errors import ConfigError, TargetPathError

logger = logging.getLogger(__name__)

ORG_NAME_PATTERN = re.compile(r"[a-zA-Z0-9_.-]+")


class AuthMethod(StrEnum):
    AGENT = "ssh agent"
    SSH_KEY = "ssh key"
    BASIC = "basic"
    OAUTH = "oauth"


@dataclass
class AuthConfig:
    username: Optional[str] = None
    password: Optional[str] = None
    ssh_key: Optional[str] = None
    oauth_token: Optional[str] = None

    @property
    def method(self) -> AuthMethod:
        if self.ssh_key:
            return AuthMethod.SSH_KEY
        if self.oauth_token:
            return AuthMethod.OAUTH
        if self.username or self.password:
            return AuthMethod.BASIC
        return AuthMethod.AGENT


@dataclass
class CloneOptions:
    branch: Optional[str] = None
    depth: Optional[int] = None
    recurse: bool = False


@dataclass
class RepoConfig:
    url: str
    clone: Optional[CloneOptions] = None
    auth: Optional[AuthConfig] = None


@dataclass
class OrgConfig:
    name: str
    exclude_repos: Sequence[str] = field(default_factory=list)
    repo_limit: Optional[int] = None
    clone: Optional[CloneOptions] = None
    auth: Optional[AuthConfig] = None

    @property
    def url(self) -> str:
        return f"https://github.com/{self.name}"


@dataclass
class PathConfig:
    path: str
    repos: Sequence[RepoConfig] = field(default_factory=list)
    orgs: Sequence[OrgConfig] = field(default_factory=list)
    clone: Optional[CloneOptions] = None
    auth: Optional[AuthConfig] = None


@dataclass
class ListingConfig:
    repo_type: RepoType = RepoType.ALL
    sort: RepoSort = RepoSort.FULL_NAME
    direction: SortDirection = SortDirection.ASC


@dataclass
class Config(DataClassTOMLMixin):
    paths: Sequence[PathConfig] = field(default_factory=list)
    clone: Optional[CloneOptions] = None
    auth: Optional[AuthConfig] = None
    listing: ListingConfig = field(default_factory=ListingConfig)


CONFIG_FILE_PATH = Path("git-intel.toml")


def load_config(path: Optional[Path] = None) -> Config:
    cfg_path = path or CONFIG_FILE_PATH

    if not cfg_path.exists():
        if path is not None:
            raise ConfigError(f"config file not found: {cfg_path}")
        logger.info(f"not found {cfg_path}, use default config")
        return Config()
    content = cfg_path.read_text(encoding="utf-8")
    logger.info(f"use config from {cfg_path}")
    # TOMLDecodeError and mashumaro's InvalidFieldValue are both ValueErrors
    try:
        config = Config.from_toml(content)
    except (MissingField, ValueError) as e:
        raise ConfigError(f"invalid config {cfg_path}: {e}") from e
    logger.debug(f"{config=}")
    return config


def validate_config(config: Config) -> None:
    """Check everything that can be checked before touching the network."""
    for auth in _auth_blocks(config):
        if auth.method is AuthMethod.BASIC and not (auth.username and auth.password):
            raise ConfigError("basic auth needs both a username and a password")

    for path_config in config.paths:
        if len(path_config.repos) == 0 and len(path_config.orgs) == 0:
            raise ConfigError(
                "at least one GitHub URL or an organization is required for each path"
            )
        for org in path_config.orgs:
            if not ORG_NAME_PATTERN.fullmatch(org.name):
                raise ConfigError(f"invalid organization name: {org.name!r}")

        validate_target_path(path_config.path)


def _auth_blocks(config: Config):
    blocks = [config.auth]
    for path_config in config.paths:
        blocks.append(path_config.auth)
        blocks.extend(repo.auth for repo in path_config.repos)
        blocks.extend(org.auth for org in path_config.orgs)
    return [auth for auth in blocks if auth is not None]


def validate_target_path(path: str) -> None:
    """Make sure path can host the cloned repos: an existing, writeable directory."""
    if not path:
        raise TargetPathError("path is required")

    target = Path(path)
    try:
        target.stat()
    except FileNotFoundError as e:
        raise TargetPathError(f"target path '{path}' does not exist") from e
    except OSError as e:
        raise TargetPathError(f"can't stat target path '{path}': {e}") from e

    if not target.is_dir():
        raise TargetPathError(f"target path '{path}' is not a directory")

    test_file = target / ".testfile"
    try:
        test_file.touch()
    except PermissionError as e:
        raise TargetPathError(f"target path '{path}' is not writeable") from e
    except OSError as e:
        raise TargetPathError(f"failed to test write to target path '{path}'") from e
    test_file.unlink()


def skeleton_config() -> Config:
    return Config(
        paths=[
            PathConfig(
                path="/path/to/clone/repos",
                repos=[
                    RepoConfig(url="https://github.com/example/repo1.git"),
                    RepoConfig(url="https://github.com/example/repo2.git"),
                ],
                orgs=[OrgConfig(name="exampleOrg")],
                auth=AuthConfig(username="username", password="password"),
            )
        ],
        clone=CloneOptions(branch="main", depth=1),
        auth=AuthConfig(username="username", password="password"),
    )


def write_skeleton(path: Path, force: bool = False) -> None:
    if path.exists() and not force:
        raise ConfigError(f"{path} already exists, use --force to overwrite it")

    content = tomli_w.dumps(_clean(skeleton_config().to_dict()))
    path.write_text(content, encoding="utf-8")
    logger.info(f"wrote skeleton config to {path}")


# TOML has no null, and empty tables only add noise to the skeleton
def _clean(value: Any) -> Any:
    if isinstance(value, dict):
        cleaned = {k: _clean(v) for k, v in value.items()}
        return {k: v for k, v in cleaned.items() if not _is_empty(v)}
    if isinstance(value, list):
        cleaned = [_clean(item) for item in value]
        return [item for item in cleaned if not _is_empty(item)]
    return value


def _is_empty(value: Any) -> bool:
    return value is None or value == "" or value == [] or value == {}
