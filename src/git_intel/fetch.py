"""Fetch the configured repositories into their target paths."""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Sequence, Union

from rich.console import Console
from rich.table import Table

from .clone import CloneTask, clone_all
from .config import (
    AuthConfig,
    CloneOptions,
    Config,
    OrgConfig,
    PathConfig,
    RepoConfig,
    validate_config,
)
from .errors import CloneError, ConfigError
from .parser import RepoPair
from .resolve import resolve_references
from .survey import survey_tasks

logger = logging.getLogger(__name__)


@dataclass
class Source:
    """One configured repo or org, with the path it belongs to."""

    reference: str
    path: PathConfig
    entry: Union[RepoConfig, OrgConfig]


def collect_sources(config: Config) -> List[Source]:
    sources = []
    for path_config in config.paths:
        for repo in path_config.repos:
            sources.append(Source(repo.url, path_config, repo))
        for org in path_config.orgs:
            sources.append(Source(org.url, path_config, org))
    return sources


def _first(*values):
    for value in values:
        if value is not None:
            return value
    return None


def _filter_org(org: OrgConfig, pairs: Sequence[RepoPair]) -> List[RepoPair]:
    excluded = set(org.exclude_repos)
    kept = [pair for pair in pairs if pair.repo not in excluded]
    if org.repo_limit is not None:
        kept = kept[: org.repo_limit]
    return kept


def build_tasks(
    config: Config,
    sources: Sequence[Source],
    resolved: Sequence[Sequence[RepoPair]],
) -> List[CloneTask]:
    tasks = []
    seen = {}
    for source, pairs in zip(sources, resolved, strict=True):
        entry = source.entry
        options: CloneOptions = _first(entry.clone, source.path.clone, config.clone) or CloneOptions()
        auth: Optional[AuthConfig] = _first(entry.auth, source.path.auth, config.auth)

        if isinstance(entry, OrgConfig):
            pairs = _filter_org(entry, pairs)

        for pair in pairs:
            dest = Path(source.path.path) / pair.repo
            if dest in seen:
                if seen[dest] != pair:
                    raise ConfigError(f"{seen[dest]} and {pair} would both be cloned to {dest}")
                logger.info(f"{pair} is listed more than once for {dest}, skip")
                continue
            seen[dest] = pair
            tasks.append(CloneTask(repo=pair, dest=dest, options=options, auth=auth))
    return tasks


def plan_fetch(config: Config, token: Optional[str] = None) -> List[CloneTask]:
    sources = collect_sources(config)
    resolved = resolve_references([s.reference for s in sources], token, config.listing)
    return build_tasks(config, sources, resolved)


def print_plan(tasks: Sequence[CloneTask]) -> None:
    table = Table("Repository", "Destination", "Auth")
    for task in tasks:
        table.add_row(str(task.repo), str(task.dest), str(task.auth_method))
    Console().print(table)


def fetch(
    config: Config,
    token: Optional[str] = None,
    *,
    dry_run: bool = False,
    select: bool = False,
) -> None:
    validate_config(config)
    if len(config.paths) == 0:
        logger.info("no path configured, nothing to fetch")
        return

    tasks = plan_fetch(config, token)
    logger.info(f"{len(tasks)} repos to fetch")

    if dry_run:
        print_plan(tasks)
        return

    if select:
        tasks = survey_tasks(tasks)
    if len(tasks) == 0:
        logger.info("no repo to clone")
        return

    failures = clone_all(tasks)
    if failures:
        names = ", ".join(str(task.repo) for task, _ in failures)
        raise CloneError(f"{len(failures)} of {len(tasks)} repos failed to clone: {names}")
