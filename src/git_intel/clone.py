import base64
import logging
import os
import shlex
import subprocess
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple

from rich.progress import Progress

from .config import AuthConfig, AuthMethod, CloneOptions
from .errors import CloneError
from .parser import RepoPair

logger = logging.getLogger(__name__)

OAUTH_USERNAME = "x-access-token"


@dataclass
class CloneTask:
    repo: RepoPair
    dest: Path
    options: CloneOptions = field(default_factory=CloneOptions)
    auth: Optional[AuthConfig] = None

    @property
    def auth_method(self) -> AuthMethod:
        return self.auth.method if self.auth else AuthMethod.AGENT

    def __str__(self) -> str:
        return f"{self.repo} -> {self.dest}"


def build_clone_command(task: CloneTask) -> Tuple[List[str], Dict[str, str]]:
    """Return the git command line and the environment to run it with.

    Credentials go through the environment, never through argv.
    """
    env = os.environ.copy()
    env["GIT_TERMINAL_PROMPT"] = "0"

    method = task.auth_method
    if method is AuthMethod.AGENT:
        if not env.get("SSH_AUTH_SOCK"):
            raise CloneError("SSH_AUTH_SOCK is not set, no ssh agent to authenticate with")
        url = task.repo.ssh_url
    elif method is AuthMethod.SSH_KEY:
        key = Path(task.auth.ssh_key).expanduser()
        if not key.is_file():
            raise CloneError(f"ssh key not found: {key}")
        env["GIT_SSH_COMMAND"] = f"ssh -i {shlex.quote(str(key))} -o IdentitiesOnly=yes"
        url = task.repo.ssh_url
    else:
        if method is AuthMethod.OAUTH:
            credentials = f"{OAUTH_USERNAME}:{task.auth.oauth_token}"
        else:
            credentials = f"{task.auth.username}:{task.auth.password}"
        encoded = base64.b64encode(credentials.encode()).decode()
        _add_git_config(env, "http.extraHeader", f"Authorization: Basic {encoded}")
        url = task.repo.https_url

    cmd = ["git", "clone"]
    options = task.options
    if options.branch:
        cmd += ["--branch", options.branch]
    if options.depth:
        cmd += ["--depth", str(options.depth)]
    if options.recurse:
        cmd.append("--recurse-submodules")
    cmd += [url, str(task.dest)]

    return cmd, env


def _add_git_config(env: Dict[str, str], key: str, value: str) -> None:
    index = int(env.get("GIT_CONFIG_COUNT", "0"))
    env[f"GIT_CONFIG_KEY_{index}"] = key
    env[f"GIT_CONFIG_VALUE_{index}"] = value
    env["GIT_CONFIG_COUNT"] = str(index + 1)


def clone_repo(task: CloneTask) -> None:
    cmd, env = build_clone_command(task)
    logger.debug(f"Running: {' '.join(cmd)} ({task.auth_method})")

    try:
        result = subprocess.run(cmd, env=env, capture_output=True, text=True)
    except FileNotFoundError as e:
        raise CloneError("git executable not found") from e

    if result.returncode != 0:
        raise CloneError(f"cloning {task.repo} failed: {result.stderr.strip()}")


def is_cloned(dest: Path) -> bool:
    return dest.is_dir() and any(dest.iterdir())


def clone_all(tasks: Sequence[CloneTask]) -> List[Tuple[CloneTask, CloneError]]:
    """Clone every task, carrying on past failures.

    Returns the failed tasks with their errors.
    """
    failures = []
    with Progress(transient=True) as progress:
        task_id = progress.add_task("cloning", total=len(tasks))
        for task in tasks:
            progress.update(task_id, description=str(task.repo))

            if is_cloned(task.dest):
                logger.info(f"{task.dest} already exists, skip {task.repo}")
            else:
                try:
                    clone_repo(task)
                except CloneError as e:
                    logger.error(str(e))
                    failures.append((task, e))
                else:
                    logger.info(f"cloned {task}")

            progress.advance(task_id)

    return failures
