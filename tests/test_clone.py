"""Tests for clone operations."""

import base64
import subprocess
from unittest.mock import patch

import pytest

from git_intel.clone import CloneTask, build_clone_command, clone_all, clone_repo
from git_intel.config import AuthConfig, AuthMethod, CloneOptions
from git_intel.errors import CloneError
from git_intel.parser import RepoPair

WIDGET = RepoPair("acme", "widget")


@pytest.fixture
def agent(monkeypatch):
    monkeypatch.setenv("SSH_AUTH_SOCK", "/tmp/ssh-agent.sock")
    monkeypatch.delenv("GIT_CONFIG_COUNT", raising=False)


def _basic_header(env):
    assert env["GIT_CONFIG_COUNT"] == "1"
    assert env["GIT_CONFIG_KEY_0"] == "http.extraHeader"
    prefix = "Authorization: Basic "
    value = env["GIT_CONFIG_VALUE_0"]
    assert value.startswith(prefix)
    return base64.b64decode(value[len(prefix):]).decode()


class TestBuildCloneCommand:
    """Tests for build_clone_command."""

    def test_agent_uses_ssh_url(self, agent, tmp_path):
        task = CloneTask(WIDGET, tmp_path / "widget")
        cmd, env = build_clone_command(task)

        assert cmd == ["git", "clone", "git@github.com:acme/widget.git", str(tmp_path / "widget")]
        assert env["GIT_TERMINAL_PROMPT"] == "0"
        assert task.auth_method is AuthMethod.AGENT

    def test_agent_requires_socket(self, monkeypatch, tmp_path):
        monkeypatch.delenv("SSH_AUTH_SOCK", raising=False)
        with pytest.raises(CloneError) as exc:
            build_clone_command(CloneTask(WIDGET, tmp_path / "widget"))
        assert "SSH_AUTH_SOCK" in str(exc.value)

    def test_clone_options(self, agent, tmp_path):
        options = CloneOptions(branch="main", depth=1, recurse=True)
        cmd, _ = build_clone_command(CloneTask(WIDGET, tmp_path / "widget", options))
        assert cmd[:8] == [
            "git", "clone", "--branch", "main", "--depth", "1", "--recurse-submodules",
            "git@github.com:acme/widget.git",
        ]

    def test_ssh_key(self, agent, tmp_path):
        key = tmp_path / "id_ed25519"
        key.write_text("key")
        task = CloneTask(WIDGET, tmp_path / "widget", auth=AuthConfig(ssh_key=str(key)))

        cmd, env = build_clone_command(task)

        assert "git@github.com:acme/widget.git" in cmd
        assert env["GIT_SSH_COMMAND"] == f"ssh -i {key} -o IdentitiesOnly=yes"

    def test_missing_ssh_key(self, agent, tmp_path):
        task = CloneTask(WIDGET, tmp_path / "widget", auth=AuthConfig(ssh_key=str(tmp_path / "nope")))
        with pytest.raises(CloneError):
            build_clone_command(task)

    def test_basic_auth_stays_out_of_argv(self, agent, tmp_path):
        auth = AuthConfig(username="someone", password="s3cret")
        cmd, env = build_clone_command(CloneTask(WIDGET, tmp_path / "widget", auth=auth))

        assert "https://github.com/acme/widget.git" in cmd
        assert not any("s3cret" in arg for arg in cmd)
        assert _basic_header(env) == "someone:s3cret"

    def test_oauth_token(self, agent, tmp_path):
        auth = AuthConfig(oauth_token="gho_token")
        cmd, env = build_clone_command(CloneTask(WIDGET, tmp_path / "widget", auth=auth))

        assert "https://github.com/acme/widget.git" in cmd
        assert _basic_header(env) == "x-access-token:gho_token"

    def test_appends_to_existing_git_config(self, agent, monkeypatch, tmp_path):
        monkeypatch.setenv("GIT_CONFIG_COUNT", "1")
        monkeypatch.setenv("GIT_CONFIG_KEY_0", "safe.directory")
        monkeypatch.setenv("GIT_CONFIG_VALUE_0", "*")
        auth = AuthConfig(oauth_token="gho_token")

        _, env = build_clone_command(CloneTask(WIDGET, tmp_path / "widget", auth=auth))

        assert env["GIT_CONFIG_COUNT"] == "2"
        assert env["GIT_CONFIG_KEY_0"] == "safe.directory"
        assert env["GIT_CONFIG_KEY_1"] == "http.extraHeader"


class TestCloneRepo:
    """Tests for clone_repo."""

    def test_success(self, agent, tmp_path):
        done = subprocess.CompletedProcess([], 0, "", "")
        with patch("git_intel.clone.subprocess.run", return_value=done) as run:
            clone_repo(CloneTask(WIDGET, tmp_path / "widget"))
        cmd = run.call_args.args[0]
        assert cmd[:2] == ["git", "clone"]

    def test_failure_raises_error(self, agent, tmp_path):
        failed = subprocess.CompletedProcess([], 128, "", "fatal: repository not found\n")
        with patch("git_intel.clone.subprocess.run", return_value=failed):
            with pytest.raises(CloneError) as exc:
                clone_repo(CloneTask(WIDGET, tmp_path / "widget"))
        assert "repository not found" in str(exc.value)

    def test_missing_git(self, agent, tmp_path):
        with patch("git_intel.clone.subprocess.run", side_effect=FileNotFoundError("git")):
            with pytest.raises(CloneError):
                clone_repo(CloneTask(WIDGET, tmp_path / "widget"))


class TestCloneAll:
    """Tests for clone_all."""

    def test_continues_past_failures(self, tmp_path):
        tasks = [
            CloneTask(RepoPair("acme", name), tmp_path / name)
            for name in ("one", "two", "three")
        ]

        def fake_clone(task):
            if task.repo.repo == "two":
                raise CloneError("cloning acme/two failed: boom")

        with patch("git_intel.clone.clone_repo", side_effect=fake_clone) as clone:
            failures = clone_all(tasks)

        assert clone.call_count == 3
        assert [(task.repo.repo, str(error)) for task, error in failures] == [
            ("two", "cloning acme/two failed: boom"),
        ]

    def test_skips_existing_checkout(self, tmp_path):
        existing = tmp_path / "widget"
        existing.mkdir()
        (existing / ".git").mkdir()
        tasks = [CloneTask(WIDGET, existing), CloneTask(RepoPair("acme", "gadget"), tmp_path / "gadget")]

        with patch("git_intel.clone.clone_repo") as clone:
            assert clone_all(tasks) == []

        clone.assert_called_once_with(tasks[1])

    def test_empty_directory_is_cloned_into(self, tmp_path):
        empty = tmp_path / "widget"
        empty.mkdir()
        with patch("git_intel.clone.clone_repo") as clone:
            clone_all([CloneTask(WIDGET, empty)])
        clone.assert_called_once()
