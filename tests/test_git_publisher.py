from __future__ import annotations

import subprocess
from pathlib import Path

import pytest

from mapping_portal.exceptions import PublishError
from mapping_portal.services.git_publisher import PUBLISH_WARNING, GitPublisher, publish_best_effort


class FakeCompletedProcess:
    def __init__(self, returncode: int = 0) -> None:
        self.returncode = returncode
        self.stdout = ""
        self.stderr = ""


def test_publish_adds_commits_and_pushes(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    commands = []

    def fake_run(cmd, **kwargs):
        commands.append((cmd, kwargs["cwd"]))
        assert kwargs["check"] is True
        return FakeCompletedProcess()

    monkeypatch.setattr(subprocess, "run", fake_run)

    publisher = GitPublisher(tmp_path, remote="upstream", branch="demo")
    publisher.publish(["models/staging/client_mappings/acme.yml", "dbt_project.yml"], "Add client mapping")

    assert [cmd for cmd, _ in commands] == [
        ["git", "add", "--all", "--", "models/staging/client_mappings/acme.yml", "dbt_project.yml"],
        ["git", "commit", "-m", "Add client mapping"],
        ["git", "push", "upstream", "demo"],
    ]
    assert all(cwd == tmp_path for _, cwd in commands)


def test_publish_stops_at_first_failure(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    commands = []

    def fake_run(cmd, **kwargs):
        commands.append(cmd)
        if cmd[1] == "commit":
            raise subprocess.CalledProcessError(1, cmd, stderr="nothing to commit")
        return FakeCompletedProcess()

    monkeypatch.setattr(subprocess, "run", fake_run)

    with pytest.raises(PublishError, match="nothing to commit"):
        GitPublisher(tmp_path).publish(["dbt_project.yml"], "message")
    assert len(commands) == 2


def test_missing_git_executable_is_a_publish_error(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    def fake_run(cmd, **kwargs):
        raise FileNotFoundError("git")

    monkeypatch.setattr(subprocess, "run", fake_run)

    assert publish_best_effort(GitPublisher(tmp_path), ["dbt_project.yml"], "message") == PUBLISH_WARNING


def test_disabled_publisher_never_runs_git(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    def fake_run(cmd, **kwargs):
        raise AssertionError("git should not run")

    monkeypatch.setattr(subprocess, "run", fake_run)

    assert publish_best_effort(GitPublisher(tmp_path, enabled=False), ["dbt_project.yml"], "message") is None
