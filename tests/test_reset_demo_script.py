from __future__ import annotations

import subprocess
from pathlib import Path

import pytest
import yaml

from scripts.reset_demo import main as reset_main


def test_reset_demo_requires_yes(project_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    extra = project_path / "models" / "staging" / "client_mappings" / "acme.yml"
    extra.write_text("version: 2\n", encoding="utf-8")

    result = reset_main(["--project-path", str(project_path), "--no-git"])

    assert result == 1
    assert extra.exists()
    assert "--yes" in capsys.readouterr().err


def test_reset_demo_deletes_extra_clients(
    project_path: Path,
    monkeypatch: pytest.MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
) -> None:
    def fake_run(cmd, **kwargs):
        raise AssertionError("git should not run with --no-git")

    monkeypatch.setattr(subprocess, "run", fake_run)
    mappings_dir = project_path / "models" / "staging" / "client_mappings"
    baseline_bytes = {name: (mappings_dir / name).read_bytes() for name in ("globex.yml", "wayne.yml")}
    for name in ("acme.yml", "initech.yml", "umbrella.yml"):
        (mappings_dir / name).write_text("version: 2\n", encoding="utf-8")

    result = reset_main(["--yes", "--project-path", str(project_path), "--no-git"])

    assert result == 0
    assert sorted(path.name for path in mappings_dir.iterdir()) == ["globex.yml", "wayne.yml"]
    for name, content in baseline_bytes.items():
        assert (mappings_dir / name).read_bytes() == content
    project = yaml.safe_load((project_path / "dbt_project.yml").read_text(encoding="utf-8"))
    assert [entry["client_code"] for entry in project["vars"]["client_mappings"]] == ["GLOBEX", "WAYNE"]
    output = capsys.readouterr().out
    assert "Remaining clients: GLOBEX, WAYNE" in output
    assert "Deleted files: acme.yml, initech.yml, umbrella.yml" in output


def test_reset_demo_fails_for_missing_project(tmp_path: Path) -> None:
    result = reset_main(["--yes", "--project-path", str(tmp_path / "nowhere"), "--no-git"])

    assert result == 1
