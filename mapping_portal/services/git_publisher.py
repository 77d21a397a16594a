from __future__ import annotations

import logging
import subprocess
from pathlib import Path
from typing import List, Optional, Protocol, Sequence

from mapping_portal.exceptions import PublishError

logger = logging.getLogger(__name__)

PUBLISH_WARNING = "Could not commit to git"


class Publisher(Protocol):
    def publish(self, paths: Sequence[str], message: str) -> None:
        ...


class GitPublisher:
    """Stage, commit and push files inside the dbt project repository."""

    def __init__(
        self,
        repo_path: Path,
        *,
        remote: str = "origin",
        branch: str = "main",
        enabled: bool = True,
    ) -> None:
        self.repo_path = Path(repo_path)
        self.remote = remote
        self.branch = branch
        self.enabled = enabled

    def publish(self, paths: Sequence[str], message: str) -> None:
        if not self.enabled:
            logger.info("Git publishing disabled; skipping commit of %s", ", ".join(paths))
            return
        self._run(["git", "add", "--all", "--", *paths])
        self._run(["git", "commit", "-m", message])
        logger.info("Pushing to %s/%s", self.remote, self.branch)
        self._run(["git", "push", self.remote, self.branch])
        logger.info("Pushed to %s/%s", self.remote, self.branch)

    def _run(self, cmd: List[str]) -> None:
        try:
            subprocess.run(
                cmd,
                cwd=self.repo_path,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                text=True,
                check=True,
            )
        except subprocess.CalledProcessError as exc:
            stderr = (exc.stderr or "").strip()
            raise PublishError(f"'{' '.join(cmd[:2])}' exited with {exc.returncode}: {stderr}") from exc
        except FileNotFoundError as exc:
            raise PublishError("git executable not found") from exc


def publish_best_effort(publisher: Publisher, paths: Sequence[str], message: str) -> Optional[str]:
    """Publish ``paths`` and return a warning string instead of raising on failure.

    The files are already written when this runs, so a git failure must not
    turn a saved configuration into a failed request.
    """

    try:
        publisher.publish(paths, message)
    except PublishError as exc:
        logger.warning("Git publish failed: %s", exc)
        return PUBLISH_WARNING
    return None


__all__ = ["GitPublisher", "PUBLISH_WARNING", "Publisher", "publish_best_effort"]
