from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Iterable, Optional

from mapping_portal.config import get_settings
from mapping_portal.exceptions import PersistenceError
from mapping_portal.services.client_mappings import reset_demo
from mapping_portal.services.git_publisher import GitPublisher
from mapping_portal.services.project_store import DbtProjectStore


def _parse_args(argv: Optional[Iterable[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Restore the baseline demo clients and delete every other client mapping file."
    )
    parser.add_argument("--yes", action="store_true", help="Confirm that client mapping files may be deleted.")
    parser.add_argument("--project-path", type=Path, help="dbt project root (defaults to DBT_PROJECT_PATH).")
    parser.add_argument("--no-git", action="store_true", help="Write files without committing or pushing.")
    return parser.parse_args(argv)


def main(argv: Optional[Iterable[str]] = None) -> int:
    args = _parse_args(argv)
    if not args.yes:
        print("Refusing to reset demo data without --yes.", file=sys.stderr)
        return 1

    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
    settings = get_settings()
    updates = {}
    if args.project_path is not None:
        updates["dbt_project_path"] = args.project_path
    if args.no_git:
        updates["git_enabled"] = False
    if updates:
        settings = settings.model_copy(update=updates)

    store = DbtProjectStore(settings)
    publisher = GitPublisher(
        settings.dbt_project_path,
        remote=settings.git_remote,
        branch=settings.git_branch,
        enabled=settings.git_enabled,
    )
    try:
        result = reset_demo(store, publisher)
    except PersistenceError as exc:
        print(f"Reset failed: {exc}", file=sys.stderr)
        return 1

    print("Demo data reset.")
    print(f"Remaining clients: {', '.join(result.remaining_clients)}")
    print(f"Deleted files: {', '.join(result.deleted_files) or 'none'}")
    if result.warning:
        print(f"Warning: {result.warning}", file=sys.stderr)
    return 0


if __name__ == "__main__":  # pragma: no cover - CLI entry point
    raise SystemExit(main())
