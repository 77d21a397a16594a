from __future__ import annotations

import copy
import logging
import os
import tempfile
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Callable, Dict, Iterator, List, Optional, TypeVar

import yaml

from mapping_portal.config import Settings
from mapping_portal.exceptions import PersistenceError

logger = logging.getLogger(__name__)

PROJECT_FILE_NAME = "dbt_project.yml"

T = TypeVar("T")

_document_locks: Dict[str, threading.Lock] = {}
_document_locks_guard = threading.Lock()


def _lock_for(path: Path) -> threading.Lock:
    key = str(path.resolve())
    with _document_locks_guard:
        lock = _document_locks.get(key)
        if lock is None:
            lock = threading.Lock()
            _document_locks[key] = lock
        return lock


def dump_yaml(document: Any) -> str:
    """Serialize a document the same way every time: key order kept, no line wrapping."""

    return yaml.safe_dump(
        document,
        sort_keys=False,
        default_flow_style=False,
        allow_unicode=True,
        width=float("inf"),
    )


class DbtProjectStore:
    """Read and write the configuration files of the external dbt project.

    Every read-modify-write of a single document runs under a lock keyed by the
    document path so concurrent requests in this process cannot drop each
    other's updates. Writes replace the file atomically.
    """

    def __init__(self, settings: Settings) -> None:
        self.settings = settings
        self.root = Path(settings.dbt_project_path)

    # ------------------------------------------------------------------
    # Paths

    @property
    def project_file(self) -> Path:
        return self.root / PROJECT_FILE_NAME

    @property
    def client_mappings_dir(self) -> Path:
        return self.root / self.settings.client_mappings_dir

    @property
    def seeds_root(self) -> Path:
        return self.root / "seeds"

    @property
    def platform_models_dir(self) -> Path:
        return self.root / self.settings.platform_models_dir

    @property
    def platform_schema_file(self) -> Path:
        return self.platform_models_dir / self.settings.platform_schema_file

    def client_mapping_filename(self, client_code: str) -> str:
        return f"{client_code.lower()}.yml"

    def client_mapping_file(self, client_code: str) -> Path:
        return self.client_mappings_dir / self.client_mapping_filename(client_code)

    def platform_model_file(self, model_name: str) -> Path:
        return self.platform_models_dir / f"{model_name}.sql"

    def relative_path(self, path: Path) -> str:
        return Path(path).relative_to(self.root).as_posix()

    # ------------------------------------------------------------------
    # Documents

    def read_yaml(self, path: Path, default: Optional[Any] = None) -> Any:
        if not path.exists():
            if default is not None:
                return copy.deepcopy(default)
            raise PersistenceError(f"Configuration file {path} does not exist")
        try:
            content = path.read_text(encoding="utf-8")
            document = yaml.safe_load(content)
        except (OSError, yaml.YAMLError) as exc:
            raise PersistenceError(f"Failed to read {path}: {exc}") from exc
        if document is None and default is not None:
            return copy.deepcopy(default)
        return document

    def write_yaml(self, path: Path, document: Any) -> None:
        self.write_text(path, dump_yaml(document))

    def write_text(self, path: Path, content: str) -> None:
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            descriptor, temp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=path.parent)
            try:
                with os.fdopen(descriptor, "w", encoding="utf-8") as handle:
                    handle.write(content)
                os.replace(temp_name, path)
            except BaseException:
                if os.path.exists(temp_name):
                    os.unlink(temp_name)
                raise
        except OSError as exc:
            raise PersistenceError(f"Failed to write {path}: {exc}") from exc
        logger.debug("Wrote %s", path)

    def update_yaml(
        self,
        path: Path,
        mutate: Callable[[Any], T],
        *,
        default: Optional[Any] = None,
    ) -> T:
        """Read ``path``, apply ``mutate`` to the loaded document in place, write it back."""

        with self.document_lock(path):
            document = self.read_yaml(path, default=default)
            result = mutate(document)
            self.write_yaml(path, document)
            return result

    @contextmanager
    def document_lock(self, path: Path) -> Iterator[None]:
        lock = _lock_for(path)
        with lock:
            yield

    def delete_file(self, path: Path) -> bool:
        try:
            path.unlink()
        except FileNotFoundError:
            return False
        except OSError as exc:
            raise PersistenceError(f"Failed to delete {path}: {exc}") from exc
        logger.info("Deleted %s", path)
        return True

    def list_client_mapping_files(self) -> List[Path]:
        directory = self.client_mappings_dir
        if not directory.is_dir():
            raise PersistenceError(f"Client mappings directory {directory} does not exist")
        return sorted(path for path in directory.iterdir() if path.is_file() and path.suffix == ".yml")


__all__ = ["DbtProjectStore", "PROJECT_FILE_NAME", "dump_yaml"]
