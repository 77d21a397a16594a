from __future__ import annotations

import copy
import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Callable, Dict, List, Optional

from mapping_portal.constants.clients import BASELINE_CLIENT_FILES, BASELINE_CLIENT_MAPPINGS
from mapping_portal.exceptions import NotFoundError, PersistenceError
from mapping_portal.schemas.clients import ClientMappingRequest, ClientSummary
from mapping_portal.services.git_publisher import Publisher, publish_best_effort
from mapping_portal.services.mapping_renderer import ClientMappingRenderer
from mapping_portal.services.project_store import PROJECT_FILE_NAME, DbtProjectStore
from mapping_portal.services.record_merge import upsert_record

logger = logging.getLogger(__name__)

CLIENT_KEY_FIELD = "client_code"


@dataclass(frozen=True)
class ClientMappingResult:
    filename: str
    warning: Optional[str] = None


@dataclass(frozen=True)
class DemoResetResult:
    remaining_clients: List[str]
    deleted_files: List[str] = field(default_factory=list)
    warning: Optional[str] = None


def _client_mappings_section(document: Any) -> Dict[str, Any]:
    if not isinstance(document, dict):
        raise PersistenceError(f"{PROJECT_FILE_NAME} does not contain a mapping at its top level")
    vars_section = document.get("vars")
    if vars_section is None:
        vars_section = {}
        document["vars"] = vars_section
    if not isinstance(vars_section, dict):
        raise PersistenceError(f"'vars' in {PROJECT_FILE_NAME} is not a mapping")
    return vars_section


def _merge_client_entry(entry: Dict[str, Any]) -> Callable[[Any], None]:
    def mutate(document: Any) -> None:
        vars_section = _client_mappings_section(document)
        vars_section["client_mappings"] = upsert_record(
            vars_section.get("client_mappings"), CLIENT_KEY_FIELD, entry
        )

    return mutate


def list_clients(store: DbtProjectStore) -> List[ClientSummary]:
    clients: List[ClientSummary] = []
    for path in store.list_client_mapping_files():
        document = store.read_yaml(path, default={})
        client_config = (document.get("client_config") if isinstance(document, dict) else None) or {}
        created_at = client_config.get("created_at")
        clients.append(
            ClientSummary(
                id=path.stem,
                name=client_config.get("client_name") or path.stem,
                target_model=client_config.get("target_model") or "unknown",
                status="Active",
                last_updated=str(created_at) if created_at else date.today().isoformat(),
            )
        )
    return clients


def get_client_mapping(store: DbtProjectStore, client_code: str) -> Dict[str, Any]:
    path = store.client_mapping_file(client_code)
    if path.parent != store.client_mappings_dir or not path.is_file():
        raise NotFoundError(f"Client mapping '{client_code}' not found")
    document = store.read_yaml(path, default={})
    client_config = document.get("client_config") if isinstance(document, dict) else None
    if not client_config:
        raise NotFoundError(f"Client mapping file {path.name} has no client_config section")
    return client_config


def submit_client_mapping(
    store: DbtProjectStore,
    publisher: Publisher,
    request: ClientMappingRequest,
    *,
    renderer: Optional[ClientMappingRenderer] = None,
) -> ClientMappingResult:
    """Write the client's mapping file, upsert it into dbt_project.yml and publish both."""

    renderer = renderer or ClientMappingRenderer(created_by=store.settings.created_by_tag)
    config = request.config
    rendered = renderer.render(config, request.mappings)

    mapping_path = store.client_mappings_dir / rendered.filename
    store.write_text(mapping_path, rendered.content)
    store.update_yaml(store.project_file, _merge_client_entry(rendered.project_entry))
    logger.info(
        "Saved client mapping %s (%d field mappings)",
        config.client_code,
        len(rendered.project_entry["field_mappings"]),
    )

    message = (
        f"Add client mapping for {config.client_name}\n\n"
        f"- Client: {config.client_name} ({config.client_code})\n"
        f"- Target model: {config.target_model}\n"
        f"- Source: {config.source_table}\n"
        "- Created via Client Mapping Portal"
    )
    warning = publish_best_effort(
        publisher,
        [store.relative_path(mapping_path), PROJECT_FILE_NAME],
        message,
    )
    return ClientMappingResult(filename=rendered.filename, warning=warning)


def reset_demo(store: DbtProjectStore, publisher: Publisher) -> DemoResetResult:
    """Restore the baseline GLOBEX and WAYNE clients and delete every other mapping file.

    Unlike a submission this overwrites the whole client list. Deleted files
    are only recoverable from git history.
    """

    baseline = [copy.deepcopy(client) for client in BASELINE_CLIENT_MAPPINGS]
    extra_files = [path for path in store.list_client_mapping_files() if path.name not in BASELINE_CLIENT_FILES]

    def mutate(document: Any) -> None:
        _client_mappings_section(document)["client_mappings"] = baseline

    store.update_yaml(store.project_file, mutate)

    deleted_files: List[str] = []
    for path in extra_files:
        if store.delete_file(path):
            deleted_files.append(path.name)
    logger.info("Demo data reset; deleted %d client mapping files", len(deleted_files))

    remaining = [client["client_code"] for client in baseline]
    message = (
        "Reset demo data to base configuration\n\n"
        f"- Removed client mappings: {', '.join(deleted_files) or 'none'}\n"
        f"- Kept base clients: {', '.join(remaining)}"
    )
    warning = publish_best_effort(
        publisher,
        [PROJECT_FILE_NAME, store.relative_path(store.client_mappings_dir)],
        message,
    )
    return DemoResetResult(remaining_clients=remaining, deleted_files=deleted_files, warning=warning)


__all__ = [
    "ClientMappingResult",
    "DemoResetResult",
    "get_client_mapping",
    "list_clients",
    "reset_demo",
    "submit_client_mapping",
]
