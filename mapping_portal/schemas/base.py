from __future__ import annotations

from typing import Annotated, Optional

from pydantic import BaseModel, BeforeValidator, ConfigDict


def _strip_text(value):
    if isinstance(value, str):
        stripped = value.strip()
        return stripped or None
    return value


# Blank strings from the wizard forms count as "not provided".
OptionalText = Annotated[Optional[str], BeforeValidator(_strip_text)]


class AliasedModel(BaseModel):
    """Base model accepting both camelCase aliases and python field names."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore", protected_namespaces=())


class OperationResponse(AliasedModel):
    success: bool = True
    message: str
    warning: Optional[str] = None
