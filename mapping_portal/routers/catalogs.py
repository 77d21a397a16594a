from __future__ import annotations

from typing import Any, Dict, List

from fastapi import APIRouter

from mapping_portal.constants.clients import TARGET_MODELS, TRANSFORM_FUNCTIONS
from mapping_portal.schemas.clients import ExpressionPreviewResponse, FieldMapping
from mapping_portal.services.expression_builder import build_expression

router = APIRouter(tags=["Catalogs"])


@router.get("/target-models")
def read_target_models() -> Dict[str, Any]:
    return TARGET_MODELS


@router.get("/transform-functions")
def read_transform_functions() -> List[Dict[str, str]]:
    return list(TRANSFORM_FUNCTIONS)


@router.post("/expressions/preview", response_model=ExpressionPreviewResponse)
def preview_expression(mapping: FieldMapping) -> ExpressionPreviewResponse:
    return ExpressionPreviewResponse(expression=build_expression(mapping))
