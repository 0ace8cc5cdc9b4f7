"""
POST /reports/preview
======================
Builds a report from a JSON request and returns the finalized payload
without delivering it anywhere. Useful for checking what a given set of
attributes, annotations and symbolication options turns into.

Safety:
    - Disabled by default (requires FAULTLINE_ENABLE_PREVIEW_ENDPOINT=true)
    - Shape errors in attributes / annotations / symbol map → 422
    - The server's environment variables are stripped from the response
"""
import logging
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel

from faultline.core.config import ENABLE_PREVIEW_ENDPOINT
from faultline.core.constants import ENVIRONMENT_ANNOTATION
from faultline.core.errors import ValidationError
from faultline.report.builder import ReportBuilder

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/reports", tags=["Reports"])

_PREVIEW_ENABLED = ENABLE_PREVIEW_ENDPOINT


class PreviewRequest(BaseModel):
    message: str = ""
    attributes: Dict[str, Any] = {}
    annotations: Dict[str, Any] = {}
    symbolication: bool = False
    symbolication_map: Optional[List[Dict[str, Any]]] = None
    tab_width: Optional[int] = None
    context_line_count: Optional[int] = None


@router.post("/preview")
async def preview_report(request: PreviewRequest):
    if not _PREVIEW_ENABLED:
        raise HTTPException(status_code=404, detail="Not Found")

    try:
        builder = ReportBuilder(request.message, request.attributes)
        for key, value in request.annotations.items():
            builder.add_annotation(key, value)
        builder.set_symbolication(request.symbolication)
        if request.symbolication_map is not None:
            builder.set_symbolication_map(request.symbolication_map)
        if request.tab_width is not None or request.context_line_count is not None:
            builder.set_source_code_options(
                builder.tab_width if request.tab_width is None else request.tab_width,
                builder.context_line_count if request.context_line_count is None else request.context_line_count,
            )
    except ValidationError as e:
        logger.info("Rejected preview request: %s", e)
        raise HTTPException(status_code=422, detail=str(e))

    payload = await builder.finalize()
    data = payload.to_dict()
    if ENVIRONMENT_ANNOTATION not in request.annotations:
        data["annotations"].pop(ENVIRONMENT_ANNOTATION, None)
    return data
