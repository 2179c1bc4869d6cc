"""Scan endpoints — analyze an uploaded box photo, export devices as CSV."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile
from fastapi.responses import Response

from imei_scanner.core.feature_flags import ensure_vision_ai_enabled
from imei_scanner.core.image_processing import ScanRequest
from imei_scanner.schemas.scan import ExportRequest, ScanResponse
from imei_scanner.services.ai.vision.service import scan_image
from imei_scanner.services.export import devices_to_csv, export_filename

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post(
    "/scan",
    response_model=ScanResponse,
    response_model_by_alias=True,
    summary="Detect devices and IMEIs on a photo of device boxes",
    dependencies=[Depends(ensure_vision_ai_enabled)],
)
async def scan_endpoint(
    file: UploadFile = File(...),
    override_provider: str | None = Form(default=None),
    override_model: str | None = Form(default=None),
):
    content = await file.read()
    request = ScanRequest(
        content=content,
        content_type=file.content_type,
        filename=file.filename,
    )
    outcome = await scan_image(
        request,
        override_provider=override_provider,
        override_model=override_model,
    )
    logger.info("Scan of %s finished: %s", file.filename, outcome.kind)
    return ScanResponse.from_outcome(outcome)


@router.post(
    "/scan/export",
    summary="Download scanned devices as CSV",
    response_class=Response,
)
def export_endpoint(body: ExportRequest):
    if not body.devices:
        raise HTTPException(400, "No devices to export")

    headers = {"Content-Disposition": f'attachment; filename="{export_filename()}"'}
    return Response(
        content=devices_to_csv(body.devices),
        media_type="text/csv; charset=utf-8",
        headers=headers,
    )
