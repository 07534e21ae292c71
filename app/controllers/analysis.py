"""Media analysis endpoints.

`POST /analyze` and `POST /analyze-audio` validate the upload, then hand it
to `app.pipelines.analysis.AnalysisOrchestrator`, which materializes the file,
submits it to the matching backend, collects the result and removes every
scratch artifact before the response is built here.
"""

import logging
from typing import Optional

from fastapi import APIRouter, File, Request, UploadFile
from fastapi.responses import JSONResponse

from app.controllers.dependencies import OrchestratorDep
from app.domain import ErrorKind, Failed, MediaKind, UploadValidationError
from app.pipelines.analysis import AnalysisOrchestrator, read_upload
from app.views import ErrorResponse, build_error_response, status_code_for

router = APIRouter(tags=["analysis"])

logger = logging.getLogger(__name__)

_ERROR_RESPONSES = {
    400: {"model": ErrorResponse},
    500: {"model": ErrorResponse},
}

_IMAGE_UPLOAD = File(None)
_AUDIO_UPLOAD = File(None)


@router.post("/analyze", responses=_ERROR_RESPONSES)
async def analyze_image(
    request: Request,
    orchestrator: OrchestratorDep,
    image: Optional[UploadFile] = _IMAGE_UPLOAD,
) -> JSONResponse:
    """Run an uploaded image through the image backend and return its result."""
    return await _analyze(request, orchestrator, MediaKind.IMAGE, image)


@router.post(
    "/analyze-audio",
    responses={**_ERROR_RESPONSES, 504: {"model": ErrorResponse}},
)
async def analyze_audio(
    request: Request,
    orchestrator: OrchestratorDep,
    audio: Optional[UploadFile] = _AUDIO_UPLOAD,
) -> JSONResponse:
    """Run an uploaded recording through the audio backend and return the first result."""
    return await _analyze(request, orchestrator, MediaKind.AUDIO, audio)


async def _analyze(
    request: Request,
    orchestrator: AnalysisOrchestrator,
    kind: MediaKind,
    upload: Optional[UploadFile],
) -> JSONResponse:
    try:
        data = await read_upload(upload, kind)
    except UploadValidationError as exc:
        logger.info("Rejected %s upload: %s", kind.value, exc)
        return _error_response(kind, ErrorKind.VALIDATION, str(exc))

    analysis = await orchestrator.run(
        kind,
        data,
        upload.filename,
        should_abort=request.is_disconnected,
    )

    outcome = analysis.outcome
    if isinstance(outcome, Failed):
        return _error_response(kind, outcome.error_kind, outcome.message)
    return JSONResponse(content=outcome.result)


def _error_response(kind: MediaKind, error_kind: ErrorKind, message: str) -> JSONResponse:
    body = build_error_response(kind, error_kind, message)
    return JSONResponse(status_code=status_code_for(error_kind), content=body.model_dump())
