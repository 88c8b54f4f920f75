"""
Conversion router for the /convert endpoints.

The endpoints follow the upload, configure, convert and download steps of
the front end. Each client's progress lives in a ConversionSession selected
by the X-Reformat-Session header.
"""

from fastapi import APIRouter, UploadFile, File, Request, Form, Query, Header
from fastapi.responses import StreamingResponse, JSONResponse
import logging
from typing import Optional
from io import BytesIO
from urllib.parse import quote

from .config import ConversionQuality
from .models import DownloadHandle, UploadedFile
from .session import ConversionSession
from .utils.conversion_lookup import get_supported_conversions, lookup
from .utils.error_handling import ErrorCode, NotFoundError, create_http_exception

# Set up logging
logger = logging.getLogger(__name__)

SESSION_HEADER = "X-Reformat-Session"

# Create router
router = APIRouter(prefix="/convert", tags=["conversions"])


def _get_session(request: Request, session_id: Optional[str]) -> ConversionSession:
    return request.app.state.sessions.get(session_id or "default")


def _parse_quality(quality: str) -> ConversionQuality:
    try:
        return ConversionQuality(quality.lower())
    except ValueError:
        raise create_http_exception(
            ErrorCode.INVALID_REQUEST,
            details=f"Unknown quality '{quality}'. Expected one of: {[q.value for q in ConversionQuality]}"
        )


async def _read_upload(session: ConversionSession, file: UploadFile) -> UploadedFile:
    """Read an upload into memory, rejecting oversized files before any bytes are read."""
    name = file.filename or ""
    declared_type = file.content_type or ""
    if file.size is not None:
        session.check_size(UploadedFile(name=name, declared_type=declared_type, byte_size=file.size))
    content = await file.read()
    return UploadedFile(name=name, declared_type=declared_type, content=content)


async def _convert(request: Request, session: ConversionSession):
    settings = request.app.state.settings
    return await session.convert(
        request.app.state.client,
        settings.conversion_url,
        quality_param=settings.quality_param
    )


def content_disposition(filename: str) -> str:
    """
    Build an attachment header value for any file name.

    Header values must be latin-1, so non-ASCII names get an ASCII
    ``filename`` fallback plus an RFC 5987 ``filename*`` parameter.
    """
    fallback = "".join(c if 32 <= ord(c) < 127 and c not in '"\\' else "_" for c in filename)
    value = f'attachment; filename="{fallback}"'
    if fallback != filename:
        value += f"; filename*=UTF-8''{quote(filename, safe='')}"
    return value


def _download_response(handle: DownloadHandle, attempt_id: str) -> StreamingResponse:
    return StreamingResponse(
        BytesIO(handle.content),
        media_type=handle.content_type,
        headers={
            "Content-Disposition": content_disposition(handle.filename),
            "X-Conversion-Id": attempt_id,
        }
    )


#-- Format table
#-------------------------------------------------------------------------------
@router.get("/supported")
async def get_supported_conversions_endpoint():
    """Get every supported input type with its icon, description and output formats"""
    return JSONResponse(content={
        "supported_conversions": get_supported_conversions()
    })


@router.get("/formats")
async def get_formats_endpoint(type: str = Query(..., description="Canonical input type")):
    """Get the profile of one input type"""
    profile = lookup(type)
    if profile is None:
        raise NotFoundError(f"Unsupported file type: {type}", details={"detected_type": type})
    return JSONResponse(content={"type": type, **profile.to_dict()})


#-- Step endpoints
#-------------------------------------------------------------------------------
@router.post("/detect")
async def detect_file_type(
    request: Request,
    file: UploadFile = File(...),
    session_id: Optional[str] = Header(None, alias=SESSION_HEADER)
):
    """Validate an upload and remember it as the session's selected file"""
    session = _get_session(request, session_id)
    upload = await _read_upload(session, file)
    canonical_type = session.select_file(upload)
    profile = lookup(canonical_type)

    return JSONResponse(content={
        "filename": upload.name,
        "type": canonical_type,
        "size": upload.size_label,
        "byte_size": upload.byte_size,
        **profile.to_dict(),
        "session": session.to_dict(),
    })


@router.post("/run")
async def run_conversion(
    request: Request,
    output_format: str = Form(...),
    quality: str = Form(ConversionQuality.BALANCED.value),
    session_id: Optional[str] = Header(None, alias=SESSION_HEADER)
):
    """Convert the session's selected file to output_format"""
    session = _get_session(request, session_id)
    session.choose_output(output_format, _parse_quality(quality))
    attempt = await _convert(request, session)

    return JSONResponse(content={
        "attempt": attempt.to_dict(),
        "download_url": str(request.url_for("download_converted_file", attempt_id=attempt.id)),
        "download": session.get_download(attempt.id).to_dict(),
    })


@router.post("/reset")
async def reset_session(
    request: Request,
    session_id: Optional[str] = Header(None, alias=SESSION_HEADER)
):
    """Clear the selected file so another one can be converted"""
    session = _get_session(request, session_id)
    session.reset()
    return JSONResponse(content={"session": session.to_dict()})


@router.get("/history")
async def get_history(
    request: Request,
    session_id: Optional[str] = Header(None, alias=SESSION_HEADER)
):
    """Get the session's conversion attempts, newest first"""
    session = _get_session(request, session_id)
    return JSONResponse(content={
        "conversions": [attempt.to_dict() for attempt in session.attempts]
    })


#-- Downloads
#-------------------------------------------------------------------------------
@router.get("/download/{attempt_id}", name="download_converted_file")
async def download_converted_file(
    request: Request,
    attempt_id: str,
    session_id: Optional[str] = Header(None, alias=SESSION_HEADER)
):
    """Stream the converted file of a completed attempt"""
    session = _get_session(request, session_id)
    return _download_response(session.get_download(attempt_id), attempt_id)


@router.delete("/download/{attempt_id}")
async def release_converted_file(
    request: Request,
    attempt_id: str,
    session_id: Optional[str] = Header(None, alias=SESSION_HEADER)
):
    """Discard the converted file of an attempt"""
    session = _get_session(request, session_id)
    session.release_download(attempt_id)
    return JSONResponse(content={"released": attempt_id})


#-- One-shot {output_format} converter
#-------------------------------------------------------------------------------
@router.post("/{output_format}")
async def convert_dynamic(
    request: Request,
    output_format: str,
    file: UploadFile = File(...),
    quality: str = Form(ConversionQuality.BALANCED.value),
    session_id: Optional[str] = Header(None, alias=SESSION_HEADER)
):
    """Validate, convert and return a file in a single request"""
    session = _get_session(request, session_id)
    upload = await _read_upload(session, file)
    session.select_file(upload)
    session.choose_output(output_format, _parse_quality(quality))
    attempt = await _convert(request, session)

    try:
        return _download_response(session.get_download(attempt.id), attempt.id)
    finally:
        session.release_download(attempt.id)
