"""
Core conversion dispatch for the /convert endpoints.

This module sends an accepted upload to the remote conversion endpoint and
wraps the converted bytes in a DownloadHandle. The remote service does the
actual transcoding; nothing is converted locally.
"""

import logging
from typing import Callable, Optional, Union

import httpx

from ..config import OUTPUT_CONTENT_TYPES, ConversionQuality, OutputFormat, get_settings
from ..models import DownloadHandle, UploadedFile, replace_extension
from .conversion_lookup import get_allowed_outputs, normalize_output_format
from .error_handling import ConversionFailedError, FormatNotAllowedError

# Set up logging
logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int], None]

_DEFAULT = object()


def get_output_content_type(output_format: OutputFormat) -> str:
    return OUTPUT_CONTENT_TYPES.get(output_format, "application/octet-stream")


def check_output_format(canonical_type: str, output_format: Union[OutputFormat, str]) -> OutputFormat:
    """
    Validate an output format against the table entry for a type.

    Args:
        canonical_type: Resolved input type
        output_format: Requested output format or token

    Returns:
        The normalized OutputFormat

    Raises:
        FormatNotAllowedError: If the format is unknown or not offered for the type
    """
    fmt = normalize_output_format(output_format.value if isinstance(output_format, OutputFormat) else output_format)
    allowed = get_allowed_outputs(canonical_type)
    if fmt is None or fmt not in allowed:
        raise FormatNotAllowedError(
            f"Cannot convert {canonical_type} to {output_format}",
            details={
                "input_type": canonical_type,
                "output_format": str(getattr(output_format, "value", output_format)),
                "allowed_outputs": [f.value for f in allowed],
            }
        )
    return fmt


async def _read_body(response: httpx.Response, progress_callback: Optional[ProgressCallback]) -> bytes:
    """Read a streamed response body, reporting download progress when asked."""
    if progress_callback is None:
        return await response.aread()

    total = int(response.headers.get("content-length", 0) or 0)
    chunks = []
    received = 0
    last_reported = -1
    async for chunk in response.aiter_bytes():
        chunks.append(chunk)
        received += len(chunk)
        if total:
            percent = min(100, received * 100 // total)
            if percent != last_reported:
                progress_callback(percent)
                last_reported = percent
    if last_reported != 100:
        progress_callback(100)
    return b"".join(chunks)


async def dispatch(
    upload: UploadedFile,
    canonical_type: str,
    output_format: Union[OutputFormat, str],
    quality: Union[ConversionQuality, str] = ConversionQuality.BALANCED,
    *,
    client: httpx.AsyncClient,
    endpoint: Optional[str] = None,
    quality_param=_DEFAULT,
    progress_callback: Optional[ProgressCallback] = None
) -> DownloadHandle:
    """
    Send one upload to the conversion endpoint.

    Args:
        upload: Accepted upload, including its bytes
        canonical_type: Type the upload resolved to
        output_format: Target format; must be allowed for canonical_type
        quality: Quality hint for the remote service
        client: HTTP client used for the single outbound request
        endpoint: Conversion endpoint (defaults to the configured URL)
        quality_param: Query parameter name for the quality hint (None to omit)
        progress_callback: Called with download percentages while the result streams in

    Returns:
        DownloadHandle wrapping the converted bytes

    Raises:
        FormatNotAllowedError: Before any network call, if the format is not allowed
        ConversionFailedError: On transport errors, non-2xx responses or an empty body
    """
    fmt = check_output_format(canonical_type, output_format)
    quality = ConversionQuality(quality)

    settings = get_settings()
    endpoint = endpoint or settings.conversion_url
    if quality_param is _DEFAULT:
        quality_param = settings.quality_param

    params = {"from": canonical_type, "to": fmt.value}
    if quality_param:
        params[quality_param] = quality.value

    files = {"file": (upload.name, upload.content, canonical_type)}

    logger.info(f"Dispatching {upload.name} ({upload.size_label}) {canonical_type} -> {fmt.value}")

    try:
        async with client.stream("POST", endpoint, params=params, files=files) as response:
            if not response.is_success:
                await response.aread()
                raise ConversionFailedError(
                    "Conversion failed",
                    upstream_status=response.status_code,
                    details={"upstream_status": response.status_code}
                )
            content = await _read_body(response, progress_callback)
            response_type = response.headers.get("content-type", "")
    except httpx.HTTPError as e:
        logger.error(f"Conversion request for {upload.name} failed: {e}")
        raise ConversionFailedError("Conversion failed", details={"reason": type(e).__name__}) from e

    if not content:
        raise ConversionFailedError("Conversion returned an empty file")

    content_type = response_type.split(";")[0].strip() or get_output_content_type(fmt)
    handle = DownloadHandle(
        filename=replace_extension(upload.name, fmt.value),
        content_type=content_type,
        content=content
    )
    logger.info(f"Converted {upload.name} -> {handle.filename} ({handle.size} bytes)")
    return handle
