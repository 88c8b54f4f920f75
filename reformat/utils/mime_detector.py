"""
Upload type resolution.

This module decides which canonical type an uploaded file has, using the
content type the client declared and falling back to the file extension.
A file that does not resolve to a key of the format table is rejected, as is
any file over the size ceiling.
"""

import logging
from typing import Optional, Tuple

from ..config import EXTENSION_MIME_MAP, FILE_TYPE_CONFIGS, GENERIC_CONTENT_TYPES, get_settings
from ..models import UploadedFile, format_file_size
from .error_handling import FileTooLargeError, ReformatError, UnsupportedTypeError

# Set up logging
logger = logging.getLogger(__name__)


class MimeTypeDetector:
    """
    Resolves uploads to a canonical type.

    Detection order:
    1. Size ceiling check (no type lookup for oversized files)
    2. Declared content type, when the client sent one
    3. Extension mapping, when no specific content type was declared
    """

    def __init__(self, max_file_size: Optional[int] = None):
        """
        Initialize the detector.

        Args:
            max_file_size: Size ceiling in bytes (defaults to the configured ceiling)
        """
        self.max_file_size = max_file_size or get_settings().max_file_size

    def detect_from_declared_type(self, declared_type: str) -> Optional[str]:
        """
        Normalize a client-declared content type.

        Generic types such as application/octet-stream count as undeclared,
        since HTTP clients send them for any file they cannot identify, so
        the extension decides for those uploads.

        Args:
            declared_type: Content type as sent, possibly with parameters

        Returns:
            Lowercase type without parameters, or None if nothing useful was declared
        """
        if not declared_type:
            return None

        # Clean up MIME type (remove charset, etc.)
        mime_clean = declared_type.lower().split(";")[0].strip()
        if not mime_clean or mime_clean in GENERIC_CONTENT_TYPES:
            return None
        return mime_clean

    def detect_from_extension(self, filename: str) -> Optional[str]:
        """
        Detect type from the file extension.

        Args:
            filename: File name; only the text after the last dot is used

        Returns:
            Mapped type or None for a missing or unknown extension
        """
        if not filename or "." not in filename:
            return None

        extension = filename.rsplit(".", 1)[1].lower()
        mime_type = EXTENSION_MIME_MAP.get(extension)
        if mime_type:
            logger.debug(f"Extension-based detection: {extension} -> {mime_type}")
        return mime_type

    def check_size(self, upload: UploadedFile) -> None:
        if upload.byte_size > self.max_file_size:
            raise FileTooLargeError(
                f"File size exceeds {format_file_size(self.max_file_size)} limit",
                details={"byte_size": upload.byte_size, "max_file_size": self.max_file_size}
            )

    def resolve(self, upload: UploadedFile) -> str:
        """
        Resolve an upload to its canonical type.

        Args:
            upload: The uploaded file

        Returns:
            Canonical type, always a key of FILE_TYPE_CONFIGS

        Raises:
            FileTooLargeError: If the file exceeds the size ceiling
            UnsupportedTypeError: If no supported type could be determined
        """
        self.check_size(upload)

        candidate = self.detect_from_declared_type(upload.declared_type)
        if candidate is None:
            candidate = self.detect_from_extension(upload.name)

        if candidate is None or candidate not in FILE_TYPE_CONFIGS:
            logger.debug(f"Unsupported upload {upload.name!r} (candidate type: {candidate})")
            raise UnsupportedTypeError(
                "Unsupported file type",
                details={"filename": upload.name, "detected_type": candidate}
            )

        logger.debug(f"Resolved {upload.name!r} -> {candidate}")
        return candidate

    def try_resolve(self, upload: UploadedFile) -> Tuple[Optional[str], Optional[ReformatError]]:
        """Like resolve(), but returns ``(type, None)`` or ``(None, error)``."""
        try:
            return self.resolve(upload), None
        except (FileTooLargeError, UnsupportedTypeError) as e:
            return None, e


# Global detector instance
_detector_instance = None


def get_mime_detector() -> MimeTypeDetector:
    """Get the global detector instance."""
    global _detector_instance
    if _detector_instance is None:
        _detector_instance = MimeTypeDetector()
    return _detector_instance


def resolve(upload: UploadedFile) -> str:
    """
    Convenience function to resolve an upload using the global detector.

    Raises:
        FileTooLargeError, UnsupportedTypeError
    """
    return get_mime_detector().resolve(upload)
