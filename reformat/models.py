"""
Conversion request/response models.

These are in-memory records only; nothing here is persisted.
"""

import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional

from .config import ConversionQuality, OutputFormat

SIZE_UNITS = ("Bytes", "KB", "MB", "GB")


def format_file_size(size: int) -> str:
    """Human-readable size label, e.g. ``2 MB`` or ``1.5 KB``."""
    if size <= 0:
        return "0 Bytes"
    exponent = 0
    while size >= 1024 ** (exponent + 1) and exponent < len(SIZE_UNITS) - 1:
        exponent += 1
    value = ("%.2f" % (size / 1024 ** exponent)).rstrip("0").rstrip(".")
    return f"{value} {SIZE_UNITS[exponent]}"


def replace_extension(filename: str, extension: str) -> str:
    """Swap the last extension of ``filename`` for ``extension``."""
    base_name = filename.rsplit(".", 1)[0] if "." in filename else filename
    return f"{base_name}.{extension}"


class UploadedFile:
    """A file handed in by the client for one conversion attempt."""

    def __init__(self, name: str, declared_type: str = "", byte_size: Optional[int] = None, content: bytes = b""):
        self.name = name or ""
        self.declared_type = declared_type or ""
        self.content = content
        self.byte_size = len(content) if byte_size is None else byte_size
        if self.byte_size < 0:
            raise ValueError(f"byte_size must be non-negative, got {self.byte_size}")

    @property
    def size_label(self) -> str:
        return format_file_size(self.byte_size)

    def __repr__(self) -> str:
        return f"UploadedFile({self.name!r}, declared_type={self.declared_type!r}, byte_size={self.byte_size})"


class DownloadHandle:
    """Converted bytes plus the name and type to save them under."""

    def __init__(self, filename: str, content_type: str, content: bytes):
        self.filename = filename
        self.content_type = content_type
        self._content: Optional[bytes] = content
        self.size = len(content)

    @property
    def released(self) -> bool:
        return self._content is None

    @property
    def content(self) -> bytes:
        if self._content is None:
            raise ValueError(f"Download '{self.filename}' has already been released")
        return self._content

    def release(self) -> None:
        """Drop the converted bytes once the client has downloaded or discarded them."""
        self._content = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "filename": self.filename,
            "content_type": self.content_type,
            "size": self.size,
            "released": self.released,
        }


class AttemptStatus(str, Enum):
    PENDING = "pending"
    CONVERTING = "converting"
    COMPLETED = "completed"
    FAILED = "failed"


class ConversionAttempt:
    """In-memory record of one conversion request, for history and progress."""

    def __init__(
        self,
        original_name: str,
        original_type: str,
        output_format: OutputFormat,
        quality: ConversionQuality,
        size_label: str
    ):
        self.id = uuid.uuid4().hex
        self.original_name = original_name
        self.original_type = original_type
        self.output_format = output_format
        self.quality = quality
        self.size_label = size_label
        self.status = AttemptStatus.PENDING
        self.progress: int = 0
        self.error: Optional[str] = None
        self.created_at = datetime.now(timezone.utc)

    @property
    def finished(self) -> bool:
        return self.status in (AttemptStatus.COMPLETED, AttemptStatus.FAILED)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "original_name": self.original_name,
            "original_type": self.original_type,
            "output_format": self.output_format.value,
            "quality": self.quality.value,
            "status": self.status.value,
            "progress": self.progress,
            "size": self.size_label,
            "error": self.error,
            "created_at": self.created_at.isoformat(),
        }
