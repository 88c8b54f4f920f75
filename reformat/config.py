"""
Conversion configuration for the /convert endpoints.

This module defines the canonical input types, the output formats each of
them may be converted to, and the environment-driven service settings.
"""

import os
from typing import Dict, Optional, Tuple
from enum import Enum


class OutputFormat(str, Enum):
    """Output format tokens accepted by the conversion endpoint."""
    PDF = "pdf"
    DOCX = "docx"
    JPG = "jpg"
    PNG = "png"
    GIF = "gif"


class ConversionQuality(str, Enum):
    """Quality hints forwarded to the conversion endpoint."""
    FAST = "fast"
    BALANCED = "balanced"
    HIGH = "high"


DOCX_MIME_TYPE = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"

# Maximum accepted upload size (100MB)
DEFAULT_MAX_FILE_SIZE = 100 * 1024 * 1024

DEFAULT_CONVERSION_URL = "http://localhost:8000/api/convert"

# Extension -> canonical type, used when the client sends no content type
EXTENSION_MIME_MAP: Dict[str, str] = {
    "pdf": "application/pdf",
    "doc": "application/msword",
    "docx": DOCX_MIME_TYPE,
    "jpg": "image/jpeg",
    "jpeg": "image/jpeg",
    "png": "image/png",
    "gif": "image/gif",
    "svg": "image/svg+xml",
}

# Declared types that say nothing about the format; the extension decides instead
GENERIC_CONTENT_TYPES = frozenset({
    "application/octet-stream",
    "binary/octet-stream",
})

# Output token -> content type of the converted file
OUTPUT_CONTENT_TYPES: Dict[OutputFormat, str] = {
    OutputFormat.PDF: "application/pdf",
    OutputFormat.DOCX: DOCX_MIME_TYPE,
    OutputFormat.JPG: "image/jpeg",
    OutputFormat.PNG: "image/png",
    OutputFormat.GIF: "image/gif",
}

# Spellings that name the same output format
OUTPUT_FORMAT_ALIASES: Dict[str, OutputFormat] = {
    "jpeg": OutputFormat.JPG,
}


class FormatProfile:
    """Display data and legal output formats for one canonical type."""

    __slots__ = ("icon", "description", "allowed_outputs")

    def __init__(self, icon: str, description: str, allowed_outputs: Tuple[OutputFormat, ...]):
        if not allowed_outputs:
            raise ValueError(f"Format profile '{description}' has no allowed outputs")
        self.icon = icon
        self.description = description
        self.allowed_outputs = tuple(allowed_outputs)

    def to_dict(self) -> Dict[str, object]:
        return {
            "icon": self.icon,
            "description": self.description,
            "allowed_outputs": [fmt.value for fmt in self.allowed_outputs],
        }

    def __repr__(self) -> str:
        outputs = ", ".join(fmt.value for fmt in self.allowed_outputs)
        return f"FormatProfile({self.description!r}, outputs=[{outputs}])"


# Canonical type -> profile. The keys of this table are the complete set of
# supported input types.
FILE_TYPE_CONFIGS: Dict[str, FormatProfile] = {
    "image/jpeg": FormatProfile(
        "🖼️", "JPEG Image",
        (OutputFormat.PDF, OutputFormat.PNG, OutputFormat.JPG, OutputFormat.GIF),
    ),
    "image/png": FormatProfile(
        "🖼️", "PNG Image",
        (OutputFormat.PDF, OutputFormat.JPG, OutputFormat.GIF),
    ),
    "image/gif": FormatProfile(
        "🎭", "GIF Animation",
        (OutputFormat.JPG, OutputFormat.PNG, OutputFormat.PDF),
    ),
    "image/svg+xml": FormatProfile(
        "📐", "SVG Vector",
        (OutputFormat.PNG, OutputFormat.JPG, OutputFormat.PDF),
    ),
    "application/pdf": FormatProfile(
        "📄", "PDF Document",
        (OutputFormat.DOCX, OutputFormat.JPG, OutputFormat.PNG),
    ),
    "application/msword": FormatProfile(
        "📝", "Word Document",
        (OutputFormat.PDF, OutputFormat.DOCX),
    ),
    DOCX_MIME_TYPE: FormatProfile(
        "📝", "Word Document",
        (OutputFormat.PDF,),
    ),
}


class Settings:
    """Service settings resolved from the environment."""

    def __init__(
        self,
        conversion_url: str = DEFAULT_CONVERSION_URL,
        max_file_size: int = DEFAULT_MAX_FILE_SIZE,
        quality_param: Optional[str] = "quality",
        http_timeout: Optional[float] = None
    ):
        """
        Initialize settings.

        Args:
            conversion_url: Address of the remote conversion endpoint
            max_file_size: Upload size ceiling in bytes
            quality_param: Query parameter carrying the quality hint (None disables it)
            http_timeout: Read timeout in seconds for the conversion call (None = no timeout)
        """
        if max_file_size <= 0:
            raise ValueError(f"max_file_size must be positive, got {max_file_size}")
        self.conversion_url = conversion_url
        self.max_file_size = max_file_size
        self.quality_param = quality_param or None
        self.http_timeout = http_timeout

    @classmethod
    def from_env(cls) -> 'Settings':
        """Create settings from environment variables."""
        timeout_str = os.getenv('REFORMAT_HTTP_TIMEOUT', '')
        return cls(
            conversion_url=os.getenv('REFORMAT_CONVERSION_URL', DEFAULT_CONVERSION_URL),
            max_file_size=int(os.getenv('REFORMAT_MAX_FILE_SIZE', str(DEFAULT_MAX_FILE_SIZE))),
            quality_param=os.getenv('REFORMAT_QUALITY_PARAM', 'quality'),
            http_timeout=float(timeout_str) if timeout_str.strip() else None
        )


_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Get the process-wide settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings.from_env()
    return _settings
