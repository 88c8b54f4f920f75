"""
Conversion lookup utilities for the /convert endpoints.

This module contains read-only accessors for the format compatibility table.
"""

from typing import Dict, Optional, Tuple

from ..config import FILE_TYPE_CONFIGS, OUTPUT_FORMAT_ALIASES, FormatProfile, OutputFormat


def lookup(canonical_type: str) -> Optional[FormatProfile]:
    """
    Get the format profile for a canonical type.

    Args:
        canonical_type: Canonical type (e.g., 'application/pdf')

    Returns:
        FormatProfile, or None if the type is not supported
    """
    return FILE_TYPE_CONFIGS.get(canonical_type)


def get_allowed_outputs(canonical_type: str) -> Tuple[OutputFormat, ...]:
    """Output formats offered for a type, in display order (empty if unsupported)."""
    profile = lookup(canonical_type)
    if profile is None:
        return ()
    return profile.allowed_outputs


def normalize_output_format(token: str) -> Optional[OutputFormat]:
    """
    Map an output token to its OutputFormat.

    Args:
        token: Output format token (e.g., 'pdf', 'JPEG', '.png')

    Returns:
        OutputFormat or None if the token names no known format
    """
    if not token:
        return None

    token_clean = token.strip().lstrip(".").lower()
    if token_clean in OUTPUT_FORMAT_ALIASES:
        return OUTPUT_FORMAT_ALIASES[token_clean]
    try:
        return OutputFormat(token_clean)
    except ValueError:
        return None


def is_output_allowed(canonical_type: str, output_format: OutputFormat) -> bool:
    return output_format in get_allowed_outputs(canonical_type)


def get_supported_conversions() -> Dict[str, Dict[str, object]]:
    """
    Get every supported input type with its profile.

    Returns:
        Dictionary mapping canonical types to plain profile dicts
    """
    return {
        canonical_type: profile.to_dict()
        for canonical_type, profile in FILE_TYPE_CONFIGS.items()
    }
