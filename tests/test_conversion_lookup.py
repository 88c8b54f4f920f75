"""
Unit tests for the format compatibility table and its accessors.
"""

import pytest

from reformat.config import DOCX_MIME_TYPE, FILE_TYPE_CONFIGS, FormatProfile, OutputFormat
from reformat.utils.conversion_lookup import (
    get_allowed_outputs,
    get_supported_conversions,
    is_output_allowed,
    lookup,
    normalize_output_format,
)


class TestFormatTable:

    def test_supported_input_types(self):
        assert set(FILE_TYPE_CONFIGS) == {
            "image/jpeg",
            "image/png",
            "image/gif",
            "image/svg+xml",
            "application/pdf",
            "application/msword",
            DOCX_MIME_TYPE,
        }

    @pytest.mark.parametrize("canonical_type", sorted(FILE_TYPE_CONFIGS))
    def test_every_type_has_outputs(self, canonical_type):
        assert len(get_allowed_outputs(canonical_type)) > 0

    def test_profile_without_outputs_is_rejected(self):
        with pytest.raises(ValueError):
            FormatProfile("x", "Empty", ())

    def test_pdf_outputs_in_display_order(self):
        assert get_allowed_outputs("application/pdf") == (
            OutputFormat.DOCX, OutputFormat.JPG, OutputFormat.PNG
        )

    def test_docx_converts_only_to_pdf(self):
        assert get_allowed_outputs(DOCX_MIME_TYPE) == (OutputFormat.PDF,)


class TestLookup:

    def test_lookup_known_type(self):
        profile = lookup("image/svg+xml")
        assert profile is not None
        assert profile.description == "SVG Vector"
        assert OutputFormat.PNG in profile.allowed_outputs

    @pytest.mark.parametrize("canonical_type", ["application/zip", "", "IMAGE/PNG", "text/plain"])
    def test_lookup_absent_type(self, canonical_type):
        assert lookup(canonical_type) is None
        assert get_allowed_outputs(canonical_type) == ()

    def test_is_output_allowed(self):
        assert is_output_allowed("image/jpeg", OutputFormat.PDF)
        assert not is_output_allowed("application/pdf", OutputFormat.PDF)
        assert not is_output_allowed("application/zip", OutputFormat.PDF)


class TestNormalizeOutputFormat:

    @pytest.mark.parametrize("token,expected", [
        ("pdf", OutputFormat.PDF),
        ("PDF", OutputFormat.PDF),
        (".png", OutputFormat.PNG),
        (" docx ", OutputFormat.DOCX),
        ("jpg", OutputFormat.JPG),
        ("jpeg", OutputFormat.JPG),
        ("JPEG", OutputFormat.JPG),
        ("gif", OutputFormat.GIF),
    ])
    def test_known_tokens(self, token, expected):
        assert normalize_output_format(token) == expected

    @pytest.mark.parametrize("token", ["", "svg", "zip", "p df", None])
    def test_unknown_tokens(self, token):
        assert normalize_output_format(token) is None


class TestSupportedConversions:

    def test_lists_every_type(self):
        supported = get_supported_conversions()
        assert set(supported) == set(FILE_TYPE_CONFIGS)

    def test_profile_dicts_are_plain(self):
        supported = get_supported_conversions()
        assert supported["image/png"] == {
            "icon": FILE_TYPE_CONFIGS["image/png"].icon,
            "description": "PNG Image",
            "allowed_outputs": ["pdf", "jpg", "gif"],
        }
