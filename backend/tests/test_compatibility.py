"""
Unit Tests for the compatibility checker and size estimation

Run with: pytest tests/test_compatibility.py -v
"""

import pytest

from signatures.compatibility import (
    EMAIL_CLIENTS,
    UrlType,
    check_compatibility,
    summarize,
    validate_image_url,
)
from signatures.icons import IconRegistry
from signatures.models import IssueSeverity, TemplateId
from signatures.size_validator import (
    GMAIL_LIMIT_BYTES,
    RECOMMENDED_LIMIT_BYTES,
    estimate_size,
)
from signatures.templates import TemplateRegistry

CLEAN_HTML = (
    '<table cellpadding="0" cellspacing="0" border="0"><tr>'
    '<td style="font-family: Arial, sans-serif;">Ada Lovelace</td>'
    '</tr></table>'
)
HTTPS_IMAGE = "https://cdn.example.com/avatars/ada.jpg"


def titles(issues, severity=None):
    return [i.title for i in issues if severity is None or i.severity == severity]


class TestValidateImageUrl:

    def test_https_is_public(self):
        result = validate_image_url(HTTPS_IMAGE)
        assert result.valid
        assert result.type == UrlType.PUBLIC
        assert result.warnings == []

    def test_http_warns(self):
        result = validate_image_url("http://cdn.example.com/a.jpg")
        assert result.valid
        assert "HTTPS" in result.warnings[0]

    def test_data_url_rejected(self):
        result = validate_image_url("data:image/png;base64,AAAA")
        assert not result.valid
        assert result.type == UrlType.DATA

    @pytest.mark.parametrize("url", ["/avatar.png", "./avatar.png", "../avatar.png"])
    def test_relative_rejected(self, url):
        result = validate_image_url(url)
        assert not result.valid
        assert result.type == UrlType.RELATIVE

    def test_garbage_rejected(self):
        result = validate_image_url("avatar.png")
        assert not result.valid
        assert result.type == UrlType.UNKNOWN

    def test_empty(self):
        assert not validate_image_url("").valid
        assert not validate_image_url(None).valid


class TestCheckCompatibility:

    def test_clean_html_with_https_image_is_all_good(self):
        issues = check_compatibility(CLEAN_HTML, HTTPS_IMAGE)

        assert len(issues) == 1
        assert issues[0].severity == IssueSeverity.INFO
        assert issues[0].title == "All Good!"

    def test_no_image_is_fine(self):
        issues = check_compatibility(CLEAN_HTML, None)
        assert titles(issues) == ["All Good!"]

    @pytest.mark.parametrize("css", [
        "display:flex",
        "display: flex",
        "display:inline-flex",
        "display: grid",
        "display:-webkit-flex",
        "display: -webkit-box",
        "display:-ms-flexbox",
        "display: -webkit-inline-flex",
        "display:-ms-grid",
        "grid-template-columns: 1fr 1fr",
        "height: 100vh",
        "width: 50vw",
    ])
    def test_modern_css_is_an_error(self, css):
        html = f'<table><tr><td style="{css};">x</td></tr></table>'
        issues = check_compatibility(html, None)
        assert "Modern CSS Detected" in titles(issues, IssueSeverity.ERROR)

    def test_media_query_is_an_error(self):
        html = "<style>@media (max-width: 600px) { td { padding: 0; } }</style><table></table>"
        assert "Modern CSS Detected" in titles(check_compatibility(html, None), IssueSeverity.ERROR)

    @pytest.mark.parametrize("text", ["Gridley & Sons", "Overview of services", "reviews", "Inbox display: block"])
    def test_words_containing_css_terms_are_not_flagged(self, text):
        html = f"<table><tr><td>{text}</td></tr></table>"
        assert titles(check_compatibility(html, None)) == ["All Good!"]

    def test_div_warns(self):
        issues = check_compatibility("<div>Ada</div>", None)
        assert "DIV Elements Detected" in titles(issues, IssueSeverity.WARNING)

    def test_class_with_inline_styles_warns(self):
        html = '<table class="sig"><tr><td style="color: red;">Ada</td></tr></table>'
        assert "CSS Classes Detected" in titles(check_compatibility(html, None), IssueSeverity.WARNING)

    def test_class_without_inline_styles_not_flagged(self):
        html = '<table class="sig"><tr><td>Ada</td></tr></table>'
        assert "CSS Classes Detected" not in titles(check_compatibility(html, None))

    def test_oversized_signature(self):
        html = "a" * 11000
        size = estimate_size(html)
        issues = check_compatibility(html, None)

        assert size.within_limit is False
        error = next(i for i in issues if i.title == "Signature Too Large")
        assert error.severity == IssueSeverity.ERROR
        assert "exceeds Gmail's ~10KB limit" in error.message

    def test_near_limit_warns(self):
        html = "a" * (RECOMMENDED_LIMIT_BYTES + 10)
        issues = check_compatibility(html, None)
        assert "Size Warning" in titles(issues, IssueSeverity.WARNING)
        assert "Signature Too Large" not in titles(issues)

    def test_data_url_image_flagged_once_when_not_embedded(self):
        issues = check_compatibility(CLEAN_HTML, "data:image/png;base64,AAAA")
        errors = titles(issues, IssueSeverity.ERROR)

        assert "Image URL Issue" in errors
        assert "Data URL Detected" not in errors

    def test_embedded_data_url_is_a_second_independent_error(self):
        data_url = "data:image/png;base64,AAAA"
        html = f'<table><tr><td><img src="{data_url}" width="90" height="90" /></td></tr></table>'
        errors = titles(check_compatibility(html, data_url), IssueSeverity.ERROR)

        assert "Image URL Issue" in errors
        assert "Data URL Detected" in errors

    def test_http_image_warns(self):
        issues = check_compatibility(CLEAN_HTML, "http://cdn.example.com/a.jpg")
        assert titles(issues) == ["Image URL Warning"]

    def test_image_issue_suggests_upload(self):
        issues = check_compatibility(CLEAN_HTML, "/avatar.png")
        assert issues[0].fix == "Upload your avatar to get a public URL"

    def test_deterministic(self):
        html = '<div class="x" style="display:flex">' + "a" * 9000 + "</div>"
        first = [i.to_dict() for i in check_compatibility(html, "data:image/png;base64,AA")]
        second = [i.to_dict() for i in check_compatibility(html, "data:image/png;base64,AA")]
        assert first == second

    @pytest.mark.parametrize("template_id", list(TemplateId))
    def test_rendered_templates_have_no_errors(self, full_params, template_id):
        html = TemplateRegistry(IconRegistry()).render(template_id, full_params)
        issues = check_compatibility(html, full_params.image_url)

        assert titles(issues, IssueSeverity.ERROR) == []
        assert "DIV Elements Detected" not in titles(issues)
        assert "CSS Classes Detected" not in titles(issues)


class TestSummarize:

    def test_groups_by_severity(self):
        html = "<div>" + "a" * 11000 + "</div>"
        summary = summarize(check_compatibility(html, None))

        assert [e["title"] for e in summary["errors"]] == ["Signature Too Large"]
        assert [w["title"] for w in summary["warnings"]] == ["DIV Elements Detected"]
        assert summary["compatible_clients"] == []

    def test_clean_lists_clients(self):
        summary = summarize(check_compatibility(CLEAN_HTML, HTTPS_IMAGE))
        assert summary["compatible_clients"] == EMAIL_CLIENTS
        assert summary["info"][0]["type"] == "info"


class TestEstimateSize:

    def test_counts_utf8_bytes(self):
        assert estimate_size("abc").byte_length == 3
        assert estimate_size("é").byte_length == 2
        assert estimate_size("😀").byte_length == 4

    def test_kilobytes_rounded(self):
        assert estimate_size("a" * 1536).kilobytes == 1.5

    def test_limits(self):
        assert estimate_size("a" * GMAIL_LIMIT_BYTES).within_limit
        assert not estimate_size("a" * (GMAIL_LIMIT_BYTES + 1)).within_limit

    def test_warnings(self):
        assert estimate_size("a" * 100).warnings == []
        assert len(estimate_size("a" * (RECOMMENDED_LIMIT_BYTES + 1)).warnings) == 1
        assert len(estimate_size("a" * (GMAIL_LIMIT_BYTES + 1)).warnings) == 2

    @pytest.mark.parametrize("html", ["", "<table></table>", "Ada é Lovelace", "x" * 5000])
    @pytest.mark.parametrize("suffix", ["a", "é", "<td>more</td>"])
    def test_monotonic(self, html, suffix):
        assert estimate_size(html + suffix).byte_length >= estimate_size(html).byte_length
        assert estimate_size(suffix + html).byte_length >= estimate_size(html).byte_length

    def test_empty(self):
        size = estimate_size(None)
        assert size.byte_length == 0
        assert size.within_limit
