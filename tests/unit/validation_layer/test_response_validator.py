"""
Unit Tests for ResponseValidator

Tests the per-service schema walk, the safety screen on the extracted text
and code-fence stripping.
"""

import pytest

from tests.test_fixtures.response_factory import ResponseTestFactory
from trustgate.core.exceptions import MalformedResponseError, UnsafeContentError
from trustgate.validators.response_validator import (
    ResponseValidator,
    strip_code_fences,
    validate_response,
)


@pytest.fixture
def validator(settings):
    return ResponseValidator(settings)


@pytest.mark.unit
class TestExtract:
    def test_openai_shape(self, validator):
        assert validator.extract("openai", ResponseTestFactory.openai("hello")) == "hello"

    def test_gwdg_uses_openai_shape(self, validator):
        assert validator.extract("gwdg", ResponseTestFactory.openai("hello")) == "hello"

    def test_google_shape(self, validator):
        assert validator.extract("google", ResponseTestFactory.gemini("hello")) == "hello"

    def test_unknown_service(self, validator):
        with pytest.raises(MalformedResponseError) as exc_info:
            validator.extract("anthropic", {})

        assert exc_info.value.details["service"] == "anthropic"

    @pytest.mark.parametrize(
        "data, path",
        [
            ({}, "choices"),
            ({"choices": []}, "choices[0]"),
            ({"choices": "nope"}, "choices[0]"),
            ({"choices": [{}]}, "choices[0].message"),
            ({"choices": [{"message": {}}]}, "choices[0].message.content"),
            ({"choices": [{"message": {"content": 42}}]}, "choices[0].message.content"),
            ({"choices": [{"message": {"content": "   "}}]}, "choices[0].message.content"),
            ([], "choices"),
        ],
    )
    def test_malformed_openai(self, validator, data, path):
        with pytest.raises(MalformedResponseError) as exc_info:
            validator.extract("openai", data)

        assert exc_info.value.details["path"] == path
        assert exc_info.value.retryable is False

    def test_malformed_google_parts(self, validator):
        with pytest.raises(MalformedResponseError) as exc_info:
            validator.extract("google", {"candidates": [{"content": {"parts": []}}]})

        assert exc_info.value.details["path"] == "candidates[0].content.parts[0]"


@pytest.mark.unit
class TestValidate:
    def test_returns_text_unchanged(self, validator):
        text = "  ## Title\nA\n\n## Content\nB  "
        assert validator.validate("openai", ResponseTestFactory.openai(text)) == text

    def test_unsafe_text_rejected(self, validator):
        with pytest.raises(UnsafeContentError):
            validator.validate("google", ResponseTestFactory.gemini("<script>steal()</script>"))

    def test_module_function(self, settings):
        assert validate_response("openai", ResponseTestFactory.openai("ok"), settings) == "ok"


@pytest.mark.unit
class TestStripCodeFences:
    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("```markdown\n## Title\nA\n```", "## Title\nA"),
            ("```\n## Title\nA\n```", "## Title\nA"),
            ("  ```md\nbody\n```  \n", "body"),
            ("## Title\nA", "## Title\nA"),
            ("  plain  ", "plain"),
        ],
    )
    def test_strip(self, raw, expected):
        assert strip_code_fences(raw) == expected
