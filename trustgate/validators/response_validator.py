"""
Response Validator

Schema validation for the decoded JSON body of a remote AI service, followed
by the content-safety screen on the extracted text.

Each known service has one fixed field path to the generated text. A path
segment is either a dict key (must be present, next value a dict or the final
string) or a list index (list must be non-empty). The terminal value must be
a string that is not empty after trimming.

Schemas:
- openai: choices[0].message.content
- gwdg:   choices[0].message.content (OpenAI-compatible)
- google: candidates[0].content.parts[0].text
"""

import re
from typing import Any

from trustgate.core.config.constants import LLMProvider, Stage
from trustgate.core.config.settings import Settings
from trustgate.core.exceptions import MalformedResponseError
from trustgate.core.logging.logger import get_logger
from trustgate.validators.base import BaseValidator
from trustgate.validators.content_safety import ContentSafetyValidator

logger = get_logger(__name__)

ResponsePath = tuple[str | int, ...]

_OPENAI_PATH: ResponsePath = ("choices", 0, "message", "content")

RESPONSE_SCHEMAS: dict[str, ResponsePath] = {
    LLMProvider.OPENAI.value: _OPENAI_PATH,
    LLMProvider.GWDG.value: _OPENAI_PATH,
    LLMProvider.GOOGLE.value: ("candidates", 0, "content", "parts", 0, "text"),
}

_LEADING_FENCE = re.compile(r"^\s*```(?:markdown|md)?[ \t]*\r?\n?", re.IGNORECASE)
_TRAILING_FENCE = re.compile(r"\r?\n?```\s*$")


def strip_code_fences(text: str) -> str:
    """Unwrap a ```markdown ... ``` block that vendors sometimes wrap output in."""
    stripped = text.strip()
    if not stripped.startswith("```"):
        return stripped
    stripped = _LEADING_FENCE.sub("", stripped, count=1)
    stripped = _TRAILING_FENCE.sub("", stripped, count=1)
    return stripped.strip()


def _describe(path: ResponsePath, upto: int) -> str:
    parts: list[str] = []
    for segment in path[:upto]:
        if isinstance(segment, int):
            parts.append(f"[{segment}]")
        else:
            parts.append(f".{segment}" if parts else segment)
    return "".join(parts)


class ResponseValidator(BaseValidator):
    """
    Usage:
        validator = ResponseValidator()
        text = validator.validate("openai", decoded_json)
    """

    def __init__(
        self,
        settings: Settings | None = None,
        schemas: dict[str, ResponsePath] | None = None,
    ):
        self.schemas = dict(RESPONSE_SCHEMAS if schemas is None else schemas)
        self.content_safety = ContentSafetyValidator(settings)

    def extract(self, service: str, data: Any) -> str:
        """
        Walk the service's field path and return the terminal string.

        Raises:
            MalformedResponseError: Unknown service, or a segment absent,
                wrong-typed or empty
        """
        path = self.schemas.get(service)
        if path is None:
            raise MalformedResponseError(
                f"No response schema registered for service '{service}'",
                details={"service": service},
            )

        node = data
        for depth, segment in enumerate(path):
            location = _describe(path, depth + 1)
            if isinstance(segment, int):
                if not isinstance(node, list) or len(node) <= segment:
                    raise self._malformed(service, location, "missing or empty array")
            elif not isinstance(node, dict) or segment not in node:
                raise self._malformed(service, location, "missing field")
            node = node[segment]

        if not isinstance(node, str):
            raise self._malformed(service, _describe(path, len(path)), "not a string")
        if not node.strip():
            raise self._malformed(service, _describe(path, len(path)), "empty content")
        return node

    def validate(self, service: str, data: Any) -> str:
        """
        Schema check, then content-safety screen.

        Returns:
            The extracted text, unchanged

        Raises:
            MalformedResponseError: Schema violation
            UnsafeContentError: Safety violation
        """
        text = self.extract(service, data)
        self.content_safety.validate(text)
        return text

    @staticmethod
    def _malformed(service: str, location: str, problem: str) -> MalformedResponseError:
        logger.warning(
            "Malformed response rejected",
            stage=Stage.RESPONSE_VALIDATION.value,
            service=service,
            path=location,
            problem=problem,
        )
        return MalformedResponseError(
            f"Invalid {service} response: {problem} at '{location}'",
            details={"service": service, "path": location},
        )


def validate_response(service: str, data: Any, settings: Settings | None = None) -> str:
    return ResponseValidator(settings).validate(service, data)
