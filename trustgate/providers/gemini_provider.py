"""
Google Gemini provider (generateContent REST endpoint).

The API key travels in the ``x-goog-api-key`` header rather than the query
string, so it never appears in URLs or logs.
"""

from typing import Any
from urllib.parse import quote

from trustgate.providers.base_provider import BaseProvider


class GeminiProvider(BaseProvider):
    """
    STAGE-GEMINI: POST {base_url}/models/{model}:generateContent

    Response text: candidates[0].content.parts[0].text
    """

    @property
    def endpoint(self) -> str:
        model = quote(self.config.model, safe="")
        return f"{self.config.base_url.rstrip('/')}/models/{model}:generateContent"

    def auth_headers(self) -> dict[str, str]:
        return {"x-goog-api-key": self.config.api_key}

    def build_payload(self, prompt: str) -> dict[str, Any]:
        return {
            "contents": [{"parts": [{"text": prompt}]}],
            "generationConfig": {
                "temperature": self.config.temperature,
                "maxOutputTokens": self.config.max_tokens,
            },
        }
