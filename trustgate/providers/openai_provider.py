"""
OpenAI Chat Completions provider.
"""

from typing import Any

from trustgate.providers.base_provider import BaseProvider


class OpenAIProvider(BaseProvider):
    """
    STAGE-OPENAI: POST {base_url}/chat/completions, Bearer auth.

    Response text: choices[0].message.content
    """

    @property
    def endpoint(self) -> str:
        return f"{self.config.base_url.rstrip('/')}/chat/completions"

    def build_payload(self, prompt: str) -> dict[str, Any]:
        return {
            "model": self.config.model,
            "messages": [{"role": "user", "content": prompt}],
            "temperature": self.config.temperature,
            "max_tokens": self.config.max_tokens,
        }
