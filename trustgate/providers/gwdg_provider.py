"""
GWDG Academic Cloud provider.

The API is OpenAI-compatible, so only the service name and defaults differ.
"""

from trustgate.providers.openai_provider import OpenAIProvider


class GWDGProvider(OpenAIProvider):
    """STAGE-GWDG: POST {base_url}/chat/completions, Bearer auth."""
