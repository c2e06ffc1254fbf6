"""Azure OpenAI providers.

Two flavours exist because Azure exposes newer reasoning models only through
the Responses API, while older deployments are chat-completions only:

  - AzureOpenAIReviewer:    chat completions against a named deployment
  - AzureResponsesReviewer: the Responses API, which takes a single input
                            string instead of system/user messages
"""

from __future__ import annotations

try:
    from openai import AzureOpenAI as _AzureOpenAI
except ImportError:
    _AzureOpenAI = None  # type: ignore[assignment,misc]

from sherlockqa_core.providers.base import BaseReviewer

CHAT_API_VERSION = "2024-02-15-preview"
RESPONSES_API_VERSION = "2025-04-01-preview"


def _make_client(api_key: str, endpoint: str, api_version: str):
    if _AzureOpenAI is None:
        raise ImportError(
            "The 'openai' package is required for the Azure providers. "
            "Install it with: pip install 'sherlockqa[openai]'"
        )
    return _AzureOpenAI(api_key=api_key, azure_endpoint=endpoint, api_version=api_version)


class AzureOpenAIReviewer(BaseReviewer):
    TEMPERATURE = 0.3

    def __init__(
        self,
        api_key: str,
        endpoint: str,
        deployment: str | None = None,
        api_version: str | None = None,
        **kwargs,
    ):
        super().__init__(**kwargs)
        self.deployment = deployment or self.model
        self.client = _make_client(api_key, endpoint, api_version or CHAT_API_VERSION)

    def _call_api(self, system_prompt: str, user_prompt: str) -> str:
        response = self.client.chat.completions.create(
            model=self.deployment,
            messages=[
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
            temperature=self.TEMPERATURE,
            max_tokens=self.max_tokens,
        )
        return response.choices[0].message.content


class AzureResponsesReviewer(BaseReviewer):
    def __init__(self, api_key: str, endpoint: str, api_version: str | None = None, **kwargs):
        super().__init__(**kwargs)
        self.client = _make_client(api_key, endpoint, api_version or RESPONSES_API_VERSION)

    def _call_api(self, system_prompt: str, user_prompt: str) -> str:
        response = self.client.responses.create(
            model=self.model,
            input=f"{system_prompt}\n\n---\n\n{user_prompt}",
            max_output_tokens=self.max_tokens,
        )
        text = "".join(
            part.text or ""
            for item in response.output
            if item.type == "message"
            for part in item.content
            if part.type == "output_text"
        )
        if not text:
            raise ValueError(f"Responses API returned no output text (status: {getattr(response, 'status', None)})")
        return text
