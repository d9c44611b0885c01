"""AI providers that turn parsed descriptions into Terraform configurations."""

from __future__ import annotations

import os
from abc import ABC, abstractmethod

import httpx

from .nlp import ParsedInput

DEFAULT_MODEL = "gpt-4"

_PROMPT_TAIL = (
    "\nPlease provide a complete, working Terraform configuration that:\n"
    "1. Follows Terraform best practices\n"
    "2. Includes proper resource naming and tagging\n"
    "3. Implements security best practices\n"
    "4. Is production-ready\n"
    "5. Includes necessary variables and outputs\n"
    "\nReturn only the Terraform configuration code without explanations."
)


class AIError(RuntimeError):
    """Raised when a provider cannot produce a configuration."""


class Provider(ABC):
    """Something that generates Terraform configuration from parsed input."""

    @abstractmethod
    def generate_config(self, parsed: ParsedInput) -> str:
        """Return Terraform configuration text for the parsed input."""


def clean_response(content: str) -> str:
    """Return the text inside markdown code fences, or the content unchanged."""
    if "```" not in content:
        return content
    kept: list[str] = []
    in_block = False
    for line in content.split("\n"):
        if line.startswith("```"):
            in_block = not in_block
        elif in_block:
            kept.append(line)
    return "\n".join(kept) if kept else content


class OpenAIProvider(Provider):
    """Provider backed by an OpenAI-compatible chat completions endpoint.

    The API key and base URL default to OPENAI_API_KEY and OPENAI_BASE_URL.
    """

    def __init__(
        self,
        api_key: str | None = None,
        model: str = DEFAULT_MODEL,
        base_url: str | None = None,
        client: httpx.Client | None = None,
        timeout: float = 60.0,
    ) -> None:
        self.api_key = api_key if api_key is not None else os.environ.get("OPENAI_API_KEY", "")
        self.base_url = (base_url or os.environ.get("OPENAI_BASE_URL", "")).rstrip("/")
        self.model = model
        self.timeout = timeout
        self._client = client

    def generate_config(self, parsed: ParsedInput) -> str:
        """Ask the model for a configuration and strip any markdown fences."""
        if parsed is None:
            raise AIError("parsed input cannot be None")
        if not self.base_url:
            raise AIError("OpenAI client not initialized")

        payload = {
            "model": self.model,
            "messages": [{"role": "user", "content": self.build_prompt(parsed)}],
        }
        try:
            data = self._post(payload)
        except (httpx.HTTPError, ValueError) as exc:
            raise AIError(f"failed to call OpenAI API: {exc}") from exc

        choices = data.get("choices") if isinstance(data, dict) else None
        if not choices:
            raise AIError("no response choices returned from OpenAI")
        content = (choices[0].get("message") or {}).get("content") or ""
        return clean_response(content)

    def _post(self, payload: dict) -> dict:
        url = f"{self.base_url}/chat/completions"
        headers = {"Authorization": f"Bearer {self.api_key}"}
        if self._client is not None:
            response = self._client.post(url, json=payload, headers=headers)
            response.raise_for_status()
            return response.json()
        with httpx.Client(timeout=self.timeout) as client:
            response = client.post(url, json=payload, headers=headers)
            response.raise_for_status()
            return response.json()

    def build_prompt(self, parsed: ParsedInput) -> str:
        """Return the prompt sent to the model for the parsed input."""
        parts = [
            "Generate a Terraform configuration based on the following requirements:\n\n",
            f"Description: {parsed.original_text}\n",
        ]
        if parsed.cloud_provider:
            parts.append(f"Cloud Provider: {parsed.cloud_provider}\n")
        if parsed.resources:
            parts.append("Resources identified:\n")
            parts.extend(f"- {resource.type}: {resource.name}\n" for resource in parsed.resources)
        if parsed.requirements:
            parts.append("Requirements:\n")
            parts.extend(f"- {requirement}\n" for requirement in parsed.requirements)
        parts.append(_PROMPT_TAIL)
        return "".join(parts)


def new_provider(provider_type: str) -> Provider:
    """Return the provider for a type name; unknown names fall back to OpenAI."""
    if provider_type.lower() == "openai":
        return OpenAIProvider()
    return OpenAIProvider()