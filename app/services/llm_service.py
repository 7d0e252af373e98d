import os
import logging
from typing import Any, Callable, Dict, List, Optional, Sequence

import httpx

from app.config import Settings
from app.services.errors import BackendHTTPError, ConfigurationError

logger = logging.getLogger(__name__)

# Logging config toggles via environment
LOG_HTTP_BODY = os.getenv("LOG_HTTP_BODY", "false").lower() == "true"

REMOTE_TEMPERATURE = 0.2
REMOTE_MAX_TOKENS = 1024

Extractor = Callable[[Any], Optional[str]]


# Reply shapes differ between backends. Ollama's /api/chat answers with
# {"message": {"content": ...}}, OpenAI-compatible servers (llama.cpp, vLLM,
# LM Studio, together.ai) with {"choices": [{"message": {"content": ...}}]}.
def ollama_message_content(data: Any) -> Optional[str]:
    message = data.get("message") if isinstance(data, dict) else None
    return message.get("content") if isinstance(message, dict) else None


def openai_choice_content(data: Any) -> Optional[str]:
    choices = data.get("choices") if isinstance(data, dict) else None
    if not isinstance(choices, list) or not choices:
        return None
    first = choices[0]
    message = first.get("message") if isinstance(first, dict) else None
    return message.get("content") if isinstance(message, dict) else None


def extract_content(data: Any, extractors: Sequence[Extractor]) -> str:
    """Return the first non-empty text any extractor finds, in order, else ""."""
    for extractor in extractors:
        content = extractor(data)
        if isinstance(content, str) and content:
            return content
    return ""


class ChatBackend:
    """One chat-completion backend: build payload, POST it, check status, extract text.

    Subclasses supply the endpoint, headers, payload and the ordered list of
    reply extractors. ``transport`` is handed to ``httpx.AsyncClient`` and lets
    tests swap the network for an ``httpx.MockTransport``.
    """

    name = "backend"
    error_prefix = "Model call failed"
    include_body_in_error = False
    extractors: Sequence[Extractor] = ()

    def __init__(self, settings: Settings, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.settings = settings
        self.transport = transport

    def endpoint(self) -> str:
        raise NotImplementedError

    def headers(self) -> Dict[str, str]:
        return {"Content-Type": "application/json"}

    def build_payload(self, messages: List[Any]) -> Dict[str, Any]:
        raise NotImplementedError

    async def send(self, messages: List[Any]) -> str:
        # Configuration problems surface before any network traffic
        url = self.endpoint()
        headers = self.headers()
        payload = self.build_payload(messages)
        logger.debug(f"{self.name} request | url={url} model={payload.get('model')} messages_count={len(messages)}")

        async with httpx.AsyncClient(transport=self.transport, timeout=None) as client:
            response = await client.post(url, json=payload, headers=headers)

        logger.debug(f"{self.name} response status={response.status_code}")
        if not response.is_success:
            body = response.text if self.include_body_in_error else None
            raise BackendHTTPError(self.error_prefix, response.status_code, response.reason_phrase, body)

        data = response.json()
        if LOG_HTTP_BODY:
            logger.debug(f"{self.name} response body={data}")
        else:
            logger.debug(f"{self.name} response body keys={list(data.keys()) if isinstance(data, dict) else type(data)}")
        return extract_content(data, self.extractors)


class LocalChatBackend(ChatBackend):
    """Locally hosted model, e.g. Ollama at http://localhost:11434/api/chat."""

    name = "local"
    error_prefix = "Local model call failed"
    extractors = (ollama_message_content, openai_choice_content)

    def endpoint(self) -> str:
        if not self.settings.local_model_url:
            raise ConfigurationError("LOCAL_MODEL_URL environment variable is not set")
        return self.settings.local_model_url

    def build_payload(self, messages: List[Any]) -> Dict[str, Any]:
        return {
            "model": self.settings.local_model_name,
            "messages": messages,
            "stream": False,
        }


class RemoteChatBackend(ChatBackend):
    """Hosted together.ai chat completions, authenticated with a bearer token."""

    name = "remote"
    error_prefix = "Remote model call failed"
    include_body_in_error = True
    extractors = (openai_choice_content,)

    def endpoint(self) -> str:
        if not self.settings.together_api_key:
            raise ConfigurationError("TOGETHER_API_KEY environment variable is not set")
        return self.settings.remote_api_url

    def headers(self) -> Dict[str, str]:
        return {
            **super().headers(),
            "Authorization": f"Bearer {self.settings.together_api_key}",
        }

    def build_payload(self, messages: List[Any]) -> Dict[str, Any]:
        return {
            "model": self.settings.remote_model_name,
            "messages": messages,
            "temperature": REMOTE_TEMPERATURE,
            "max_tokens": REMOTE_MAX_TOKENS,
        }
