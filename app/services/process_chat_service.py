import logging
from enum import Enum
from typing import Any, List, Optional

import httpx

from app.config import Settings
from app.services.llm_service import ChatBackend, LocalChatBackend, RemoteChatBackend

logger = logging.getLogger(__name__)


class Backend(str, Enum):
    LOCAL = "local"
    REMOTE = "remote"


def _content_of(message: Any) -> str:
    content = message.get("content") if isinstance(message, dict) else None
    return str(content) if content else ""


def proxy_length(messages: List[Any]) -> int:
    """Character count of all message contents joined by single spaces.

    A cheap stand-in for the prompt's token count; whitespace is not collapsed.
    """
    return len(" ".join(_content_of(m) for m in messages))


def choose_backend(messages: List[Any], settings: Settings) -> Backend:
    use_local = proxy_length(messages) < settings.local_model_threshold
    if use_local and settings.local_configured:
        return Backend.LOCAL
    return Backend.REMOTE


def build_backend(backend: Backend, settings: Settings, transport: Optional[httpx.AsyncBaseTransport] = None) -> ChatBackend:
    if backend is Backend.LOCAL:
        return LocalChatBackend(settings, transport=transport)
    return RemoteChatBackend(settings, transport=transport)


async def route_and_call(messages: List[Any], settings: Settings, transport: Optional[httpx.AsyncBaseTransport] = None) -> str:
    """Send the conversation to the cheapest suitable backend and return its reply.

    Short prompts go to the local model when one is configured, everything else
    to the remote API. Failures from the chosen backend propagate as-is; the
    other backend is never tried.
    """
    backend = choose_backend(messages, settings)
    logger.info(
        f"Routing chat | backend={backend.value} length={proxy_length(messages)} "
        f"threshold={settings.local_model_threshold} messages_count={len(messages)}"
    )
    return await build_backend(backend, settings, transport=transport).send(messages)
