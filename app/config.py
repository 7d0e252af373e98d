import logging
import os
import re
from dataclasses import dataclass, field
from functools import lru_cache
from typing import Mapping, Optional

logger = logging.getLogger(__name__)

TOGETHER_CHAT_URL = "https://api.together.xyz/v1/chat/completions"

DEFAULT_LOCAL_MODEL_THRESHOLD = 2000
DEFAULT_LOCAL_MODEL_NAME = "qwen:7b"
DEFAULT_REMOTE_MODEL_NAME = "deepseek-coder-6.7b-instruct"

# Leading integer, same tolerance as parseInt: "1500", " 1500", "1500chars"
_LEADING_INT = re.compile(r"\s*([+-]?\d+)")


@dataclass(frozen=True)
class Settings:
    """Routing and backend configuration, built once from the environment."""

    local_model_threshold: int = DEFAULT_LOCAL_MODEL_THRESHOLD
    local_model_url: Optional[str] = None
    local_model_name: str = DEFAULT_LOCAL_MODEL_NAME
    together_api_key: Optional[str] = field(default=None, repr=False)
    remote_model_name: str = DEFAULT_REMOTE_MODEL_NAME
    remote_api_url: str = TOGETHER_CHAT_URL

    @property
    def local_configured(self) -> bool:
        return bool(self.local_model_url)

    @property
    def remote_configured(self) -> bool:
        return bool(self.together_api_key)


def _env(environ: Mapping[str, str], name: str) -> Optional[str]:
    # Empty strings count as unset
    value = environ.get(name)
    return value or None


def parse_threshold(raw: Optional[str]) -> int:
    if not raw:
        return DEFAULT_LOCAL_MODEL_THRESHOLD
    match = _LEADING_INT.match(raw)
    if not match:
        logger.warning(f"Ignoring non-numeric LOCAL_MODEL_THRESHOLD={raw!r}; using {DEFAULT_LOCAL_MODEL_THRESHOLD}")
        return DEFAULT_LOCAL_MODEL_THRESHOLD
    return int(match.group(1))


def load_settings(environ: Optional[Mapping[str, str]] = None) -> Settings:
    env = os.environ if environ is None else environ
    return Settings(
        local_model_threshold=parse_threshold(env.get("LOCAL_MODEL_THRESHOLD")),
        local_model_url=_env(env, "LOCAL_MODEL_URL") or _env(env, "OLLAMA_URL"),
        local_model_name=_env(env, "LOCAL_MODEL_NAME") or DEFAULT_LOCAL_MODEL_NAME,
        together_api_key=_env(env, "TOGETHER_API_KEY"),
        remote_model_name=_env(env, "REMOTE_MODEL_NAME") or DEFAULT_REMOTE_MODEL_NAME,
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Process-wide settings; also the FastAPI dependency for the chat route."""
    return load_settings()
