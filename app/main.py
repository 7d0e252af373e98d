import logging
import os

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

# .env values fill in whatever the process environment leaves unset
load_dotenv()

# Server and HTTP client loggers follow LOG_LEVEL too
FRAMEWORK_LOGGERS = ("uvicorn", "uvicorn.error", "uvicorn.access", "fastapi", "starlette", "httpx")


def configure_logging(level_name: str) -> int:
    level = getattr(logging, level_name.upper(), logging.INFO)
    root = logging.getLogger()
    root.setLevel(level)
    if not root.handlers:
        handler = logging.StreamHandler()
        handler.setLevel(level)
        handler.setFormatter(logging.Formatter("%(asctime)s | %(levelname)s | %(name)s | %(message)s"))
        root.addHandler(handler)
    for name in FRAMEWORK_LOGGERS:
        logging.getLogger(name).setLevel(level)
    return level


# Root handler before the routers import, so their module loggers inherit it
level = configure_logging(os.getenv("LOG_LEVEL", "INFO"))
logger = logging.getLogger(__name__)
logger.info(f"Logging configured | level={logging.getLevelName(level)}")

from app.api.routers.chat import router as chat_router  # noqa: E402
from app.config import get_settings  # noqa: E402

settings = get_settings()
logger.info(
    f"Chat routing configured | threshold={settings.local_model_threshold} "
    f"local_configured={settings.local_configured} local_model={settings.local_model_name} "
    f"remote_configured={settings.remote_configured} remote_model={settings.remote_model_name}"
)

app = FastAPI(title="Chat Router")

# Browser frontends calling /api/chat; localhost by default
ALLOW_ORIGINS = os.getenv("ALLOW_ORIGINS", "").strip()
ALLOW_ORIGIN_REGEX = os.getenv("ALLOW_ORIGIN_REGEX", "https?://(localhost|127\\.0\\.0\\.1)(:\\d+)?")

cors_kwargs = {
    "allow_credentials": True,
    "allow_methods": ["*"],
    "allow_headers": ["*"],
}
if ALLOW_ORIGINS:
    origins = [o.strip() for o in ALLOW_ORIGINS.split(",") if o.strip()]
    cors_kwargs["allow_origins"] = origins
else:
    cors_kwargs["allow_origin_regex"] = ALLOW_ORIGIN_REGEX

app.add_middleware(CORSMiddleware, **cors_kwargs)

app.include_router(chat_router)


# Liveness check, independent of backend configuration
@app.get("/health")
async def health():
    logger.debug("Health check endpoint hit")
    return {"status": "ok"}
