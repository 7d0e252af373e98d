import logging
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
import pydantic

from app.config import Settings, get_settings
from app.schemas.message import ChatRequest, ChatResponse, ErrorResponse, Message
from app.services.errors import MethodNotAllowed, ValidationError
from app.services.process_chat_service import route_and_call

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["chat"])

# Every verb is routed here so non-POST requests get the JSON 405 body
# instead of the framework's default one.
CHAT_METHODS = ["GET", "POST", "PUT", "PATCH", "DELETE", "HEAD", "OPTIONS"]


def _error(status_code: int, message: str, headers: Optional[Dict[str, str]] = None) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=ErrorResponse(error=message).model_dump(), headers=headers)


async def _read_messages(request: Request) -> List[Any]:
    if request.method != "POST":
        raise MethodNotAllowed("Method not allowed")
    try:
        body = await request.json()
    except ValueError:
        body = None
    try:
        req = ChatRequest.model_validate(body)
    except pydantic.ValidationError:
        raise ValidationError("Invalid request body: messages array required")
    return [m.model_dump(exclude_unset=True) if isinstance(m, Message) else m for m in req.messages]


@router.api_route(
    "/chat",
    methods=CHAT_METHODS,
    response_model=ChatResponse,
    responses={400: {"model": ErrorResponse}, 405: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def chat_endpoint(request: Request, settings: Settings = Depends(get_settings)):
    try:
        messages = await _read_messages(request)
    except MethodNotAllowed as e:
        logger.info(f"Rejected chat request | method={request.method}")
        return _error(e.status_code, str(e), headers={"Allow": "POST"})
    except ValidationError as e:
        logger.info("Rejected chat request | invalid body")
        return _error(e.status_code, str(e))

    try:
        reply = await route_and_call(messages, settings)
    except Exception as e:
        logger.exception("Chat endpoint failed")
        return _error(500, str(e) or "Internal server error")
    return ChatResponse(message=reply)
