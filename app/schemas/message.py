from typing import Annotated, Any, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class Message(BaseModel):
    # Content may be missing; extra keys are forwarded untouched
    model_config = ConfigDict(extra="allow")

    role: Optional[str] = None
    content: Optional[Any] = None


# Items that do not fit Message still pass as-is; they count as empty content when routing
ConversationItem = Annotated[Union[Message, Any], Field(union_mode="left_to_right")]


class ChatRequest(BaseModel):
    messages: List[ConversationItem]


class ChatResponse(BaseModel):
    message: str


class ErrorResponse(BaseModel):
    error: str
