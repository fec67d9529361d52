from datetime import datetime
from typing import List

from pydantic import Field, field_validator

from ....domain.models import Message
from .common import ApiResponse, CamelModel

MAX_MESSAGE_LENGTH = 500


class SendMessageRequest(CamelModel):
    username: str = Field(min_length=1)
    content: str

    @field_validator("content")
    @classmethod
    def strip_content(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Message content cannot be empty")
        if len(value) > MAX_MESSAGE_LENGTH:
            raise ValueError(f"Message content must be at most {MAX_MESSAGE_LENGTH} characters")
        return value


class AcceptMessagesRequest(CamelModel):
    accept_messages: bool


class MessageResponse(CamelModel):
    id: str
    content: str
    created_at: datetime

    @classmethod
    def from_domain(cls, message: Message) -> "MessageResponse":
        return cls(id=message.id, content=message.content, created_at=message.created_at)


class MessagesResponse(ApiResponse):
    messages: List[MessageResponse]


class AcceptanceResponse(ApiResponse):
    is_accepting_messages: bool
