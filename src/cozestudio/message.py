import time
import uuid
from enum import Enum

from pydantic import BaseModel, Field, field_serializer

from cozestudio.streaming import ToolCall


class MessageRole(Enum):
    ASSISTANT = "assistant"
    USER = "user"


class Message(BaseModel):
    """One side of a chat exchange, as handed to the message store."""

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    conversation_id: str
    role: MessageRole
    content: str
    tool_calls: list[ToolCall] | None = None
    created_at: int = Field(default_factory=lambda: int(time.time()))

    @field_serializer('role')
    def serialize_role(self, role: MessageRole, _info) -> str:
        return role.value

    @field_serializer('tool_calls')
    def serialize_tool_calls(self, tool_calls: list[ToolCall] | None, _info):
        if tool_calls is None:
            return None
        return [t.to_dict() for t in tool_calls]
