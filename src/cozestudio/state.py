from pydantic import BaseModel, Field

from cozestudio.streaming import ToolCallRegistry


class SessionState(BaseModel):
    """Everything assembled while one response stream is decoded.

    ``full_response`` only ever grows; use :meth:`append` rather than
    assigning to it.  ``title`` holds the most recent title the backend
    sent, if any.
    """

    full_response: str = ""
    title: str | None = None
    tool_calls: ToolCallRegistry = Field(default_factory=ToolCallRegistry)

    model_config = {"arbitrary_types_allowed": True}

    def append(self, delta: str) -> str:
        self.full_response += delta
        return self.full_response
