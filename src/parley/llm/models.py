from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_SYSTEM_PROMPT = "You are a helpful assistant."


class ChatRole(str, Enum):
    """Role of a chat message sender.

    Values are the lowercase names chat-completion APIs expect; Gemini maps
    them itself.
    """

    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"


class ChatMessage(BaseModel):
    """Represents a chat message in a conversation."""

    model_config = ConfigDict(frozen=True)

    role: ChatRole = Field(description="Role of the message sender: 'user', 'assistant', or 'system'")
    content: str = Field(description="Content of the message")

    def to_wire(self) -> dict[str, str]:
        """Return the {"role", "content"} dict sent to chat-completion APIs."""
        return {"role": self.role.value, "content": self.content}
