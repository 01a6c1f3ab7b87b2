"""Conversation data models."""
from dataclasses import dataclass
from typing import Dict

USER = "user"
ASSISTANT = "assistant"
ROLES = (USER, ASSISTANT)


@dataclass(frozen=True)
class Turn:
    """Represents a single message in a conversation."""
    role: str  # "user" or "assistant"
    content: str

    def to_message(self) -> Dict[str, str]:
        """Chat-completion message form of this turn."""
        return {"role": self.role, "content": self.content}
