"""
Pydantic models for persisted conversation sessions and their messages.
"""

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel

Role = Literal["user", "assistant"]


class ConversationSession(BaseModel):
    id: str
    created_at: datetime
    updated_at: datetime


class ConversationMessage(BaseModel):
    """One turn of a session; ordered by ``created_at``."""

    role: Role
    content: str
    created_at: Optional[datetime] = None


__all__ = ["ConversationMessage", "ConversationSession", "Role"]
